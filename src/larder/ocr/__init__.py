"""Receipt OCR utilities."""

from .pipeline import SmartScanResult, SmartScanService
from .scanner import ReceiptScanner, build_receipt_scanner, decode_image_payload

__all__ = [
    "ReceiptScanner",
    "SmartScanResult",
    "SmartScanService",
    "build_receipt_scanner",
    "decode_image_payload",
]
