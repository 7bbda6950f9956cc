"""Receipt and grocery-list text extraction using Tesseract."""

from __future__ import annotations

import base64
import binascii
import io
import logging
from typing import List, Optional, Union

from PIL import Image, ImageFilter, ImageOps, UnidentifiedImageError

try:  # pragma: no cover - import guarded for environments without pytesseract
    import pytesseract
except ImportError:  # pragma: no cover
    pytesseract = None  # type: ignore[assignment]

from larder import metrics
from larder.errors import UnreadableImageError
from larder.ocr.heuristics import mask_card_numbers, probable_item_names, split_lines

logger = logging.getLogger(__name__)

ImagePayload = Union[bytes, str]

MAX_IMAGE_BYTES = 10 * 1024 * 1024  # 10 MiB


def _payload_bytes(payload: ImagePayload) -> bytes:
    if isinstance(payload, bytes):
        return payload

    encoded = payload.strip()
    if encoded.startswith("data:"):
        _, _, encoded = encoded.partition(",")
    try:
        return base64.b64decode(encoded, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise UnreadableImageError("Image data is not valid base64.") from exc


def decode_image_payload(payload: ImagePayload) -> Image.Image:
    """Decode raw bytes, base64 text or a ``data:`` URL into a PIL image."""

    blob = _payload_bytes(payload)
    if not blob:
        raise UnreadableImageError("Image data is empty.")
    if len(blob) > MAX_IMAGE_BYTES:
        raise UnreadableImageError(
            f"Image exceeds {MAX_IMAGE_BYTES // (1024 * 1024)} MiB limit."
        )
    try:
        image = Image.open(io.BytesIO(blob))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise UnreadableImageError("Image data is not a supported image format.") from exc
    return image


class ReceiptScanner:
    """Run OCR over an image and expose text, lines or probable item names."""

    def __init__(self, *, lang: str | None = None) -> None:
        if lang is None:
            from larder.config import get_settings

            lang = get_settings().ocr_default_lang
        self._lang = lang

    @staticmethod
    def _preprocess(image: Image.Image) -> Image.Image:
        processed = ImageOps.exif_transpose(image)
        processed = ImageOps.grayscale(processed)
        processed = ImageOps.autocontrast(processed)
        return processed.filter(ImageFilter.MedianFilter(size=3))

    def scan_text(self, payload: ImagePayload) -> str:
        """Full OCR text of the image with card numbers masked."""

        if pytesseract is None:  # pragma: no cover - guard for missing dependency
            raise UnreadableImageError(
                "pytesseract is not installed. Install OCR extras to enable scanning."
            )
        image = decode_image_payload(payload)
        try:
            raw = pytesseract.image_to_string(self._preprocess(image), lang=self._lang)
        except pytesseract.TesseractError as exc:
            metrics.SCAN_JOBS.labels(stage="ocr", status="failed").inc()
            logger.warning("Tesseract failed lang=%s: %s", self._lang, exc)
            raise UnreadableImageError(f"Text recognition failed: {exc}") from exc

        metrics.SCAN_JOBS.labels(stage="ocr", status="succeeded").inc()
        text = mask_card_numbers(raw or "")
        logger.debug("OCR produced %s characters", len(text))
        return text

    def scan_lines(self, payload: ImagePayload) -> List[str]:
        return split_lines(self.scan_text(payload))

    def scan_receipt_items(self, payload: ImagePayload) -> List[str]:
        """Lines that look like purchased items, with prices and quantities stripped."""

        return probable_item_names(self.scan_lines(payload))


def build_receipt_scanner(lang: Optional[str] = None) -> ReceiptScanner:
    return ReceiptScanner(lang=lang)


__all__ = ["ImagePayload", "ReceiptScanner", "build_receipt_scanner", "decode_image_payload"]
