"""Smart receipt scan: OCR, heuristic filtering, then optional LLM clean-up."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from larder import metrics
from larder.errors import UpstreamError
from larder.llm.assistant import PantryAssistant
from larder.ocr.scanner import ImagePayload, ReceiptScanner

logger = logging.getLogger(__name__)


@dataclass
class SmartScanResult:
    items: List[str] = field(default_factory=list)
    raw: List[str] = field(default_factory=list)
    filtered: bool = False


class SmartScanService:
    """Chain extraction and AI filtering, degrading to the last stage that worked."""

    def __init__(
        self,
        *,
        scanner: ReceiptScanner,
        assistant: Optional[PantryAssistant] = None,
    ) -> None:
        self._scanner = scanner
        self._assistant = assistant

    def scan(self, payload: ImagePayload) -> SmartScanResult:
        # OCR failures propagate: there is no earlier stage to fall back to.
        raw_items = self._scanner.scan_receipt_items(payload)
        if not raw_items:
            return SmartScanResult()

        if self._assistant is None or not self._assistant.available:
            metrics.SCAN_JOBS.labels(stage="ai_filter", status="skipped").inc()
            return SmartScanResult(items=list(raw_items), raw=raw_items)

        try:
            filtered = self._assistant.filter_scanned_items(raw_items)
        except UpstreamError as exc:
            metrics.SCAN_JOBS.labels(stage="ai_filter", status="failed").inc()
            logger.warning("AI filtering failed, using raw items: %s", exc)
            return SmartScanResult(items=list(raw_items), raw=raw_items)

        metrics.SCAN_JOBS.labels(stage="ai_filter", status="succeeded").inc()
        logger.info("Smart scan kept %s of %s raw line(s)", len(filtered), len(raw_items))
        return SmartScanResult(items=filtered, raw=raw_items, filtered=True)


__all__ = ["SmartScanResult", "SmartScanService"]
