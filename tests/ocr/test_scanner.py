"""Tests for the Tesseract-backed receipt scanner."""

from __future__ import annotations

import base64
import io

import pytest
from PIL import Image

from larder.errors import UnreadableImageError
from larder.ocr import scanner as scanner_module
from larder.ocr.scanner import ReceiptScanner, decode_image_payload

RECEIPT_TEXT = "CORNER SHOP\n2x Milk 2.58\nEggs 3.10\nVISA 4111 1111 1111 1111\nTOTAL 5.68\n"


def _create_image_bytes() -> bytes:
    image = Image.new("RGB", (32, 32), color=(255, 255, 255))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class DummyTesseractError(Exception):
    pass


class DummyPytesseract:
    TesseractError = DummyTesseractError

    def __init__(self, text: str = RECEIPT_TEXT, fail: bool = False):
        self.text = text
        self.fail = fail
        self.calls = []

    def image_to_string(self, image, lang):
        self.calls.append((image.mode, lang))
        if self.fail:
            raise DummyTesseractError("tesseract crashed")
        return self.text


@pytest.fixture()
def dummy_tesseract(monkeypatch):
    dummy = DummyPytesseract()
    monkeypatch.setattr(scanner_module, "pytesseract", dummy)
    return dummy


def test_decode_accepts_bytes_base64_and_data_url():
    raw = _create_image_bytes()
    encoded = base64.b64encode(raw).decode("ascii")

    for payload in (raw, encoded, f"data:image/png;base64,{encoded}"):
        image = decode_image_payload(payload)
        assert image.size == (32, 32)


@pytest.mark.parametrize("payload", [b"", b"not an image", "%%%not-base64%%%"])
def test_decode_rejects_unreadable_payloads(payload):
    with pytest.raises(UnreadableImageError):
        decode_image_payload(payload)


def test_scan_text_preprocesses_and_masks_card_numbers(dummy_tesseract):
    scanner = ReceiptScanner(lang="deu")

    text = scanner.scan_text(_create_image_bytes())

    assert dummy_tesseract.calls == [("L", "deu")]
    assert "4111 1111 1111 1111" not in text
    assert "4111********1111" in text


def test_scan_lines_and_receipt_items(dummy_tesseract):
    scanner = ReceiptScanner(lang="eng")
    payload = _create_image_bytes()

    assert scanner.scan_lines(payload)[:3] == ["CORNER SHOP", "2x Milk 2.58", "Eggs 3.10"]
    assert scanner.scan_receipt_items(payload) == [
        "CORNER SHOP",
        "Milk",
        "Eggs",
        "VISA 4111********1111",
    ]


def test_tesseract_failure_is_reported(monkeypatch):
    monkeypatch.setattr(scanner_module, "pytesseract", DummyPytesseract(fail=True))

    with pytest.raises(UnreadableImageError):
        ReceiptScanner(lang="eng").scan_text(_create_image_bytes())


def test_scanner_defaults_to_configured_language(monkeypatch, dummy_tesseract):
    monkeypatch.setenv("LARDER_OCR_LANG", "fra")
    from larder.config import get_settings

    get_settings.cache_clear()

    ReceiptScanner().scan_text(_create_image_bytes())

    assert dummy_tesseract.calls[-1][1] == "fra"
