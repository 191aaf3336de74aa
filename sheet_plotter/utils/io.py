"""File IO utilities."""

from __future__ import annotations

import unicodedata

import chardet


def detect_encoding(raw: bytes) -> str:
    """Detect the encoding of raw text bytes."""

    detection = chardet.detect(raw)
    encoding = detection.get("encoding") or "utf-8"
    # utf-8-sig also strips the BOM Excel writes
    if encoding.lower() in {"utf-8", "ascii"}:
        return "utf-8-sig"
    return encoding


def safe_filename(filename: str) -> str:
    """Return a filesystem safe filename."""

    normalized = unicodedata.normalize("NFKD", filename)
    sanitized = [c for c in normalized if c.isalnum() or c in {"-", "_", "."}]
    return "".join(sanitized)
