"""Shared fixtures."""

from __future__ import annotations

import struct
import zlib
from datetime import datetime
from io import BytesIO

import pytest
from PIL import Image

from openexport.core.models import ColumnSpec, ExportOptions
from openexport.core.formatting import format_currency


def make_png(width: int = 40, height: int = 20, color=(200, 30, 30, 255), mode: str = "RGBA") -> bytes:
    """Encode a solid-colour PNG in memory."""
    img = Image.new(mode, (width, height), color if mode == "RGBA" else color[:3])
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def make_png_header(width: int, height: int) -> bytes:
    """A PNG that declares *width* x *height* but carries no pixel data."""

    def chunk(kind: bytes, data: bytes) -> bytes:
        return (
            struct.pack(">I", len(data)) + kind + data
            + struct.pack(">I", zlib.crc32(kind + data) & 0xFFFFFFFF)
        )

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IDAT", b"") + chunk(b"IEND", b"")


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def moment() -> datetime:
    return datetime(2024, 3, 5, 14, 7, 9)


@pytest.fixture
def options(moment) -> ExportOptions:
    return ExportOptions(title="Residents", filename_base="residents", generated_at=moment)


@pytest.fixture
def columns() -> list[ColumnSpec]:
    return [
        ColumnSpec(key="id", label="ID"),
        ColumnSpec(key="name", label="Full Name"),
        ColumnSpec(key="barangay", label="Barangay"),
        ColumnSpec(key="balance", label="Balance", formatter=lambda v, row: format_currency(v)),
    ]


@pytest.fixture
def rows() -> list[dict]:
    return [
        {"id": 1, "name": "Juan Dela Cruz", "barangay": "Poblacion", "balance": 1234.5},
        {"id": 2, "name": 'Maria "Mia" Santos', "barangay": "San Roque", "balance": 0},
        {"id": 3, "name": "Pedro Reyes", "barangay": None, "balance": -87.25},
    ]
