"""
Lightweight typing aliases used at the serde boundary.

This module contains no runtime logic and is zero-IO.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "JsonDict",
]

# Envelope/payload mapping as parsed from or written to a log record.
JsonDict = dict[str, Any]
