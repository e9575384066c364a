"""FIT decode and encode adapters."""

from __future__ import annotations

from fitmerge.codec.decoder import check_integrity, decode
from fitmerge.codec.encoder import FitEncoder

__all__ = ["FitEncoder", "check_integrity", "decode"]
