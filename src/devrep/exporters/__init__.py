from __future__ import annotations

from .json import write_json

__all__ = ["write_json"]
