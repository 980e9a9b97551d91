"""HTTP/JSON front-end."""

from __future__ import annotations

from .errors import register_exception_handlers

__all__ = ["register_exception_handlers"]
