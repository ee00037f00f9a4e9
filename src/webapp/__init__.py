"""
Flask JSON API for SnapTrade chart analysis.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - hints only
    from flask import Flask

    from snaptrade.config import Settings


def create_app(settings: "Settings | None" = None) -> "Flask":
    """
    Lazy import wrapper to avoid pulling Flask unless needed.
    """

    from .app import create_app as _create_app

    return _create_app(settings)


__all__ = ["create_app"]
