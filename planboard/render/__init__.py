"""HTML snapshot rendering of a timeline grid."""

from __future__ import annotations

from .inline import build_html, render_timeline_html

__all__ = ["build_html", "render_timeline_html"]
