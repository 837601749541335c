# planboard/render/inline.py
from __future__ import annotations

from html import escape

from ..layout import GridLayout
from ..model import AppState
from ..schema import state_to_payload
from ..util.jsonio import dumps
from .css import CSS_BLOCK
from .markup import board_markup
from .shell import HTML_SHELL

_DATA_MARKER = "__DATA_JSON__"
_BODY_MARKER = "__BODY_MARKUP__"


def _data_json(payload: dict) -> str:
    return dumps(payload).replace("</", r"<\/")  # script-safe injection


def build_html(payload: dict, body: str, *, title: str = "planboard") -> str:
    """Fill the shell: body markup first, data JSON last (so data can't inject markers)."""
    if not isinstance(payload, dict):
        raise TypeError(f"payload must be dict, got {type(payload).__name__}")
    if HTML_SHELL.count(_DATA_MARKER) != 1:
        raise RuntimeError(f"HTML_SHELL must contain {_DATA_MARKER} exactly once")

    html = (
        HTML_SHELL
        .replace("__TITLE__", escape(title))
        .replace("__CSS_BLOCK__", CSS_BLOCK)
        .replace(_BODY_MARKER, body.replace(_DATA_MARKER, ""))
    )
    html = html.replace(_DATA_MARKER, _data_json(payload))
    return html


def render_timeline_html(grid: GridLayout, state: AppState, *, title: str = "planboard") -> str:
    window = grid.window
    full_title = f"{title} {window.start.isoformat()} to {window.end.isoformat()}"
    return build_html(state_to_payload(state), board_markup(grid, state), title=full_title)


__all__ = ["build_html", "render_timeline_html"]
