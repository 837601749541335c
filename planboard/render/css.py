# planboard/render/css.py
from __future__ import annotations

CSS_BLOCK = r"""
:root {
  --pb-bg: #ffffff;
  --pb-fg: #1f2933;
  --pb-grid: #e4e7eb;
  --pb-today: #fff8e1;
  --pb-weekend: #f5f7fa;
  --pb-group: #eef2f7;
}
* { box-sizing: border-box; }
body { margin: 0; font: 13px/1.3 system-ui, sans-serif; color: var(--pb-fg); background: var(--pb-bg); }
.pb-board { position: relative; }
.pb-month, .pb-day { position: absolute; border-left: 1px solid var(--pb-grid); text-align: center; overflow: hidden; white-space: nowrap; }
.pb-month { font-weight: 600; height: 24px; line-height: 24px; }
.pb-day { top: 24px; height: 24px; line-height: 24px; font-size: 11px; }
.pb-col { position: absolute; border-left: 1px solid var(--pb-grid); }
.pb-col.weekend { background: var(--pb-weekend); }
.pb-col.today { background: var(--pb-today); }
.pb-group { position: absolute; left: 0; background: var(--pb-group); font-weight: 600; padding: 4px 8px; }
.pb-row { position: absolute; left: 0; border-top: 1px solid var(--pb-grid); }
.pb-row-name { position: absolute; left: 0; padding: 4px 8px; overflow: hidden; white-space: nowrap; text-overflow: ellipsis; }
.pb-bar { position: absolute; border-radius: 4px; padding: 0 6px; color: #111; overflow: hidden; white-space: nowrap; text-overflow: ellipsis; font-size: 12px; }
.pb-bar.pinned { outline: 2px solid #333; }
.pb-bar.clip-left { border-top-left-radius: 0; border-bottom-left-radius: 0; }
.pb-bar.clip-right { border-top-right-radius: 0; border-bottom-right-radius: 0; }
"""
