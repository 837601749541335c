# planboard/util/jsonio.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

try:
    import orjson  # type: ignore
except Exception:  # pragma: no cover
    orjson = None  # type: ignore

JsonPath = Union[str, Path]


def dumps(obj: Any, *, pretty: bool = False) -> str:
    if orjson is not None:
        opts = orjson.OPT_INDENT_2 if pretty else 0
        return orjson.dumps(obj, option=opts).decode("utf-8")
    if pretty:
        return json.dumps(obj, ensure_ascii=False, indent=2)
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"))


def loads(s: Union[str, bytes]) -> Any:
    if orjson is not None:
        return orjson.loads(s)
    return json.loads(s)


def read_json(path: JsonPath) -> Any:
    return loads(Path(path).read_text(encoding="utf-8", errors="replace"))


def write_json(path: JsonPath, obj: Any, *, pretty: bool = True) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(dumps(obj, pretty=pretty) + "\n", encoding="utf-8")
