from __future__ import annotations

import json
import sys
from typing import Any

from pydantic import BaseModel


def to_jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, (list, tuple)):
        return [to_jsonable(d) for d in data]
    if isinstance(data, dict):
        return {k: to_jsonable(v) for k, v in data.items()}
    return data


def write_json(data: Any, out: str = "-") -> None:
    buf = json.dumps(to_jsonable(data), ensure_ascii=False, indent=2, default=str)
    if out == "-":
        sys.stdout.write(buf + "\n")
    else:
        with open(out, "w", encoding="utf-8") as f:
            f.write(buf)
