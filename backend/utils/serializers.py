# pydantic v2 friendly, safe for JSON request bodies
from __future__ import annotations
from typing import Any


def ensure_jsonable(obj: Any) -> Any:
    # primitives
    if isinstance(obj, (str, int, float, bool)) or obj is None:
        return obj
    # containers
    if isinstance(obj, dict):
        return {str(k): ensure_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [ensure_jsonable(v) for v in obj]
    # sets have no order; sort so request bodies are stable
    if isinstance(obj, (set, frozenset)):
        return sorted((ensure_jsonable(v) for v in obj), key=str)

    # pydantic models
    if hasattr(obj, "model_dump"):
        return ensure_jsonable(obj.model_dump())

    # last resort
    return str(obj)
