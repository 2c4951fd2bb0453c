from __future__ import annotations

from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any


def camel_case(name: str) -> str:
    head, *rest = name.rstrip("_").split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_jsonable(obj: Any) -> Any:
    """Turn records into plain dicts/lists with camelCase keys.

    A field can override its key with ``field(metadata={"name": ...})``.
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.metadata.get("name", camel_case(f.name)): to_jsonable(getattr(obj, f.name))
            for f in fields(obj)
        }
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (tuple, list)):
        return [to_jsonable(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    return obj
