"""
Serialization Utility Module
Converts pipeline records into JSON-compatible structures
"""

import dataclasses
from enum import Enum
from typing import Any

from pydantic import BaseModel


def to_jsonable(value: Any) -> Any:
    """
    Recursively convert records to dicts, lists and scalars

    Dataclass fields named with a trailing underscore to dodge Python
    keywords (``from_``) are emitted without it. Schema.org models keep
    their JSON-LD keys (``@type``, ``reservationFor``...).
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field.name.rstrip("_"): to_jsonable(getattr(value, field.name))
            for field in dataclasses.fields(value)
        }
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value
