"""Canonical JSON form of example values.

Request bodies, expected response data and document examples all go through
``to_jsonable`` so that a pydantic model, a dataclass and a plain dict holding
the same data look identical on the wire. Fields set to ``None`` are omitted.
"""

import json
from functools import lru_cache
from typing import Any

from pydantic import PydanticSchemaGenerationError, TypeAdapter
from pydantic_core import PydanticSerializationError

from api_contract.errors import EncodingError


@lru_cache(maxsize=256)
def _adapter(tp: type) -> TypeAdapter:
    return TypeAdapter(tp)


def to_jsonable(value: Any) -> Any:
    """Return ``value`` as plain JSON data (dicts, lists, str, numbers, bools)."""
    if value is None:
        return None
    try:
        return _adapter(type(value)).dump_python(value, mode="json", by_alias=True, exclude_none=True)
    except (PydanticSchemaGenerationError, PydanticSerializationError, TypeError) as e:
        raise EncodingError(f"value of type '{type(value).__name__}' is not JSON serializable: {e}") from e


def encode_json(value: Any) -> bytes:
    return json.dumps(to_jsonable(value)).encode("utf-8")


def dumps_example(value: Any) -> str:
    """Indented, human-readable JSON rendering used in generated documents."""
    return json.dumps(to_jsonable(value), indent=2, ensure_ascii=False)
