"""Schema reflection: derive a JSON schema from an example value.

Plain values (scalars, lists, dicts) are reflected from their content.
pydantic models and dataclasses are reflected from their declared types via
pydantic's JSON schema generation; every named type is hoisted into a
definitions table and referenced by ``#/definitions/<Name>``.
"""

import dataclasses
import datetime
import enum
from typing import Any

from pydantic import BaseModel, PydanticSchemaGenerationError, PydanticUserError, TypeAdapter

from api_contract.errors import SchemaReflectionError

REF_TEMPLATE = "#/definitions/{model}"

# Keywords kept from pydantic output; everything else has no Swagger 2.0 meaning here.
_KEPT_KEYWORDS = (
    "$ref",
    "type",
    "format",
    "title",
    "description",
    "default",
    "enum",
    "pattern",
    "required",
)


def _is_named_type(tp: Any) -> bool:
    return isinstance(tp, type) and (issubclass(tp, BaseModel) or dataclasses.is_dataclass(tp))


def _collapse_optional(schema: dict) -> dict:
    """``anyOf: [X, null]`` becomes X, keeping the outer annotations."""
    variants = schema.get("anyOf")
    if not variants:
        return schema
    non_null = [v for v in variants if v.get("type") != "null"]
    if len(non_null) != 1:
        return schema
    merged = {k: v for k, v in schema.items() if k != "anyOf"}
    for key, value in non_null[0].items():
        merged.setdefault(key, value)
    return merged


def _normalize(schema: dict) -> dict:
    schema = _collapse_optional(schema)
    result = {k: schema[k] for k in _KEPT_KEYWORDS if k in schema}
    if result.get("default", "") is None:
        del result["default"]

    if "anyOf" in schema:
        result["anyOf"] = [_normalize(v) for v in schema["anyOf"]]
    if "properties" in schema:
        result["properties"] = {name: _normalize(prop) for name, prop in schema["properties"].items()}
    if "items" in schema and isinstance(schema["items"], dict):
        result["items"] = _normalize(schema["items"])
    if isinstance(schema.get("additionalProperties"), dict):
        result["additionalProperties"] = _normalize(schema["additionalProperties"])
    elif isinstance(schema.get("additionalProperties"), bool):
        result["additionalProperties"] = schema["additionalProperties"]
    return result


def _reflect_named(tp: type, definitions: dict[str, dict]) -> dict:
    try:
        raw = TypeAdapter(tp).json_schema(ref_template=REF_TEMPLATE, mode="serialization")
    except (PydanticSchemaGenerationError, PydanticUserError) as e:
        raise SchemaReflectionError(f"could not reflect type '{tp.__name__}': {e}") from e

    for name, sub in raw.pop("$defs", {}).items():
        definitions[name] = _normalize(sub)

    name = raw.get("title") or tp.__name__
    definitions[name] = _normalize(raw)
    return {"$ref": REF_TEMPLATE.format(model=name)}


def _reflect(value: Any, definitions: dict[str, dict]) -> dict:
    if _is_named_type(value):
        return _reflect_named(value, definitions)
    if _is_named_type(type(value)):
        return _reflect_named(type(value), definitions)

    if isinstance(value, enum.Enum):
        members = [m.value for m in type(value)]
        schema = _reflect(value.value, definitions)
        schema["enum"] = members
        return schema

    if isinstance(value, bool):
        return {"type": "boolean"}
    if isinstance(value, int):
        return {"type": "integer"}
    if isinstance(value, float):
        return {"type": "number"}
    if isinstance(value, (str, bytes, bytearray)):
        return {"type": "string"}
    if isinstance(value, datetime.datetime):
        return {"type": "string", "format": "date-time"}
    if isinstance(value, datetime.date):
        return {"type": "string", "format": "date"}

    if isinstance(value, dict):
        return {
            "type": "object",
            "properties": {str(k): _reflect(v, definitions) for k, v in value.items() if v is not None},
        }
    if isinstance(value, (list, tuple, set, frozenset)):
        items = list(value)
        return {"type": "array", "items": _reflect(items[0], definitions) if items else {}}

    raise SchemaReflectionError(f"could not reflect value of type '{type(value).__name__}'")


def reflect(value: Any) -> tuple[dict, dict[str, dict]]:
    """Return the schema of ``value`` and the named sub-schemas it references."""
    if value is None:
        raise SchemaReflectionError("could not reflect a missing value")
    definitions: dict[str, dict] = {}
    schema = _reflect(value, definitions)
    return schema, definitions


def simple_type(value: Any) -> str:
    """Swagger type of a header/path/query parameter value."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    raise SchemaReflectionError(f"value of complex type '{type(value).__name__}' provided, simple type expected")


def raml_type(value: Any) -> str:
    """RAML named-parameter type of a value, '' when there is none."""
    if isinstance(value, (bytes, bytearray, str)):
        return "string"
    if isinstance(value, (datetime.datetime, datetime.date)):
        return "date"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    return ""
