import enum
from dataclasses import dataclass
from datetime import date, datetime

import pytest
from pydantic import BaseModel

from api_contract.docs.reflector import raml_type, reflect, simple_type
from api_contract.errors import SchemaReflectionError
from user_api import OCTOCAT, User


class Address(BaseModel):
    city: str
    zip_code: str | None = None


class Person(BaseModel):
    name: str
    address: Address
    nicknames: list[str] = []


@dataclass
class Point:
    x: int
    y: float


class Color(str, enum.Enum):
    RED = "red"
    GREEN = "green"


class TestPrimitives:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (True, {"type": "boolean"}),
            (7, {"type": "integer"}),
            (2**40, {"type": "integer"}),
            (1.5, {"type": "number"}),
            ("text", {"type": "string"}),
            (b"raw", {"type": "string"}),
            (datetime(2020, 1, 1, 12, 0), {"type": "string", "format": "date-time"}),
            (date(2020, 1, 1), {"type": "string", "format": "date"}),
        ],
    )
    def test_primitive(self, value, expected):
        schema, definitions = reflect(value)
        assert schema == expected
        assert definitions == {}

    def test_enum(self):
        schema, _ = reflect(Color.RED)
        assert schema == {"type": "string", "enum": ["red", "green"]}


class TestContainers:
    def test_dict_properties(self):
        schema, definitions = reflect({"id": 1, "tags": ["a"], "owner": {"name": "x"}, "gone": None})
        assert schema == {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "tags": {"type": "array", "items": {"type": "string"}},
                "owner": {"type": "object", "properties": {"name": {"type": "string"}}},
            },
        }
        assert definitions == {}

    def test_empty_list(self):
        schema, _ = reflect([])
        assert schema == {"type": "array", "items": {}}

    def test_list_of_models_hoists_definition(self):
        schema, definitions = reflect([OCTOCAT])
        assert schema == {"type": "array", "items": {"$ref": "#/definitions/User"}}
        assert "User" in definitions


class TestNamedTypes:
    def test_model_is_referenced(self):
        schema, definitions = reflect(OCTOCAT)
        assert schema == {"$ref": "#/definitions/User"}
        user = definitions["User"]
        assert user["type"] == "object"
        assert user["title"] == "User"

    def test_optional_fields_collapse(self):
        _, definitions = reflect(OCTOCAT)
        props = definitions["User"]["properties"]
        assert props["login"] == {"title": "Login", "type": "string"}
        assert props["followers"]["type"] == "integer"
        assert props["site_admin"]["type"] == "boolean"
        assert props["created_at"] == {"title": "Created At", "type": "string", "format": "date-time"}
        assert "anyOf" not in props["login"]
        assert "default" not in props["login"]
        assert "required" not in definitions["User"]

    def test_nested_models_are_hoisted(self):
        person = Person(name="Ann", address=Address(city="Oslo"))
        schema, definitions = reflect(person)

        assert schema == {"$ref": "#/definitions/Person"}
        assert set(definitions) == {"Person", "Address"}
        assert definitions["Person"]["properties"]["address"] == {"$ref": "#/definitions/Address"}
        assert definitions["Person"]["required"] == ["name", "address"]
        assert definitions["Person"]["properties"]["nicknames"]["items"] == {"type": "string"}
        assert definitions["Address"]["properties"]["zip_code"]["type"] == "string"

    def test_model_class_reflects_like_instance(self):
        assert reflect(User) == reflect(OCTOCAT)

    def test_dataclass(self):
        schema, definitions = reflect(Point(x=1, y=2.0))
        assert schema == {"$ref": "#/definitions/Point"}
        assert definitions["Point"]["properties"]["x"]["type"] == "integer"
        assert definitions["Point"]["properties"]["y"]["type"] == "number"
        assert definitions["Point"]["required"] == ["x", "y"]


class TestErrors:
    def test_none_cannot_be_reflected(self):
        with pytest.raises(SchemaReflectionError):
            reflect(None)

    def test_unknown_object(self):
        with pytest.raises(SchemaReflectionError, match="object"):
            reflect(object())


class TestParameterTypes:
    def test_simple_type(self):
        assert simple_type(True) == "boolean"
        assert simple_type(3) == "integer"
        assert simple_type(3.0) == "number"
        assert simple_type("x") == "string"

    def test_simple_type_rejects_complex_values(self):
        with pytest.raises(SchemaReflectionError, match="simple type expected"):
            simple_type({"a": 1})

    def test_raml_type(self):
        assert raml_type("x") == "string"
        assert raml_type(b"x") == "string"
        assert raml_type(datetime(2020, 1, 1)) == "date"
        assert raml_type(False) == "boolean"
        assert raml_type(1) == "integer"
        assert raml_type(0.5) == "number"
        assert raml_type([1]) == ""
