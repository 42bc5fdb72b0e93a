"""RAML 0.8 document generator.

Unlike the Swagger rendering, parameters are collected from every case. URI
parameters live on the resource, so tests sharing a path share them.
Response schemas are embedded per response as self-contained JSON schema
strings instead of going to a shared definitions table.
"""

import json

from pydantic import BaseModel

from api_contract.docs.base import DocGenerator, ParamDedup, Serializer, drop_empty, yaml_serializer
from api_contract.docs.reflector import raml_type, reflect
from api_contract.encoding import dumps_example, to_jsonable
from api_contract.suite.base import ApiTest, Param

RAML_VERSION = "0.8"
JSON_SCHEMA_DRAFT = "http://json-schema.org/draft-04/schema#"


class RamlSeed(BaseModel):
    title: str = ""
    version: str = ""
    base_uri: str = ""
    media_type: str = ""
    protocols: list[str] = []


def named_parameter(name: str, param: Param) -> dict:
    return drop_empty(
        {
            "displayName": name,
            "description": param.description,
            "type": raml_type(param.value),
            "required": param.required,
            "default": to_jsonable(param.value),
        }
    )


def schema_document(value) -> str:
    """Standalone JSON schema for ``value``, named sub-schemas inlined."""
    schema, definitions = reflect(value)
    document = {"$schema": JSON_SCHEMA_DRAFT, **schema}
    if definitions:
        document["definitions"] = dict(sorted(definitions.items()))
    return json.dumps(document, indent=2, sort_keys=True)


class RamlGenerator(DocGenerator):
    def __init__(self, seed: RamlSeed, serializer: Serializer = yaml_serializer):
        super().__init__(serializer)
        self.seed = seed

    def seed_document(self) -> dict:
        return drop_empty(
            {
                "title": self.seed.title,
                "version": self.seed.version,
                "baseUri": self.seed.base_uri,
                "mediaType": self.seed.media_type,
                "protocols": list(self.seed.protocols),
            }
        )

    def build_operation(self, test: ApiTest, resource: dict, definitions: dict[str, dict]) -> dict:
        uri_parameters = resource.setdefault("uriParameters", {})
        headers = {}
        query_parameters = {}
        responses = {}
        dedup = ParamDedup()
        description = test.description

        for case in test.cases:
            description = case.description

            for location, name, param in dedup.fresh(case):
                if location == "path":
                    uri_parameters[name] = named_parameter(name, param)
                elif location == "header":
                    headers[name] = named_parameter(name, param)
                else:
                    query_parameters[name] = named_parameter(name, param)

            response = {"description": case.description}
            if case.expected_data is not None:
                response["body"] = {
                    "schema": schema_document(case.expected_data),
                    "example": dumps_example(case.expected_data),
                }
            # a later case with the same status code replaces the earlier one
            responses[case.expected_http_code] = response

        return drop_empty(
            {
                "description": description,
                "headers": headers,
                "queryParameters": query_parameters,
                "responses": responses,
            }
        )

    def finish_document(self, document: dict, resources: dict[str, dict], definitions: dict[str, dict]) -> None:
        for path, resource in resources.items():
            if not resource.get("uriParameters"):
                resource.pop("uriParameters", None)
            document[path] = resource

    def render(self, document: dict) -> bytes:
        return f"#%RAML {RAML_VERSION}\n".encode("utf-8") + super().render(document)
