"""OpenAPI 2.0 (Swagger) document generator.

Only successful (2xx) cases describe the request: parameters and the request
body are collected from them alone. Every case, whatever its status code,
documents a response.
"""

from pydantic import BaseModel

from api_contract.docs.base import (
    DocGenerator,
    ParamDedup,
    Serializer,
    drop_empty,
    json_indent_serializer,
    json_serializer,
    yaml_serializer,
)
from api_contract.docs.reflector import reflect, simple_type
from api_contract.encoding import dumps_example, to_jsonable
from api_contract.errors import SchemaReflectionError
from api_contract.suite.base import ApiTest, Param

SWAGGER_VERSION = "2.0"


class Info(BaseModel):
    title: str = ""
    version: str = ""
    description: str = ""


class SwaggerSeed(BaseModel):
    """Document-level metadata the suite cannot know."""

    info: Info = Info()
    host: str = ""
    base_path: str = "/"
    schemes: list[str] = []
    consumes: list[str] = []
    produces: list[str] = []


def _spec_param(name: str, param: Param, location: str, required: bool) -> dict:
    try:
        param_type = simple_type(param.value)
    except SchemaReflectionError as e:
        raise SchemaReflectionError(f"could not guess type of parameter '{name}': {e}") from e
    return drop_empty(
        {
            "name": name,
            "in": location,
            "required": required,
            "description": param.description,
            "type": param_type,
            "default": to_jsonable(param.value),
        }
    )


class SwaggerGenerator(DocGenerator):
    def __init__(self, seed: SwaggerSeed, serializer: Serializer = yaml_serializer):
        super().__init__(serializer)
        self.seed = seed

    def seed_document(self) -> dict:
        doc = {
            "swagger": SWAGGER_VERSION,
            "info": drop_empty(self.seed.info.model_dump()) or {"title": "", "version": ""},
        }
        doc.update(
            drop_empty(
                {
                    "host": self.seed.host,
                    "basePath": self.seed.base_path,
                    "schemes": list(self.seed.schemes),
                    "consumes": list(self.seed.consumes),
                    "produces": list(self.seed.produces),
                }
            )
        )
        return doc

    def build_operation(self, test: ApiTest, resource: dict, definitions: dict[str, dict]) -> dict:
        parameters = []
        responses = {}
        dedup = ParamDedup()
        summary = test.description
        has_body = False

        for case in test.cases:
            if case.is_success:
                summary = case.description

                for location, name, param in dedup.fresh(case):
                    # path parameters are always required
                    required = True if location == "path" else param.required
                    parameters.append(_spec_param(name, param, location, required))

                if case.request_body is not None and not has_body:
                    schema, defs = reflect(case.request_body)
                    definitions.update(defs)
                    parameters.append(
                        {
                            "name": "body",
                            "in": "body",
                            "required": True,
                            "description": dumps_example(case.request_body),
                            "schema": schema,
                        }
                    )
                    has_body = True

            response = {"description": case.description}
            if case.expected_data is not None:
                schema, defs = reflect(case.expected_data)
                definitions.update(defs)
                response["schema"] = schema
                response["examples"] = {"application/json": to_jsonable(case.expected_data)}

            # a later case with the same status code replaces the earlier one
            responses[str(case.expected_http_code)] = response

        operation = drop_empty(
            {
                "summary": summary,
                "description": test.description,
                "parameters": parameters,
                "responses": responses,
            }
        )
        if test.tag:
            operation["tags"] = [test.tag]
        return operation

    def finish_document(self, document: dict, resources: dict[str, dict], definitions: dict[str, dict]) -> None:
        document["paths"] = resources
        if definitions:
            document["definitions"] = definitions


def swagger_yaml(seed: SwaggerSeed) -> SwaggerGenerator:
    return SwaggerGenerator(seed, yaml_serializer)


def swagger_json(seed: SwaggerSeed) -> SwaggerGenerator:
    return SwaggerGenerator(seed, json_serializer)


def swagger_json_indent(seed: SwaggerSeed) -> SwaggerGenerator:
    return SwaggerGenerator(seed, json_indent_serializer)
