"""Document generation from test suites.

A DocGenerator folds a list of ApiTest into one API description document.
Tests sharing a path are merged into one resource keyed by HTTP method; the
concrete renderings decide what an operation looks like and where parameters
and schemas go. The document is a plain dict until the serializer renders it.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

import yaml

from api_contract.errors import EncodingError, SchemaReflectionError, SerializationError
from api_contract.suite.base import ApiTest, Param, TestCase

logger = logging.getLogger(__name__)

Serializer = Callable[[dict], bytes]

SUPPORTED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")

PARAM_LOCATIONS = ("header", "path", "query")


class _BlockDumper(yaml.SafeDumper):
    def ignore_aliases(self, data):
        return True


def _represent_str(dumper: yaml.SafeDumper, data: str):
    # multi-line strings (JSON examples and schemas) as literal blocks
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_str(data)


_BlockDumper.add_representer(str, _represent_str)


def yaml_serializer(document: dict) -> bytes:
    return yaml.dump(
        document,
        Dumper=_BlockDumper,
        sort_keys=True,
        default_flow_style=False,
        allow_unicode=True,
    ).encode("utf-8")


def json_serializer(document: dict) -> bytes:
    return json.dumps(document, sort_keys=True).encode("utf-8")


def json_indent_serializer(document: dict) -> bytes:
    return json.dumps(document, sort_keys=True, indent=4).encode("utf-8")


def normalize_path(path: str) -> str:
    """Resource paths must begin with '/'."""
    return path if path.startswith("/") else "/" + path


class ParamDedup:
    """Remembers which parameter names one operation has already emitted."""

    def __init__(self):
        self._seen: dict[str, set[str]] = {location: set() for location in PARAM_LOCATIONS}

    def fresh(self, case: TestCase) -> list[tuple[str, str, Param]]:
        """Return ``(location, name, param)`` for names not seen before, sorted by name."""
        result = []
        sources = (("header", case.headers), ("path", case.path_params), ("query", case.query_params))
        for location, params in sources:
            for name in sorted(params):
                if name in self._seen[location]:
                    continue
                self._seen[location].add(name)
                result.append((location, name, params[name]))
        return result


class DocGenerator(ABC):
    """Base class for generators that turn a test suite into a document."""

    def __init__(self, serializer: Serializer = yaml_serializer):
        self.serializer = serializer

    @abstractmethod
    def seed_document(self) -> dict:
        """Fresh top-level document built from the seed."""

    @abstractmethod
    def build_operation(self, test: ApiTest, resource: dict, definitions: dict[str, dict]) -> dict:
        """Fold the cases of ``test`` into one operation.

        May add entries to ``resource`` (resource-scoped parameters) and to
        ``definitions`` (named schemas).
        """

    @abstractmethod
    def finish_document(self, document: dict, resources: dict[str, dict], definitions: dict[str, dict]) -> None:
        """Place resources and definitions into the document."""

    def render(self, document: dict) -> bytes:
        try:
            data = self.serializer(document)
        except Exception as e:
            raise SerializationError(f"could not render document: {e}") from e
        return data.encode("utf-8") if isinstance(data, str) else data

    def generate(self, tests: list[ApiTest]) -> bytes:
        """Build and render the document for ``tests``.

        Raises SchemaReflectionError or SerializationError; a partial document
        is never returned.
        """
        document = self.seed_document()
        resources: dict[str, dict] = {}
        definitions: dict[str, dict] = {}

        for test in tests:
            method = test.method.upper()
            if method not in SUPPORTED_METHODS:
                logger.warning("skipping '%s': unsupported method %s", test.display_name, test.method)
                continue

            path = normalize_path(test.path)
            resource = resources.setdefault(path, {})
            # last test declared for a path and method wins
            try:
                resource[method.lower()] = self.build_operation(test, resource, definitions)
            except EncodingError as e:
                raise SchemaReflectionError(f"could not document '{test.display_name}': {e}") from e

        self.finish_document(
            document,
            dict(sorted(resources.items())),
            dict(sorted(definitions.items())),
        )
        return self.render(document)


def drop_empty(mapping: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None or an empty string/collection."""
    return {k: v for k, v in mapping.items() if v is not None and v != "" and v != [] and v != {}}
