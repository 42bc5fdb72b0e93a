"""Declarative models for API contract tests.

A suite is a list of ApiTest. Each ApiTest describes one endpoint (method and
path) and carries the ordered TestCase list that exercises it. The same suite
feeds both the runner and the document generators.
"""

from typing import Any, Callable

from pydantic import BaseModel, ConfigDict


class Param(BaseModel):
    """A single named input (header, path segment, or query key)."""

    value: Any
    required: bool = False
    description: str = ""


ParamMap = dict[str, Param]

# (expected, response_body, report: CaseReport) -> passed
AssertResponseFunc = Callable[[Any, bytes, Any], bool]


class TestCase(BaseModel):
    """One concrete request/response scenario for an endpoint.

    A test case knows nothing about the endpoint itself: method and path come
    from the ApiTest that owns it. Ideally every distinct response an endpoint
    can return is described by its own case.
    """

    __test__ = False

    model_config = ConfigDict(arbitrary_types_allowed=True)

    description: str = ""

    headers: ParamMap = {}
    query_params: ParamMap = {}
    path_params: ParamMap = {}
    request_body: Any = None

    expected_http_code: int
    expected_headers: dict[str, str] = {}
    expected_data: Any = None

    # Replaces the default comparison of expected_data with the response body.
    assert_response: AssertResponseFunc | None = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.expected_http_code < 300


class ApiTest(BaseModel):
    """Contract of one HTTP endpoint.

    The optional fields are opt-in capabilities: ``name`` overrides the display
    name, ``tag`` groups the operation in generated documents, ``set_up`` runs
    once before the cases and ``tear_down`` once after them. A hook signals
    failure by raising.
    """

    __test__ = False

    model_config = ConfigDict(arbitrary_types_allowed=True)

    method: str
    path: str
    description: str = ""
    cases: list[TestCase]

    name: str | None = None
    tag: str | None = None
    set_up: Callable[[], Any] | None = None
    tear_down: Callable[[], Any] | None = None

    @property
    def display_name(self) -> str:
        return self.name or f"{self.method.upper()} {self.path}"
