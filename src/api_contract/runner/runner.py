"""Test runner: executes ApiTest cases as live HTTP requests.

Runs every test and every case strictly in order. A failure is reported and
the run goes on; nothing short-circuits across cases or tests.
"""

import logging
from pydantic import BaseModel, ConfigDict

from api_contract.encoding import encode_json
from api_contract.errors import (
    EncodingError,
    FailureKind,
    SetupError,
    TeardownError,
    TemplateError,
    TransportError,
)
from api_contract.runner.assertion import assert_response
from api_contract.runner.reporter import CaseReport, Failure, Reporter
from api_contract.runner.transport import HttpRequest, RequestsTransport, Transport
from api_contract.suite.base import ApiTest, TestCase
from api_contract.suite.url import build_url, stringify

logger = logging.getLogger(__name__)


class RunnerConfig(BaseModel):
    """Runner options. Immutable once built."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    default_headers: dict[str, str] = {}
    transport: Transport | None = None


class _CountingReporter:
    def __init__(self, reporter: Reporter):
        self.reporter = reporter
        self.failures = 0

    def progress(self, test_name: str, case_index: int | None, description: str) -> None:
        self.reporter.progress(test_name, case_index, description)

    def failure(self, failure: Failure) -> None:
        self.failures += 1
        self.reporter.failure(failure)


class Runner:
    """Runs test suites against the API served at ``base_url``."""

    def __init__(self, base_url: str, config: RunnerConfig | None = None):
        self.base_url = base_url
        self.config = config or RunnerConfig()
        self.transport: Transport = self.config.transport or RequestsTransport()

    def run(self, tests: list[ApiTest], reporter: Reporter) -> bool:
        """Run all tests, reporting into ``reporter``.

        Returns True when nothing failed during this run.
        """
        sink = _CountingReporter(reporter)
        for test in tests:
            self._run_test(test, sink)
        return sink.failures == 0

    def _run_test(self, test: ApiTest, reporter: Reporter) -> None:
        test_name = test.display_name

        if test.set_up is not None:
            reporter.progress(test_name, None, f"setting up ({test.description})")
            try:
                self._call_hook(test.set_up, SetupError, "setting up")
            except SetupError as e:
                reporter.failure(Failure(test_name=test_name, kind=FailureKind.SETUP, message=str(e)))
                return

        for index, case in enumerate(test.cases, start=1):
            reporter.progress(test_name, index, case.description)
            self.run_case(test, case, CaseReport(reporter, test_name, index))

        if test.tear_down is not None:
            reporter.progress(test_name, None, f"tearing down ({test.description})")
            try:
                self._call_hook(test.tear_down, TeardownError, "cleaning up after")
            except TeardownError as e:
                reporter.failure(Failure(test_name=test_name, kind=FailureKind.TEARDOWN, message=str(e)))

    @staticmethod
    def _call_hook(hook, error_cls: type[Exception], action: str) -> None:
        try:
            hook()
        except Exception as e:
            raise error_cls(f"error {action} test: {e}") from e

    def build_request(self, test: ApiTest, case: TestCase) -> HttpRequest:
        """Assemble the HTTP request for one case.

        Raises TemplateError or EncodingError.
        """
        url = build_url(self.base_url + test.path, case.path_params, case.query_params)

        body = None
        if case.request_body is not None:
            body = encode_json(case.request_body)

        headers = dict(self.config.default_headers)
        for name, param in case.headers.items():
            headers[name] = stringify(param.value)

        return HttpRequest(method=test.method.upper(), url=url, headers=headers, body=body)

    def run_case(self, test: ApiTest, case: TestCase, report: CaseReport) -> bool:
        try:
            request = self.build_request(test, case)
        except TemplateError as e:
            return report.fail(f"could not prepare an url: {e}", kind=FailureKind.TEMPLATE)
        except EncodingError as e:
            return report.fail(f"could not encode body: {e}", kind=FailureKind.ENCODING)

        try:
            response = self.transport.do(request)
        except TransportError as e:
            return report.fail(f"failed sending a request: {e}", kind=FailureKind.TRANSPORT)
        except Exception as e:
            logger.exception("transport of '%s' raised", report.test_name)
            return report.fail(f"failed sending a request: {e!r}", kind=FailureKind.TRANSPORT)
        if response is None:
            return report.fail("no response received", kind=FailureKind.TRANSPORT)

        if response.status_code != case.expected_http_code:
            logger.debug("body received: %r", response.body)
            return report.fail(
                f"unexpected status code, body received: {response.body.decode('utf-8', errors='replace')}",
                expected=case.expected_http_code,
                actual=response.status_code,
            )

        for header, value in case.expected_headers.items():
            actual = response.header(header)
            if actual != value:
                return report.fail(
                    f"unexpected value of header '{header}'",
                    expected=value,
                    actual=actual,
                )

        if case.assert_response is not None:
            try:
                passed = bool(case.assert_response(case.expected_data, response.body, report))
            except Exception as e:
                logger.exception("custom assertion of '%s' raised", report.test_name)
                return report.fail(f"custom assertion raised: {e!r}")
            if not passed and report.failures == 0:
                return report.fail("custom assertion failed")
            return passed
        return assert_response(case.expected_data, response.body, report)
