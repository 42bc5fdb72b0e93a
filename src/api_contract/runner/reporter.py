"""Reporting sink for runner progress and failures.

Every check reports and continues; nothing here raises. RecordingReporter
keeps all failures so a caller can inspect them after the run.
"""

import logging
from typing import Any, Protocol

from pydantic import BaseModel

from api_contract.errors import FailureKind

logger = logging.getLogger(__name__)


class Failure(BaseModel):
    """One reported failure. ``case_index`` is 1-based, None for test-level failures."""

    test_name: str
    case_index: int | None = None
    kind: FailureKind
    message: str
    expected: Any = None
    actual: Any = None

    def __str__(self) -> str:
        where = self.test_name if self.case_index is None else f"{self.test_name}, case {self.case_index}"
        text = f"[{self.kind.value}] {where}: {self.message}"
        if self.expected is not None or self.actual is not None:
            text += f"\n  expected: {self.expected!r}\n  actual:   {self.actual!r}"
        return text


class Reporter(Protocol):
    def progress(self, test_name: str, case_index: int | None, description: str) -> None: ...

    def failure(self, failure: Failure) -> None: ...


class RecordingReporter:
    """Logs progress and keeps every failure."""

    def __init__(self):
        self.failures: list[Failure] = []

    @property
    def failed(self) -> bool:
        return bool(self.failures)

    def progress(self, test_name: str, case_index: int | None, description: str) -> None:
        if case_index is None:
            logger.info("%s: %s", test_name, description)
        else:
            logger.info("running test '%s' (%s), case %d", test_name, description, case_index)

    def failure(self, failure: Failure) -> None:
        logger.error("%s", failure)
        self.failures.append(failure)


class CaseReport:
    """Reporter handle bound to one test case.

    Passed to custom assertions so they can record failures against the right
    case without knowing where they run.
    """

    def __init__(self, reporter: Reporter, test_name: str, case_index: int):
        self.reporter = reporter
        self.test_name = test_name
        self.case_index = case_index
        self.failures = 0

    def fail(
        self,
        message: str,
        expected: Any = None,
        actual: Any = None,
        kind: FailureKind = FailureKind.ASSERTION,
    ) -> bool:
        self.failures += 1
        self.reporter.failure(
            Failure(
                test_name=self.test_name,
                case_index=self.case_index,
                kind=kind,
                message=message,
                expected=expected,
                actual=actual,
            )
        )
        return False
