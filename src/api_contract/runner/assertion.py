"""Default structural comparison of expected data with a response body."""

import json
from typing import Any

from api_contract.encoding import to_jsonable
from api_contract.errors import EncodingError, FailureKind
from api_contract.runner.reporter import CaseReport


def decode_expected(expected: Any) -> Any:
    """Bring expected data into the shape a decoded response has."""
    try:
        return to_jsonable(expected)
    except EncodingError:
        return expected


def decode_response(body: bytes) -> Any:
    """Decode a JSON object or array body; anything else compares as text."""
    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return body.decode("utf-8", errors="replace")
    if isinstance(data, (dict, list)):
        return data
    return body.decode("utf-8", errors="replace")


def _same_scalar(expected: Any, actual: Any) -> bool:
    if isinstance(expected, bool) or isinstance(actual, bool):
        return type(expected) is type(actual) and expected == actual
    return expected == actual


def compare(expected: Any, actual: Any, path: str = "$") -> list[str]:
    """Structural diff of two JSON-like values, one line per difference."""
    if isinstance(expected, dict) and isinstance(actual, dict):
        diffs = []
        for key in sorted(expected.keys() | actual.keys(), key=str):
            child = f"{path}.{key}"
            if key not in actual:
                diffs.append(f"{child}: missing, expected {expected[key]!r}")
            elif key not in expected:
                diffs.append(f"{child}: unexpected key with value {actual[key]!r}")
            else:
                diffs.extend(compare(expected[key], actual[key], child))
        return diffs

    if isinstance(expected, list) and isinstance(actual, list):
        diffs = []
        if len(expected) != len(actual):
            diffs.append(f"{path}: expected {len(expected)} items, got {len(actual)}")
        for i, (exp_item, act_item) in enumerate(zip(expected, actual)):
            diffs.extend(compare(exp_item, act_item, f"{path}[{i}]"))
        return diffs

    if isinstance(expected, (dict, list)) or isinstance(actual, (dict, list)):
        return [f"{path}: expected {expected!r}, got {actual!r}"]

    if not _same_scalar(expected, actual):
        return [f"{path}: expected {expected!r}, got {actual!r}"]
    return []


def assert_response(expected: Any, response_body: bytes, report: CaseReport) -> bool:
    """Check that ``response_body`` carries the same data as ``expected``.

    With no expected data the body must be empty. Otherwise both sides are
    compared as decoded JSON structures, so key order and formatting do not
    matter but every value, missing key and extra key does.
    """
    if expected is None:
        if response_body:
            return report.fail(
                "expected empty response",
                expected="",
                actual=response_body.decode("utf-8", errors="replace"),
                kind=FailureKind.ASSERTION,
            )
        return True

    expected_data = decode_expected(expected)
    actual_data = decode_response(response_body)

    diffs = compare(expected_data, actual_data)
    if diffs:
        return report.fail(
            "response does not match expected data:\n  " + "\n  ".join(diffs),
            expected=expected_data,
            actual=actual_data,
        )
    return True
