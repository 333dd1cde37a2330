"""Payload builders and lookups that need no network access."""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from . import endpoints
from .models import (
    ResultGroupType,
    ShallowReference,
    TestOutcome,
    TestResultRecord,
    TestResultState,
    TestSubResult,
    TestSuite,
)

SUB_RESULT_SEPARATOR = "\n----------\n"
MAX_STACK_TRACE_LENGTH = 1000


def format_timestamp(value: datetime) -> str:
    """Render a datetime the way the test APIs expect it.

    The result is UTC with two fractional digits and a literal ``Z``, e.g.
    ``2024-11-12T09:05:03.45Z``. Naive datetimes are taken to be UTC already.
    Extra fractional digits are truncated, not rounded.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return f"{value:%Y-%m-%dT%H:%M:%S}.{value.microsecond // 10000:02d}Z"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def strip_spaces(value: str) -> str:
    return value.replace(" ", "")


def find_suite(
    suites: Sequence[TestSuite],
    name: str,
    parent_id: Optional[int] = None,
) -> Optional[TestSuite]:
    """Find a suite by name under a parent in an already fetched suite tree.

    Without a parent id the id of the first suite in the tree is used as the
    parent. Candidates are the parent itself and its direct children. Names
    are compared with spaces removed, otherwise case-sensitively.

    Args:
        suites: Flat list of suites as returned for a plan.
        name: Suite name to look for.
        parent_id: Id of the parent suite to search under.

    Returns:
        The first matching suite, or None.
    """
    if parent_id is None:
        if not suites:
            return None
        parent_id = suites[0].id

    wanted = strip_spaces(name)
    for suite in suites:
        if suite.id != parent_id and suite.parent_id != parent_id:
            continue
        if strip_spaces(suite.name) == wanted:
            return suite
    return None


def find_suite_by_name(suites: Sequence[TestSuite], name: str) -> Optional[TestSuite]:
    """Return the first suite anywhere in the tree whose name matches, ignoring spaces."""
    wanted = strip_spaces(name)
    return next((s for s in suites if strip_spaces(s.name) == wanted), None)


def build_test_case_document(
    title: str,
    description: str,
    automated_test_name: str,
    automated_test_storage: str,
    automated_test_type: str,
) -> list[dict[str, Any]]:
    """Build the JSON-Patch document that creates an automated test case.

    Every call generates a new AutomatedTestId.
    """
    fields = [
        (endpoints.FIELD_TITLE, title),
        (endpoints.FIELD_DESCRIPTION, description),
        (endpoints.FIELD_AUTOMATED_TEST_NAME, automated_test_name),
        (endpoints.FIELD_AUTOMATED_TEST_STORAGE, automated_test_storage),
        (endpoints.FIELD_AUTOMATED_TEST_TYPE, automated_test_type),
        (endpoints.FIELD_AUTOMATED_TEST_ID, str(uuid.uuid4())),
    ]
    return [{"op": "add", "path": path, "value": value} for path, value in fields]


def build_test_run_payload(
    name: str,
    build_id: int,
    build_url: str,
    plan_id: int,
    point_ids: Sequence[int],
    start_date: Optional[datetime] = None,
) -> dict[str, Any]:
    """Build the body that creates an automated test run."""
    build = {"id": build_id, "url": build_url}
    return {
        "automated": True,
        "name": name,
        "build": build,
        "buildReference": dict(build),
        "plan": {"id": plan_id},
        "pointIds": list(point_ids),
        "startDate": format_timestamp(start_date or utc_now()),
    }


def build_passed_result(
    result_id: int,
    test_point_id: int,
    test_point_url: str,
    started_date: datetime,
    completed_date: Optional[datetime] = None,
) -> TestResultRecord:
    """Build a completed, passed result record for a test point."""
    return TestResultRecord(
        id=result_id,
        outcome=TestOutcome.PASSED,
        state=TestResultState.COMPLETED,
        test_point=ShallowReference(id=test_point_id, url=test_point_url),
        started_date=format_timestamp(started_date),
        completed_date=format_timestamp(completed_date or utc_now()),
    )


def build_failed_result(
    result_id: int,
    test_point_id: int,
    test_point_url: str,
    started_date: datetime,
    sub_results: Sequence[TestSubResult],
    completed_date: Optional[datetime] = None,
) -> TestResultRecord:
    """Build a completed, failed result record aggregating its sub-results.

    Each sub-result contributes a ``"<name>: <message>"`` line to the error
    message and a ``"<name>: <stack trace>"`` block to the stack trace. The
    combined stack trace is cut to MAX_STACK_TRACE_LENGTH characters.

    Args:
        result_id: Id of the result being updated.
        test_point_id: Id of the test point the result belongs to.
        test_point_url: URL of that test point.
        started_date: When the test started.
        sub_results: Failing assertions or steps, in execution order.
        completed_date: When the test finished. Defaults to now.

    Returns:
        The record, ready to be submitted with other results.
    """
    error_message = SUB_RESULT_SEPARATOR.join(
        f"{sub.display_name}: {sub.error_message or ''}" for sub in sub_results
    )
    stack_trace = SUB_RESULT_SEPARATOR.join(
        f"{sub.display_name}: {sub.stack_trace or ''}" for sub in sub_results
    )
    return TestResultRecord(
        id=result_id,
        outcome=TestOutcome.FAILED,
        state=TestResultState.COMPLETED,
        test_point=ShallowReference(id=test_point_id, url=test_point_url),
        started_date=format_timestamp(started_date),
        completed_date=format_timestamp(completed_date or utc_now()),
        error_message=error_message,
        stack_trace=stack_trace[:MAX_STACK_TRACE_LENGTH],
        result_group_type=ResultGroupType.ORDERED_TEST,
        sub_results=list(sub_results),
    )
