"""Azure DevOps test management client."""

from datetime import datetime
from typing import Any, Optional, Sequence
from urllib.parse import quote

from loguru import logger

from . import builders, endpoints
from .config import ClientConfig
from .models import (
    Build,
    TaskReference,
    TeamSettingsIteration,
    TestCase,
    TestCaseResult,
    TestPlan,
    TestPoint,
    TestResultRecord,
    TestResultState,
    TestRun,
    TestSuite,
)
from .rest import AzureDevOpsClientError, RestClient


def _require_body(response: Any, what: str) -> Any:
    """Return the decoded body, or raise when the service sent none."""
    if response is None:
        raise AzureDevOpsClientError(f"Azure DevOps API returned no body for {what}")
    return response


class TestPlanClient:
    """Typed operations over plans, suites, test cases, runs and builds.

    Every operation builds a fresh request from the configured templates and
    executes it synchronously.
    """

    def __init__(self, config: ClientConfig, rest: Optional[RestClient] = None):
        """Initialize the client.

        Args:
            config: Connection settings.
            rest: RestClient to execute requests with. Built from ``config``
                if omitted.
        """
        self.config = config
        self.rest = rest or RestClient(config)

    def __enter__(self) -> "TestPlanClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.rest.close()

    # ==================== Test Plans API ====================

    def get_test_plan(self, plan_id: int) -> TestPlan:
        """Get a test plan."""
        request = self.rest.request(endpoints.TEST_PLAN).set_placeholder("planId", plan_id)
        response = self.rest.get(request)
        return TestPlan.model_validate(_require_body(response, f"test plan {plan_id}"))

    def get_test_suites(self, plan_id: int) -> list[TestSuite]:
        """Get every suite of a plan as a flat list linked through ``parentSuite``."""
        request = self.rest.request(endpoints.TEST_SUITES).set_placeholder("planId", plan_id)
        response = self.rest.get(request) or {}
        return [TestSuite.model_validate(s) for s in response.get("value", [])]

    def find_suite_by_name(self, plan_id: int, name: str) -> Optional[TestSuite]:
        """Find the first suite in a plan whose name matches, ignoring spaces."""
        suite = builders.find_suite_by_name(self.get_test_suites(plan_id), name)
        if suite is None:
            logger.debug(f"No suite named '{name}' in plan {plan_id}")
        return suite

    def get_test_cases(self, plan_id: int, suite_id: int) -> list[TestCase]:
        """List test cases in a suite."""
        request = (
            self.rest.request(endpoints.TEST_CASES)
            .set_placeholder("planId", plan_id)
            .set_placeholder("suiteId", suite_id)
        )
        response = self.rest.get(request) or {}
        return [TestCase.model_validate(tc) for tc in response.get("value", [])]

    def add_test_cases_to_suite(
        self,
        plan_id: int,
        suite_id: int,
        test_case_ids: Sequence[int],
    ) -> Any:
        """Add existing test case work items to a suite."""
        body = [{"pointAssignments": [], "workItem": {"id": tc_id}} for tc_id in test_case_ids]
        request = (
            self.rest.request(endpoints.TEST_CASES)
            .set_placeholder("planId", plan_id)
            .set_placeholder("suiteId", suite_id)
        )
        return self.rest.post(request, body)

    def get_test_point(
        self,
        plan_id: int,
        suite_id: int,
        test_case_id: int,
    ) -> Optional[TestPoint]:
        """Get the test point binding a test case to a suite.

        Returns:
            The first point reported for the test case, or None.
        """
        request = (
            self.rest.request(endpoints.TEST_POINT)
            .set_placeholder("planId", plan_id)
            .set_placeholder("suiteId", suite_id)
            .set_placeholder("testCaseId", test_case_id)
        )
        response = self.rest.get(request) or {}
        points = response.get("value", [])
        if not points:
            logger.warning(
                f"No test point for test case {test_case_id} in plan {plan_id}, suite {suite_id}"
            )
            return None
        return TestPoint.model_validate(points[0])

    # ==================== Work Items API ====================

    def get_work_item(self, work_item_id: int) -> dict[str, Any]:
        """Get a work item by ID."""
        request = self.rest.request(endpoints.WORK_ITEM).set_placeholder("workItemId", work_item_id)
        return self.rest.get(request)

    def create_test_case_work_item(
        self,
        title: str,
        description: str,
        automated_test_name: str,
        automated_test_storage: str,
        automated_test_type: str = "Unit Test",
    ) -> Optional[TaskReference]:
        """Create a Test Case work item associated with an automated test.

        Returns:
            Id and URL of the new work item, or None if the service returned
            no usable work item.
        """
        document = builders.build_test_case_document(
            title,
            description,
            automated_test_name,
            automated_test_storage,
            automated_test_type,
        )
        request = self.rest.request(endpoints.WORK_ITEM_CREATE).set_placeholder(
            "workItemType", quote(endpoints.TEST_CASE_WORK_ITEM_TYPE)
        )
        response = self.rest.patch(request, document)
        if not response or "id" not in response or "url" not in response:
            return None

        logger.info(f"Created test case work item {response['id']} '{title}'")
        return TaskReference(id=response["id"], url=response["url"])

    def create_test_case(
        self,
        plan_id: int,
        suite_id: int,
        title: str,
        description: str,
        automated_test_name: str,
        automated_test_storage: str,
        automated_test_type: str = "Unit Test",
    ) -> Optional[Any]:
        """Create an automated test case work item and add it to a suite.

        Returns:
            The suite's response to the new test case, or None when the work
            item could not be created. The suite is left untouched in that
            case.
        """
        task = self.create_test_case_work_item(
            title,
            description,
            automated_test_name,
            automated_test_storage,
            automated_test_type,
        )
        if task is None:
            logger.warning(f"Work item for test case '{title}' was not created")
            return None

        body = [{"pointAssignments": [], "workItem": {"id": task.id}}]
        request = (
            self.rest.request(endpoints.TEST_CASES)
            .set_placeholder("planId", plan_id)
            .set_placeholder("suiteId", suite_id)
        )
        return self.rest.post(request, body)

    # ==================== Test Runs API ====================

    def create_test_run(
        self,
        name: str,
        build_id: int,
        build_url: str,
        plan_id: int,
        point_ids: Sequence[int],
        start_date: Optional[datetime] = None,
    ) -> TestRun:
        """Create an automated test run for a build and set of test points."""
        body = builders.build_test_run_payload(
            name, build_id, build_url, plan_id, point_ids, start_date
        )
        response = self.rest.post(self.rest.request(endpoints.TEST_RUNS), body)
        run = TestRun.model_validate(_require_body(response, f"new test run '{name}'"))
        logger.info(f"Created test run {run.id} '{name}' with {len(body['pointIds'])} points")
        return run

    def get_test_run(self, run_id: int) -> TestRun:
        """Get a test run."""
        request = self.rest.request(endpoints.TEST_RUN).set_placeholder("runId", run_id)
        response = self.rest.get(request)
        return TestRun.model_validate(_require_body(response, f"test run {run_id}"))

    def get_test_results(self, run_id: int) -> list[TestCaseResult]:
        """Get test results for a run."""
        request = self.rest.request(endpoints.TEST_RESULTS).set_placeholder("runId", run_id)
        response = self.rest.get(request) or {}
        return [TestCaseResult.model_validate(r) for r in response.get("value", [])]

    def submit_test_results(
        self,
        run_id: int,
        results: Sequence[TestResultRecord],
    ) -> list[TestCaseResult]:
        """Update the results of a run in bulk."""
        body = [result.to_payload() for result in results]
        request = self.rest.request(endpoints.TEST_RESULTS).set_placeholder("runId", run_id)
        response = self.rest.patch_as_post(request, body) or {}
        return [TestCaseResult.model_validate(r) for r in response.get("value", [])]

    def complete_test_run(self, run_id: int) -> TestRun:
        """Mark a test run as completed."""
        request = self.rest.request(endpoints.TEST_RUN).set_placeholder("runId", run_id)
        response = self.rest.patch_as_post(request, {"state": TestResultState.COMPLETED.value})
        logger.info(f"Completed test run {run_id}")
        return TestRun.model_validate(_require_body(response, f"completed test run {run_id}"))

    def delete_test_run(self, run_id: int) -> None:
        """Delete a test run and its results."""
        request = self.rest.request(endpoints.TEST_RUN).set_placeholder("runId", run_id)
        self.rest.delete(request)

    # ==================== Build API ====================

    def get_latest_build(self, definition_id: int) -> Build:
        """Get the latest build of a build definition."""
        request = self.rest.request(endpoints.LATEST_BUILD).set_placeholder(
            "definitionId", definition_id
        )
        response = self.rest.get(request)
        return Build.model_validate(
            _require_body(response, f"latest build of definition {definition_id}")
        )

    def get_build(self, build_id: int) -> Build:
        """Get a specific build."""
        request = self.rest.request(endpoints.BUILD).set_placeholder("buildId", build_id)
        response = self.rest.get(request)
        return Build.model_validate(_require_body(response, f"build {build_id}"))

    # ==================== Iterations API ====================

    def get_current_iteration(self) -> Optional[TeamSettingsIteration]:
        """Get the configured team's current iteration, if it has one."""
        response = self.rest.get(self.rest.request(endpoints.CURRENT_ITERATION)) or {}
        iterations = response.get("value", [])
        if not iterations:
            return None
        return TeamSettingsIteration.model_validate(iterations[0])
