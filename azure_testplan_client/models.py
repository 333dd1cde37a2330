"""Pydantic models for Azure DevOps test management requests and responses."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# Enumerations
class TestOutcome(str, Enum):
    """Outcome of a test result, using the API's casing."""

    UNSPECIFIED = "Unspecified"
    NONE = "None"
    PASSED = "Passed"
    FAILED = "Failed"
    INCONCLUSIVE = "Inconclusive"
    TIMEOUT = "Timeout"
    ABORTED = "Aborted"
    BLOCKED = "Blocked"
    NOT_EXECUTED = "NotExecuted"
    WARNING = "Warning"
    ERROR = "Error"
    NOT_APPLICABLE = "NotApplicable"
    PAUSED = "Paused"
    IN_PROGRESS = "InProgress"
    NOT_IMPACTED = "NotImpacted"

    def __str__(self) -> str:
        return self.value


class TestResultState(str, Enum):
    """State of a test result or test run."""

    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    ABORTED = "Aborted"
    WAITING = "Waiting"

    def __str__(self) -> str:
        return self.value


class ResultGroupType(str, Enum):
    """Whether a result aggregates sub-results, and how."""

    NONE = "none"
    DATA_DRIVEN = "dataDriven"
    GENERIC = "generic"
    ORDERED_TEST = "orderedTest"
    RERUN = "rerun"

    def __str__(self) -> str:
        return self.value


# Core Models
class ShallowReference(BaseModel):
    """Id/url pair the API uses to point at another resource."""

    model_config = ConfigDict(populate_by_name=True)

    id: Any
    name: Optional[str] = None
    url: Optional[str] = None


class TaskReference(BaseModel):
    """Freshly created work item."""

    id: int
    url: str


class WorkItemReference(BaseModel):
    """Reference to a work item."""

    id: int
    name: Optional[str] = None
    url: Optional[str] = None


# Test Plan Models
class TestPlan(BaseModel):
    """Test plan information."""

    id: int
    name: str
    description: Optional[str] = None
    state: Optional[str] = None
    iteration: Optional[str] = None
    area_path: Optional[str] = Field(None, alias="areaPath")
    start_date: Optional[datetime] = Field(None, alias="startDate")
    end_date: Optional[datetime] = Field(None, alias="endDate")
    root_suite: Optional[ShallowReference] = Field(None, alias="rootSuite")


class TestSuite(BaseModel):
    """Test suite information."""

    id: int
    name: str
    suite_type: Optional[str] = Field(None, alias="suiteType")
    plan: Optional[dict[str, Any]] = None
    parent_suite: Optional[dict[str, Any]] = Field(None, alias="parentSuite")

    @property
    def parent_id(self) -> Optional[int]:
        """Id of the parent suite, or None for a root suite."""
        if not self.parent_suite:
            return None
        return self.parent_suite.get("id")


class TestCase(BaseModel):
    """Test case information."""

    work_item: Optional[WorkItemReference] = Field(None, alias="workItem")
    point_assignments: Optional[list[dict[str, Any]]] = Field(
        None, alias="pointAssignments"
    )
    test_plan: Optional[ShallowReference] = Field(None, alias="testPlan")
    test_suite: Optional[ShallowReference] = Field(None, alias="testSuite")


class TestPoint(BaseModel):
    """Binding of a test case to a suite and configuration."""

    id: int
    url: Optional[str] = None
    is_active: Optional[bool] = Field(None, alias="isActive")
    test_case_reference: Optional[ShallowReference] = Field(
        None, alias="testCaseReference"
    )
    configuration: Optional[ShallowReference] = None
    results: Optional[dict[str, Any]] = None


# Test Run Models
class TestRun(BaseModel):
    """Test run information."""

    id: int
    name: Optional[str] = None
    url: Optional[str] = None
    state: Optional[str] = None
    is_automated: Optional[bool] = Field(None, alias="isAutomated")
    started_date: Optional[datetime] = Field(None, alias="startedDate")
    completed_date: Optional[datetime] = Field(None, alias="completedDate")
    build: Optional[ShallowReference] = None
    plan: Optional[ShallowReference] = None
    total_tests: Optional[int] = Field(None, alias="totalTests")
    passed_tests: Optional[int] = Field(None, alias="passedTests")


class TestCaseResult(BaseModel):
    """Test result as returned by the API."""

    id: int
    outcome: Optional[str] = None
    state: Optional[str] = None
    url: Optional[str] = None
    test_point: Optional[ShallowReference] = Field(None, alias="testPoint")
    test_case: Optional[ShallowReference] = Field(None, alias="testCase")
    error_message: Optional[str] = Field(None, alias="errorMessage")


class TestSubResult(BaseModel):
    """One assertion or step inside an aggregated test result."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    display_name: str = Field(alias="displayName")
    error_message: Optional[str] = Field(None, alias="errorMessage")
    stack_trace: Optional[str] = Field(None, alias="stackTrace")
    outcome: TestOutcome = TestOutcome.FAILED


class TestResultRecord(BaseModel):
    """Result record submitted to a test run.

    Dates are kept pre-formatted since the API expects a fixed layout.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int
    outcome: TestOutcome
    state: TestResultState = TestResultState.COMPLETED
    test_point: ShallowReference = Field(alias="testPoint")
    started_date: str = Field(alias="startedDate")
    completed_date: str = Field(alias="completedDate")
    error_message: Optional[str] = Field(None, alias="errorMessage")
    stack_trace: Optional[str] = Field(None, alias="stackTrace")
    result_group_type: Optional[ResultGroupType] = Field(
        None, alias="resultGroupType"
    )
    sub_results: Optional[list[TestSubResult]] = Field(None, alias="subResults")

    def to_payload(self) -> dict[str, Any]:
        """Serialize with API field names, leaving out unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# Pipeline Models
class BuildDefinitionReference(BaseModel):
    """Build definition reference."""

    id: int
    name: Optional[str] = None
    url: Optional[str] = None
    path: Optional[str] = None


class Build(BaseModel):
    """Build information."""

    id: int
    build_number: Optional[str] = Field(None, alias="buildNumber")
    status: Optional[str] = None
    result: Optional[str] = None
    queue_time: Optional[datetime] = Field(None, alias="queueTime")
    start_time: Optional[datetime] = Field(None, alias="startTime")
    finish_time: Optional[datetime] = Field(None, alias="finishTime")
    definition: Optional[BuildDefinitionReference] = None
    source_branch: Optional[str] = Field(None, alias="sourceBranch")
    source_version: Optional[str] = Field(None, alias="sourceVersion")
    url: Optional[str] = None


# Iteration Models
class TeamSettingsIteration(BaseModel):
    """Team iteration settings."""

    id: str
    name: str
    path: str
    attributes: Optional[dict[str, Any]] = None
    url: Optional[str] = None
