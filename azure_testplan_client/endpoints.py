"""URL templates for the Azure DevOps REST endpoints used by the client.

``{{name}}`` tokens are filled from the client configuration when a request is
built; ``:name`` tokens are filled per call.
"""

PROJECT_URL = "https://{{instance}}/{{organization}}/{{project-name}}"
TEAM_URL = PROJECT_URL + "/{{team}}"

# ==================== Test Plans API ====================

TEST_PLAN = PROJECT_URL + "/_apis/testplan/plans/:planId?api-version={{api-version}}"
TEST_SUITES = PROJECT_URL + "/_apis/testplan/Plans/:planId/suites?api-version={{api-version}}"
TEST_CASES = (
    PROJECT_URL + "/_apis/testplan/Plans/:planId/Suites/:suiteId/TestCase"
    "?api-version={{api-version}}"
)
TEST_POINT = (
    PROJECT_URL + "/_apis/testplan/Plans/:planId/Suites/:suiteId/TestPoint"
    "?testCaseId=:testCaseId&api-version=7.1"
)

# ==================== Work Items API ====================

WORK_ITEM_CREATE = PROJECT_URL + "/_apis/wit/workitems/$:workItemType?api-version={{api-version}}"
WORK_ITEM = PROJECT_URL + "/_apis/wit/workitems/:workItemId?api-version={{api-version}}"

# ==================== Test Runs API ====================

TEST_RUNS = PROJECT_URL + "/_apis/test/runs?api-version={{api-version}}"
TEST_RUN = PROJECT_URL + "/_apis/test/runs/:runId?api-version={{api-version}}"
TEST_RESULTS = PROJECT_URL + "/_apis/test/Runs/:runId/results?api-version={{api-version}}"

# ==================== Build API ====================

LATEST_BUILD = PROJECT_URL + "/_apis/build/latest/:definitionId?api-version=7.1-preview.1"
BUILD = PROJECT_URL + "/_apis/build/builds/:buildId?api-version=7.1"

# ==================== Work (team settings) API ====================

CURRENT_ITERATION = (
    TEAM_URL + "/_apis/work/teamsettings/iterations"
    "?$timeframe=current&api-version={{api-version}}"
)

# Work item fields written when creating an automated test case
FIELD_TITLE = "/fields/System.Title"
FIELD_DESCRIPTION = "/fields/System.Description"
FIELD_AUTOMATED_TEST_NAME = "/fields/Microsoft.VSTS.TCM.AutomatedTestName"
FIELD_AUTOMATED_TEST_STORAGE = "/fields/Microsoft.VSTS.TCM.AutomatedTestStorage"
FIELD_AUTOMATED_TEST_TYPE = "/fields/Microsoft.VSTS.TCM.AutomatedTestType"
FIELD_AUTOMATED_TEST_ID = "/fields/Microsoft.VSTS.TCM.AutomatedTestId"

TEST_CASE_WORK_ITEM_TYPE = "Test Case"
