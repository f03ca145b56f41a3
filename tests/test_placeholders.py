"""
Tests for federal config placeholder resolution

Run with: pytest tests/test_placeholders.py -v
"""

import copy

from structlog.testing import capture_logs

from regions.placeholders import (
    placeholder_variables,
    resolve_federal_config,
    resolve_placeholders,
)


FEDERAL_CONFIG = {
    "regionId": "federal",
    "dataSources": [
        {
            "url": "https://api.open.fec.gov/v1/schedules/schedule_a/",
            "dataType": "campaign_finance",
            "contentGoal": "Contributions",
            "api": {
                "queryParams": {
                    "contributor_state": "${stateCode}",
                    "sort": "-contribution_receipt_date",
                    "per_page": 100,
                }
            },
        },
        {
            "url": "https://www.fec.gov/files/bulk-downloads/indiv.zip",
            "dataType": "campaign_finance",
            "contentGoal": "Bulk contributions",
            "bulk": {
                "format": "zip",
                "filters": {"STATE": "${stateCode}", "TRANSACTION_TP": ["15", "15E"]},
            },
        },
    ],
}


class TestResolvePlaceholders:
    """String leaves are substituted at any depth"""

    def test_substitutes_query_params_and_bulk_filters(self):
        resolved = resolve_placeholders(FEDERAL_CONFIG, {"stateCode": "CA"})

        assert resolved["dataSources"][0]["api"]["queryParams"]["contributor_state"] == "CA"
        assert resolved["dataSources"][1]["bulk"]["filters"]["STATE"] == "CA"

    def test_siblings_untouched(self):
        resolved = resolve_placeholders(FEDERAL_CONFIG, {"stateCode": "CA"})

        params = resolved["dataSources"][0]["api"]["queryParams"]
        assert params["sort"] == "-contribution_receipt_date"
        assert params["per_page"] == 100
        assert resolved["dataSources"][1]["bulk"]["filters"]["TRANSACTION_TP"] == ["15", "15E"]

    def test_input_not_mutated(self):
        original = copy.deepcopy(FEDERAL_CONFIG)
        resolve_placeholders(FEDERAL_CONFIG, {"stateCode": "CA"})

        assert FEDERAL_CONFIG == original

    def test_unknown_token_left_as_is(self):
        assert resolve_placeholders("${county}-${stateCode}", {"stateCode": "TX"}) == "${county}-TX"

    def test_token_inside_string(self):
        assert resolve_placeholders("state=${stateCode}&x=1", {"stateCode": "NY"}) == "state=NY&x=1"

    def test_tuples_and_scalars(self):
        assert resolve_placeholders(("${stateCode}", 3, None, True), {"stateCode": "WA"}) == ("WA", 3, None, True)


class TestPlaceholderVariables:
    def test_state_code_exposed(self):
        assert placeholder_variables({"regionId": "california", "stateCode": "CA"}) == {"stateCode": "CA"}

    def test_missing_config(self):
        assert placeholder_variables(None) == {}
        assert placeholder_variables({}) == {}

    def test_non_scalar_ignored(self):
        assert placeholder_variables({"stateCode": {"code": "CA"}}) == {}


class TestResolveFederalConfig:
    def test_scopes_to_local_state(self):
        local = {"regionId": "california", "stateCode": "CA"}
        resolved = resolve_federal_config(FEDERAL_CONFIG, local)

        assert resolved["dataSources"][0]["api"]["queryParams"]["contributor_state"] == "CA"

    def test_no_local_config_keeps_token_and_warns(self):
        with capture_logs() as logs:
            resolved = resolve_federal_config(FEDERAL_CONFIG, None)

        assert resolved["dataSources"][0]["api"]["queryParams"]["contributor_state"] == "${stateCode}"
        warnings = [log for log in logs if log["log_level"] == "warning"]
        assert any(log["event"] == "federal config placeholders left unresolved" for log in warnings)

    def test_local_config_without_state_code_warns(self):
        with capture_logs() as logs:
            resolved = resolve_federal_config(FEDERAL_CONFIG, {"regionId": "example"})

        assert resolved == FEDERAL_CONFIG
        assert any(log.get("reason") == "no placeholder values" for log in logs)

    def test_unresolved_result_is_a_copy(self):
        resolved = resolve_federal_config(FEDERAL_CONFIG, None)

        assert resolved is not FEDERAL_CONFIG
        assert resolved["dataSources"] is not FEDERAL_CONFIG["dataSources"]
        resolved["dataSources"][0]["api"]["queryParams"]["contributor_state"] = "NV"
        assert FEDERAL_CONFIG["dataSources"][0]["api"]["queryParams"]["contributor_state"] == "${stateCode}"
