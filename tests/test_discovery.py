"""
Tests for region descriptor discovery and validation

Run with: pytest tests/test_discovery.py -v
"""

import copy

import pytest

from exceptions import ParseError, ValidationError
from regions.discovery import discover_region_configs, validate_descriptor
from regions.schemas import SourceType
from regions.types import DataType
from tests.conftest import FEDERAL_DESCRIPTOR, LOCAL_DESCRIPTOR, write_descriptor


def _descriptor(**overrides):
    data = copy.deepcopy(LOCAL_DESCRIPTOR)
    data.update(overrides)
    return data


class TestValidateDescriptor:
    def test_valid_descriptor(self):
        descriptor = validate_descriptor(copy.deepcopy(FEDERAL_DESCRIPTOR), "federal.json")

        assert descriptor.name == "federal"
        assert descriptor.display_name == "Federal"
        assert descriptor.config.region_id == "federal"
        source = descriptor.config.data_sources[0]
        assert source.data_type == DataType.CAMPAIGN_FINANCE
        assert source.source_type == SourceType.API
        assert source.api.query_params["contributor_state"] == "${stateCode}"

    def test_missing_data_source_url_names_path(self):
        data = _descriptor()
        sources = data["config"]["dataSources"]
        sources.append({"url": "https://a", "dataType": "meetings", "contentGoal": "x"})
        sources.append({"dataType": "meetings", "contentGoal": "Calendars"})

        with pytest.raises(ValidationError) as exc:
            validate_descriptor(data, "x.json")

        assert exc.value.args[0] == 'Region config "x.json" dataSources[2] missing field url'
        assert exc.value.field == "dataSources[2].url"
        assert exc.value.file == "x.json"

    @pytest.mark.parametrize("field", ["name", "displayName", "version"])
    def test_missing_identity_field(self, field):
        data = _descriptor()
        del data[field]

        with pytest.raises(ValidationError) as exc:
            validate_descriptor(data, "ca.json")

        assert exc.value.args[0] == f'Region config "ca.json" missing field {field}'

    def test_missing_region_id(self):
        data = _descriptor()
        del data["config"]["regionId"]

        with pytest.raises(ValidationError) as exc:
            validate_descriptor(data, "ca.json")

        assert exc.value.field == "config.regionId"

    def test_empty_data_sources(self):
        data = _descriptor()
        data["config"]["dataSources"] = []

        with pytest.raises(ValidationError, match="at least one entry in config.dataSources"):
            validate_descriptor(data, "ca.json")

    def test_unknown_data_type(self):
        data = _descriptor()
        data["config"]["dataSources"][0]["dataType"] = "zoning"

        with pytest.raises(ValidationError) as exc:
            validate_descriptor(data, "ca.json")

        assert exc.value.field == "dataSources[0].dataType"
        assert exc.value.value == "zoning"

    def test_not_an_object(self):
        with pytest.raises(ValidationError, match="must be a JSON object"):
            validate_descriptor(["not", "a", "dict"], "list.json")

    def test_unknown_keys_preserved(self):
        data = _descriptor()
        data["config"]["dataSources"][0]["selectorHint"] = "table.measures"

        descriptor = validate_descriptor(data, "ca.json")

        assert descriptor.config_dict()["dataSources"][0]["selectorHint"] == "table.measures"


class TestDiscoverRegionConfigs:
    def test_missing_directory_returns_empty(self, tmp_path):
        assert discover_region_configs(tmp_path / "nope") == []

    def test_empty_directory_returns_empty(self, tmp_path):
        assert discover_region_configs(tmp_path) == []

    def test_sorted_by_file_name(self, tmp_path):
        write_descriptor(tmp_path, "b_federal.json", FEDERAL_DESCRIPTOR)
        write_descriptor(tmp_path, "a_california.json", LOCAL_DESCRIPTOR)
        (tmp_path / "notes.txt").write_text("ignored")

        descriptors = discover_region_configs(tmp_path)

        assert [d.name for d in descriptors] == ["california", "federal"]

    def test_invalid_json_raises_parse_error(self, tmp_path):
        write_descriptor(tmp_path, "bad.json", "{not json")

        with pytest.raises(ParseError, match="Invalid JSON in region config file: bad.json"):
            discover_region_configs(tmp_path)

    def test_non_utf8_file_raises_parse_error(self, tmp_path):
        (tmp_path / "latin.json").write_bytes(b'{"name": "\xff\xfe"}')

        with pytest.raises(ParseError, match="Invalid JSON in region config file: latin.json") as exc:
            discover_region_configs(tmp_path)

        assert exc.value.source == "latin.json"

    def test_first_invalid_file_aborts(self, tmp_path):
        write_descriptor(tmp_path, "a.json", LOCAL_DESCRIPTOR)
        broken = copy.deepcopy(FEDERAL_DESCRIPTOR)
        del broken["config"]["dataSources"][0]["contentGoal"]
        write_descriptor(tmp_path, "b.json", broken)

        with pytest.raises(ValidationError) as exc:
            discover_region_configs(tmp_path)

        assert exc.value.file == "b.json"
        assert exc.value.field == "dataSources[0].contentGoal"
