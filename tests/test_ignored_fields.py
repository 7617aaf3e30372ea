"""Tests for the ignored-fields reporter."""

from types import MappingProxyType

import pytest

from automation.ignored_fields import IGNORED_FIELD_ALIASES, report_ignored_fields


class TestReportIgnoredFields:

    def test_single_field(self):
        assert report_ignored_fields({"inventory": "anything"}) == ("inventory",)

    def test_empty_map_is_absent(self):
        assert report_ignored_fields({}) is None

    def test_none_is_absent(self):
        assert report_ignored_fields(None) is None

    def test_values_are_discarded(self):
        assert report_ignored_fields({"limit": {"nested": [1, 2]}}) == ("limit",)

    def test_unknown_names_pass_through_sorted(self):
        result = report_ignored_fields({"verbosity": 3, "inventory": 2, "job_tags": "x"})
        assert result == ("inventory", "job_tags", "verbosity")

    def test_custom_alias_table(self):
        aliases = MappingProxyType({"inventory": "inventory_id"})
        assert report_ignored_fields({"inventory": 4, "limit": "web"}, aliases) == ("inventory_id", "limit")

    def test_default_table_is_read_only(self):
        with pytest.raises(TypeError):
            IGNORED_FIELD_ALIASES["limit"] = "host_limit"
