import pytest

from cdc_conductor.compiler.table_names import (
    MAX_IDENTIFIER_LENGTH,
    TableNameResolver,
    sanitize_table_name,
)
from cdc_conductor.errors import InvalidArgumentError


class TestSanitizeTableName:
    def test_lowercases_and_replaces_invalid_characters(self):
        assert sanitize_table_name("Test Pipeline!") == "test_pipeline"

    def test_collapses_underscore_runs(self):
        assert sanitize_table_name("my--pipeline__v2") == "my_pipeline_v2"

    def test_prefixes_leading_digit(self):
        assert sanitize_table_name("1st pipeline") == "_1st_pipeline"

    def test_keeps_leading_underscore(self):
        assert sanitize_table_name("_internal") == "_internal"

    def test_non_ascii_characters_are_replaced(self):
        assert sanitize_table_name("Café Orders") == "caf_orders"

    def test_truncates_to_identifier_limit(self):
        sanitized = sanitize_table_name("a" * 100)
        assert len(sanitized) == MAX_IDENTIFIER_LENGTH
        assert len(sanitized.encode("utf-8")) <= 63

    def test_truncation_does_not_leave_trailing_underscore(self):
        name = "a" * 62 + " b"
        sanitized = sanitize_table_name(name)
        assert sanitized == "a" * 62
        assert not sanitized.endswith("_")

    @pytest.mark.parametrize("name", ["", None])
    def test_empty_name_is_rejected(self, name):
        with pytest.raises(InvalidArgumentError, match="cannot be null or empty"):
            sanitize_table_name(name)

    def test_result_only_contains_valid_characters(self):
        sanitized = sanitize_table_name("Ünïcödé / Pipeline #42 (prod)")
        assert all(c.islower() or c.isdigit() or c == "_" for c in sanitized)
        assert sanitized[0].isalpha() or sanitized[0] == "_"


class TestTableNameResolver:
    def test_suffix_is_appended_to_sanitized_name(self, make_pipeline):
        resolver = TableNameResolver()
        pipeline = make_pipeline(name="Test Pipeline!")

        assert resolver.resolve(pipeline, "offset") == "test_pipeline_offset"

    def test_placeholder_template_is_expanded_then_sanitized(self, make_pipeline):
        resolver = TableNameResolver()
        pipeline = make_pipeline(name="Orders EU")

        result = resolver.resolve(pipeline, "cdc_@{pipeline_name}_offsets")

        assert result == "cdc_orders_eu_offsets"

    def test_template_result_is_truncated(self, make_pipeline):
        resolver = TableNameResolver()
        pipeline = make_pipeline(name="x" * 80)

        result = resolver.resolve(pipeline, "@{pipeline_name}_schema_history")

        assert len(result) <= MAX_IDENTIFIER_LENGTH

    def test_empty_suffix_is_rejected(self, make_pipeline):
        with pytest.raises(InvalidArgumentError):
            TableNameResolver().resolve(make_pipeline(), "")

    def test_empty_pipeline_name_is_rejected(self, make_pipeline):
        with pytest.raises(InvalidArgumentError):
            TableNameResolver().resolve(make_pipeline(name=""), "offset")

    def test_has_placeholders(self):
        resolver = TableNameResolver()
        assert resolver.has_placeholders("t_@{pipeline_name}")
        assert not resolver.has_placeholders("offset")
