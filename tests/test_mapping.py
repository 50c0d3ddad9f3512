"""Tests for the index mapping and date rendering."""

from datetime import datetime, timedelta, timezone

import pytest

from audit_driver.errors import ConfigurationError
from audit_driver.mapping import MappingModel, format_date


def _date_fields(model: dict) -> list[dict]:
    fields = [model["created_at"]]
    for values_field in ("old_values", "new_values"):
        fields.extend(model[values_field]["properties"].values())
    return fields


class TestMappingModel:
    """Tests for MappingModel."""

    def test_default_date_format(self):
        """Without configuration every date field uses the default format."""
        model = MappingModel().get_model()

        for field in _date_fields(model):
            assert field == {"type": "date", "format": "yyyy-MM-dd HH:mm:ss"}

    def test_configured_date_format_shared_by_all_date_fields(self):
        """One configured format applies to top-level and nested dates."""
        model = MappingModel("strict_date_optional_time").get_model()

        fields = _date_fields(model)
        assert len(fields) == 7
        assert {f["format"] for f in fields} == {"strict_date_optional_time"}

    def test_keyword_fields(self):
        model = MappingModel().get_model()

        for name in ("event", "auditable_type", "ip_address", "url", "user_agent"):
            assert model[name] == {"type": "keyword"}

    def test_nested_value_dates(self):
        model = MappingModel().get_model()

        assert set(model["new_values"]["properties"]) == {"created_at", "updated_at", "deleted_at"}
        assert set(model["old_values"]["properties"]) == {"created_at", "updated_at", "deleted_at"}

    def test_get_model_is_deterministic(self):
        mapping = MappingModel()

        assert mapping.get_model() == mapping.get_model()

    def test_index_body(self):
        body = MappingModel().get_index_body()

        assert body["mappings"]["properties"]["created_at"]["type"] == "date"

    def test_blank_format_rejected(self):
        with pytest.raises(ConfigurationError):
            MappingModel("   ")


class TestFormatDate:
    """Tests for format_date."""

    VALUE = datetime(2026, 3, 7, 9, 5, 4, 123456)

    @pytest.mark.parametrize(
        "date_format,expected",
        [
            ("yyyy-MM-dd HH:mm:ss", "2026-03-07 09:05:04"),
            ("dd/MM/yy", "07/03/26"),
            ("yyyy-MM-dd'T'HH:mm:ss.SSS", "2026-03-07T09:05:04.123"),
            ("yyyy-MM-dd'T'HH:mm:ssXXX", "2026-03-07T09:05:04Z"),
            ("yyyy-MM-dd HH:mm:ss Z", "2026-03-07 09:05:04 +0000"),
            ("strict_date_optional_time", "2026-03-07T09:05:04.123456"),
            ("strict_date_time", "2026-03-07T09:05:04.123"),
        ],
    )
    def test_patterns(self, date_format, expected):
        assert format_date(self.VALUE, date_format) == expected

    def test_aware_value_rendered_in_utc(self):
        """Zone-less patterns are read as UTC, so aware values are converted first."""
        value = datetime(2026, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))

        assert format_date(value, "yyyy-MM-dd HH:mm:ss") == "2026-01-01 10:00:00"
        assert format_date(value, "HH:mmXXX") == "10:00Z"

    def test_iso_formats_keep_offset(self):
        value = datetime(2026, 3, 7, 9, 5, 4, tzinfo=timezone(timedelta(hours=2)))

        assert format_date(value, "strict_date_optional_time") == "2026-03-07T09:05:04+02:00"

    def test_epoch_formats(self):
        value = datetime(2026, 1, 1, tzinfo=timezone.utc)

        assert format_date(value, "epoch_second") == 1767225600
        assert format_date(value, "epoch_millis") == 1767225600000
