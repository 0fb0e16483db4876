"""Tests for ``tagorm.datatypes`` - Date and JSON value types."""

from __future__ import annotations

import datetime
import json

import pytest

from tagorm.datatypes import JSON, Date


class TestDate:
    def test_from_string(self):
        assert Date.from_string("2024-02-29") == datetime.date(2024, 2, 29)
        assert isinstance(Date.from_string("2024-02-29"), Date)

    @pytest.mark.parametrize("value", ["29/02/2024", "2024-2-30", "", "2024-02-29T10:00:00"])
    def test_from_string_rejects_other_layouts(self, value):
        with pytest.raises(ValueError, match="yyyy-mm-dd"):
            Date.from_string(value)

    def test_str_is_iso(self):
        assert str(Date(7, 3, 1)) == "0007-03-01"
        assert str(Date(2024, 12, 31)) == "2024-12-31"

    def test_json_codec(self):
        d = Date(2024, 5, 17)
        assert d.to_json() == '"2024-05-17"'
        assert Date.from_json(d.to_json()) == d
        assert Date.from_json(b'"2024-05-17"') == d

    def test_from_json_requires_a_string(self):
        with pytest.raises(ValueError, match="should be a string"):
            Date.from_json("20240517")

    @pytest.mark.parametrize(
        "raw",
        [
            datetime.date(2024, 5, 17),
            datetime.datetime(2024, 5, 17, 23, 59),
            "2024-05-17",
            "2024-05-17 00:00:00+00",
        ],
    )
    def test_from_db(self, raw):
        value = Date.from_db(raw)
        assert isinstance(value, Date)
        assert value == datetime.date(2024, 5, 17)

    def test_from_db_none(self):
        assert Date.from_db(None) is None

    def test_to_db_is_a_plain_date(self):
        value = Date(2024, 5, 17).to_db()
        assert type(value) is datetime.date
        assert value == datetime.date(2024, 5, 17)


class TestJSON:
    def test_is_a_dict(self):
        data = JSON({"a": 1})
        assert data["a"] == 1
        assert isinstance(data, dict)

    def test_to_db_is_text(self):
        assert json.loads(JSON({"a": [1, 2]}).to_db()) == {"a": [1, 2]}

    @pytest.mark.parametrize("raw", ['{"a": 1}', b'{"a": 1}', {"a": 1}])
    def test_from_db(self, raw):
        value = JSON.from_db(raw)
        assert isinstance(value, JSON)
        assert value == {"a": 1}

    def test_from_db_none(self):
        assert JSON.from_db(None) is None

    def test_json_codec(self):
        data = JSON({"nested": {"ok": True}})
        assert JSON.from_json(data.to_json()) == data
