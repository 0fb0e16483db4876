"""Tests for ``tagorm.descriptor`` - type descriptors and SQL type inference."""

from __future__ import annotations

import dataclasses
import datetime
import uuid
from typing import Optional

import pytest

from tagorm.datatypes import JSON, Date
from tagorm.descriptor import DESCRIPTOR_ATTR, describe, is_zero, model, resolve_sql_type
from tagorm.errors import NotAStructError
from tests._support.models import Account, Post, User


class TestResolveSqlType:
    @pytest.mark.parametrize(
        ("tp", "expected"),
        [
            (str, "varchar(255)"),
            (int, "integer"),
            (float, "real"),
            (bool, "boolean"),
            (bytes, "bytea"),
            (uuid.UUID, "uuid"),
            (datetime.datetime, "timestamptz"),
            (datetime.date, "date"),
            (Date, "date"),
            (JSON, "json"),
            (dict, "json"),
            (list[str], "text[]"),
            (list[int], "integer[]"),
            (list[float], "real[]"),
            (list[bool], "boolean[]"),
            (list[bytes], "bytea[]"),
            (list[uuid.UUID], "text[]"),
            (list, "text[]"),
            (Optional[int], "integer"),
            (int | None, "integer"),
        ],
    )
    def test_mapping(self, tp, expected):
        assert resolve_sql_type(tp) == expected

    def test_unmapped_type_is_empty(self):
        class Opaque:
            pass

        assert resolve_sql_type(Opaque) == ""
        assert resolve_sql_type(Post) == ""

    def test_int_subclass_maps_to_integer(self):
        class Flags(int):
            pass

        assert resolve_sql_type(Flags) == "integer"


class TestIsZero:
    @pytest.mark.parametrize("value", [None, 0, 0.0, "", b"", False, uuid.UUID(int=0)])
    def test_zero_values(self, value):
        assert is_zero(value)

    @pytest.mark.parametrize("value", [1, -1, 0.5, "x", True, uuid.uuid4(), Date(2024, 1, 1)])
    def test_non_zero_values(self, value):
        assert not is_zero(value)


class TestDescribe:
    def test_fields_in_declaration_order(self):
        names = [f.name for f in describe(User).fields]
        assert names == [
            "id",
            "first_name",
            "last_name",
            "email",
            "age",
            "birth_date",
            "profile",
            "posts",
            "address",
        ]

    def test_tags_are_parsed(self):
        descriptor = describe(User)
        assert descriptor.get_field("id").tags == {"primaryKey": "", "autoIncrement": ""}
        assert descriptor.get_field("id").is_primary_key
        assert descriptor.get_field("posts").is_foreign_key

    def test_descriptor_is_cached_on_the_class(self):
        descriptor = describe(User)
        assert descriptor.resolved
        assert describe(User()) is descriptor
        assert User.__dict__[DESCRIPTOR_ATTR] is descriptor

    def test_later_declared_models_resolve(self):
        assert describe(User).get_field("posts").python_type == list[Post]
        assert describe(User).get_field("birth_date").sql_type_hint == "date"

    def test_table_name(self):
        assert describe(User).table_name == "users"
        assert describe(Account).table_name == "ledger_accounts"
        assert describe(User).name == "User"

    def test_private_fields_are_skipped(self):
        @model
        class Hidden:
            name: str = ""
            _cache: dict = dataclasses.field(default_factory=dict)

        assert [f.name for f in describe(Hidden).fields] == ["name"]

    def test_plain_dataclass_is_described_lazily(self):
        @dataclasses.dataclass
        class Plain:
            value: int = 0

        assert DESCRIPTOR_ATTR not in Plain.__dict__
        assert describe(Plain).fields[0].sql_type_hint == "integer"
        assert DESCRIPTOR_ATTR in Plain.__dict__

    def test_model_applies_dataclass(self):
        @model
        class Bare:
            value: int = 0

        assert dataclasses.is_dataclass(Bare)
        assert Bare(value=3).value == 3

    @pytest.mark.parametrize("value", [42, "users", [User()], {"id": 1}, int])
    def test_rejects_non_models(self, value):
        with pytest.raises(NotAStructError, match="is not a struct"):
            describe(value)

    def test_get_field_unknown_name(self):
        with pytest.raises(KeyError):
            describe(User).get_field("missing")
