from __future__ import annotations

from typing import Any

import pytest
from inline_snapshot import snapshot
from pydantic import BaseModel

from foreman_provider.api.fields import (
    ForcedBool,
    ForcedStr,
    ForeignKey,
    IdList,
    OptionalId,
    dump_foreign_key,
    parse_foreign_key,
)


class ForeignKeyModel(BaseModel):
    domain_id: ForeignKey = None


@pytest.mark.parametrize(
    "inp,expect",
    [
        (5, 5),
        ("5", 5),
        (" 42 ", 42),
        (9999, 9999),
        (7.0, 7),
        # Unset
        (0, None),
        ("0", None),
        ("", None),
        (None, None),
        ("abc", None),
        ("-3", None),
        (-3, None),
        (1.5, None),
        (True, None),
        ([], None),
        # Digits int() can't parse
        ("²", None),
        ("½", None),
    ],
)
def test_parse_foreign_key(inp: Any, expect: int | None) -> None:
    assert parse_foreign_key(inp) == expect


@pytest.mark.parametrize(
    "inp,expect",
    [
        (None, ""),
        (0, ""),
        (1, "1"),
        (9999, "9999"),
    ],
)
def test_dump_foreign_key(inp: int | None, expect: str) -> None:
    assert dump_foreign_key(inp) == expect


def test_foreign_key_field_missing_key() -> None:
    """A missing key decodes as unset."""
    m = ForeignKeyModel.model_validate({})
    assert m.domain_id is None
    assert m.model_dump(mode="json") == snapshot({"domain_id": ""})


def test_foreign_key_field_null() -> None:
    m = ForeignKeyModel.model_validate_json('{"domain_id": null}')
    assert m.domain_id is None
    assert m.model_dump_json() == snapshot('{"domain_id":""}')


def test_foreign_key_field_set() -> None:
    m = ForeignKeyModel(domain_id=5)
    assert m.domain_id == 5
    assert m.model_dump(mode="json") == snapshot({"domain_id": "5"})


@pytest.mark.parametrize("fk", [0, 1, 9999])
def test_foreign_key_field_round_trip(fk: int) -> None:
    """Encoding and decoding preserves the key, with 0 meaning unset."""
    m = ForeignKeyModel(domain_id=fk)
    m2 = ForeignKeyModel.model_validate_json(m.model_dump_json())
    assert m2.domain_id == m.domain_id
    assert (m2.domain_id or 0) == fk


def test_optional_id_not_forced_to_str() -> None:
    class TestModel(BaseModel):
        id: OptionalId = None

    assert TestModel(id="12").id == 12
    assert TestModel(id=0).id is None
    assert TestModel(id=12).model_dump() == snapshot({"id": 12})


class IdListModel(BaseModel):
    ids: IdList = []


@pytest.mark.parametrize(
    "inp,expect",
    [
        pytest.param([], [], id="empty"),
        pytest.param(None, [], id="null"),
        pytest.param([{"id": 3, "name": "a"}, {"id": 1, "name": "b"}], [3, 1], id="objects"),
        pytest.param([4, 2], [4, 2], id="bare ids"),
        pytest.param([{"id": 3}, {"name": "no id"}, {"id": 2}], [3, 2], id="object without id"),
    ],
)
def test_id_list(inp: Any, expect: list[int]) -> None:
    """Nested objects are projected down to their IDs in server order."""
    assert IdListModel(ids=inp).ids == expect


def test_forced_str() -> None:
    class TestModel(BaseModel):
        value: ForcedStr = ""

    assert TestModel(value=None).value == ""
    assert TestModel(value=123).value == "123"
    assert TestModel(value=True).value == "true"
    assert TestModel(value=False).value == "false"
    assert TestModel(value="abc").value == "abc"


def test_forced_bool() -> None:
    class TestModel(BaseModel):
        flag: ForcedBool = False

    assert TestModel(flag=None).flag is False
    assert TestModel(flag=True).flag is True
    assert TestModel(flag="true").flag is True
