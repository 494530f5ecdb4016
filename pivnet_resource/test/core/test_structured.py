from __future__ import annotations

from pivnet_resource.core.structured import (
    as_obj_list,
    as_str_dict,
    get_bool,
    get_int,
    get_str,
    get_str_list,
    get_table,
    is_str_dict,
)


def test_is_str_dict_rejects_non_string_keys() -> None:
    assert is_str_dict({"a": 1}) is True
    assert is_str_dict({1: "a"}) is False
    assert is_str_dict(["a"]) is False


def test_as_helpers_return_none_on_wrong_type() -> None:
    assert as_str_dict("x") is None
    assert as_obj_list({"a": 1}) is None
    assert as_obj_list([1, 2]) == [1, 2]


def test_get_str_strips_and_treats_blank_as_missing() -> None:
    table: dict[str, object] = {"a": "  x  ", "b": "   ", "c": 3}
    assert get_str(table, "a") == "x"
    assert get_str(table, "b") is None
    assert get_str(table, "c") is None
    assert get_str(table, "missing") is None


def test_get_int_rejects_bool() -> None:
    table: dict[str, object] = {"id": 12, "flag": True, "text": "12"}
    assert get_int(table, "id") == 12
    assert get_int(table, "flag") is None
    assert get_int(table, "text") is None


def test_get_bool_default() -> None:
    table: dict[str, object] = {"yes": True, "text": "true"}
    assert get_bool(table, "yes") is True
    assert get_bool(table, "text") is False
    assert get_bool(table, "missing", default=True) is True


def test_get_table() -> None:
    table: dict[str, object] = {"source": {"a": 1}, "other": [1]}
    assert get_table(table, "source") == {"a": 1}
    assert get_table(table, "other") is None


def test_get_str_list_distinguishes_absent_from_empty() -> None:
    table: dict[str, object] = {"empty": [], "mixed": ["a", 1, "b"], "text": "a"}
    assert get_str_list(table, "missing") is None
    assert get_str_list(table, "text") is None
    assert get_str_list(table, "empty") == []
    assert get_str_list(table, "mixed") == ["a", "b"]
