"""Tests for the typed accessors over loosely-typed columns."""

import pytest

from app.services.coercion import coerce_age, coerce_phone, join_tags, split_tags


@pytest.mark.parametrize(
    "stored, expected",
    [
        (9876543210, "9876543210"),
        ("9876543210", "9876543210"),
        (" 9876543210 ", "9876543210"),
        (9876543210.0, "9876543210"),
        ({"$numberLong": "9876543210"}, "9876543210"),
        (None, ""),
        (float("nan"), ""),
    ],
)
def test_coerce_phone(stored, expected):
    assert coerce_phone(stored) == expected


def test_coerce_phone_is_idempotent():
    once = coerce_phone(9123456789)
    assert coerce_phone(once) == once


@pytest.mark.parametrize(
    "stored, expected",
    [
        (45, 45),
        ("45", 45),
        (" 45 ", 45),
        ("45.0", 45),
        (45.7, 45),
        ("", None),
        ("unknown", None),
        (None, None),
        (float("nan"), None),
        (float("inf"), None),
        ("1e400", None),
        (True, None),
    ],
)
def test_coerce_age(stored, expected):
    assert coerce_age(stored) == expected


def test_split_tags_from_string_and_list():
    assert split_tags("casual, formal,,  cotton ") == ["casual", "formal", "cotton"]
    assert split_tags(["casual", " formal "]) == ["casual", "formal"]
    assert split_tags(["casual,formal", "cotton"]) == ["casual", "formal", "cotton"]


def test_split_tags_empty_values():
    assert split_tags(None) == []
    assert split_tags("") == []
    assert split_tags(42) == []


def test_join_tags():
    assert join_tags(["casual", " formal"]) == "casual,formal"
    assert join_tags("casual , formal") == "casual,formal"
    assert join_tags([]) is None
