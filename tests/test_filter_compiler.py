"""Tests for filter parsing and predicate compilation."""

from datetime import datetime

from app.models.transaction import Transaction
from app.schemas.filters import AgeRange, FilterSpec, RawFilterParams
from app.services.filter_compiler import (
    build_filter,
    compile_filters,
    normalize_values,
    parse_age_range,
    parse_date_range,
    parse_filter_params,
)


def matching_ids(session, raw) -> set[int]:
    predicate = build_filter(raw).predicate
    rows = session.query(Transaction.transaction_id).filter(predicate).all()
    return {row[0] for row in rows}


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def test_normalize_values_accepts_scalar_and_sequence():
    assert normalize_values("East") == ["East"]
    assert normalize_values(["East", " West ", "", "East"]) == ["East", "West"]
    assert normalize_values(None) == []


def test_normalize_values_drops_all_sentinel():
    assert normalize_values("All") == []
    assert normalize_values(["All", "North"]) == ["North"]


def test_parse_filter_params_from_camel_case_dict():
    spec = parse_filter_params({
        "search": "  john  ",
        "customerRegion": "East",
        "gender": ["Male", "Female"],
        "tags": ["casual"],
        "ageRange": '{"min": 20, "max": 30}',
        "dateRange": '{"start": "2023-01-01", "end": ""}',
    })
    assert spec.search == "john"
    assert spec.customer_region == ["East"]
    assert spec.gender == ["Male", "Female"]
    assert spec.tags == ["casual"]
    assert spec.age_range == AgeRange(min=20, max=30)
    assert spec.date_range.start == datetime(2023, 1, 1)
    assert spec.date_range.end is None


def test_empty_params_give_empty_spec():
    spec = parse_filter_params(RawFilterParams())
    assert spec.is_empty
    assert compile_filters(spec).clauses == ()


def test_malformed_age_range_means_no_constraint():
    assert parse_age_range("{min: 20") is None
    assert parse_age_range("[20, 30]") is None
    assert parse_age_range("") is None


def test_age_range_defaults_missing_or_unparsable_bounds():
    assert parse_age_range('{"min": 40}') == AgeRange(min=40, max=150)
    assert parse_age_range({"min": "abc", "max": "60"}) == AgeRange(min=0, max=60)
    assert parse_age_range({}) == AgeRange(min=0, max=150)


def test_date_range_bounds_are_independent():
    only_end = parse_date_range({"end": "2023-03-31T23:59:59"})
    assert only_end.start is None
    assert only_end.end == datetime(2023, 3, 31, 23, 59, 59)


def test_date_range_with_no_usable_bound_is_dropped():
    assert parse_date_range('{"start": "", "end": null}') is None
    assert parse_date_range('{"start": "not-a-date"}') is None
    assert parse_date_range("garbage") is None


def test_date_range_utc_suffix_is_normalized_to_naive():
    parsed = parse_date_range({"start": "2023-05-01T10:00:00Z"})
    assert parsed.start == datetime(2023, 5, 1, 10, 0)


def test_parse_never_raises_on_odd_input():
    spec = parse_filter_params({"gender": 1, "ageRange": 5, "dateRange": ["x"], "search": None})
    assert spec.gender == ["1"]
    assert spec.age_range is None
    assert spec.date_range is None
    assert spec.search == ""

    spec = parse_filter_params({
        "ageRange": {"min": 99999999999999999999, "max": 1e20},
        "dateRange": {"start": "0001-01-01T00:00:00+05:00", "end": "9999-12-31T23:59:59-05:00"},
    })
    assert spec.age_range == AgeRange(min=0, max=150)
    assert spec.date_range is None


def test_out_of_range_age_bounds_fall_back_to_defaults():
    assert parse_age_range({"min": 0, "max": 1e20}) == AgeRange(min=0, max=150)
    assert parse_age_range({"min": 99999999999999999999}) == AgeRange(min=0, max=150)
    assert parse_age_range('{"min": -5, "max": 1e400}') == AgeRange(min=0, max=150)
    assert parse_age_range({"min": 20, "max": 151}) == AgeRange(min=20, max=150)


def test_date_bound_shifted_past_calendar_limits_is_dropped():
    assert parse_date_range({"start": "0001-01-01T00:00:00+05:00"}) is None

    parsed = parse_date_range({"start": "0001-01-01T00:00:00+05:00", "end": "2023-06-30"})
    assert parsed.start is None
    assert parsed.end == datetime(2023, 6, 30)


def test_all_sentinel_and_blank_search_compile_to_no_clauses():
    compiled = build_filter({"gender": "All", "customerRegion": ["All"], "search": "   "})
    assert compiled.spec.is_empty
    assert compiled.clauses == ()


# ---------------------------------------------------------------------------
# Compiled predicates against a database
# ---------------------------------------------------------------------------

def test_empty_filter_matches_every_record(session, make_transaction):
    for _ in range(5):
        make_transaction()
    make_transaction(age=None, phone_number=None, tags=None, customer_region=None)

    assert matching_ids(session, {}) == {1, 2, 3, 4, 5, 6}


def test_age_range_coerces_string_and_integer_ages(session, make_transaction):
    as_text = make_transaction(age="45")
    as_int = make_transaction(age=45)
    make_transaction(age=25)
    make_transaction(age="51")

    ids = matching_ids(session, {"ageRange": '{"min": 40, "max": 50}'})
    assert ids == {as_text.transaction_id, as_int.transaction_id}


def test_age_range_bounds_are_inclusive(session, make_transaction):
    low = make_transaction(age=40)
    high = make_transaction(age="50")
    assert matching_ids(session, {"ageRange": {"min": 40, "max": 50}}) == {
        low.transaction_id, high.transaction_id
    }


def test_non_numeric_stored_age_never_matches_age_range(session, make_transaction):
    zero = make_transaction(age="0")
    decimal = make_transaction(age="45.0")
    make_transaction(age="abc")
    make_transaction(age=None)

    assert matching_ids(session, {"ageRange": {"min": 0, "max": 50}}) == {
        zero.transaction_id, decimal.transaction_id
    }


def test_out_of_range_age_bound_keeps_other_bound(session, make_transaction):
    young = make_transaction(age=20)
    old = make_transaction(age=80)

    assert matching_ids(session, {"ageRange": {"min": 0, "max": 1e20}}) == {
        young.transaction_id, old.transaction_id
    }
    assert matching_ids(session, {"ageRange": {"min": 50, "max": 1e20}}) == {old.transaction_id}


def test_search_and_age_are_enforced_independently(session, make_transaction):
    john_doe = make_transaction(customer_name="John Doe", age=25)
    johnny = make_transaction(customer_name="Johnny", age=35)
    jane = make_transaction(customer_name="Jane", age=35, phone_number=9812345678)

    ids = matching_ids(session, {"search": "john", "ageRange": {"min": 30, "max": 40}})
    assert ids == {johnny.transaction_id}
    assert john_doe.transaction_id not in ids
    assert jane.transaction_id not in ids

    assert matching_ids(session, {"search": "JOHN"}) == {
        john_doe.transaction_id, johnny.transaction_id
    }


def test_search_matches_phone_stored_as_number_or_text(session, make_transaction):
    numeric = make_transaction(customer_name="Asha", phone_number=9876543210)
    textual = make_transaction(customer_name="Ravi", phone_number="9876500000")
    make_transaction(customer_name="Meera", phone_number="9123456789")

    assert matching_ids(session, {"search": "98765"}) == {
        numeric.transaction_id, textual.transaction_id
    }


def test_search_treats_wildcards_literally(session, make_transaction):
    make_transaction(customer_name="Anita")
    percent = make_transaction(customer_name="50% Off Club")

    assert matching_ids(session, {"search": "%"}) == {percent.transaction_id}
    assert matching_ids(session, {"search": "_"}) == set()


def test_tags_match_by_substring_and_any_tag(session, make_transaction):
    casual_formal = make_transaction(tags="casual,formal")
    semi_casual = make_transaction(tags="semi-casual")
    sporty = make_transaction(tags="sporty")
    make_transaction(tags="formal")

    assert matching_ids(session, {"tags": ["casual"]}) == {
        casual_formal.transaction_id, semi_casual.transaction_id
    }
    assert matching_ids(session, {"tags": ["CASUAL", "sport"]}) == {
        casual_formal.transaction_id, semi_casual.transaction_id, sporty.transaction_id
    }


def test_categorical_filters_or_within_and_across(session, make_transaction):
    east_female = make_transaction(customer_region="East", gender="Female")
    west_female = make_transaction(customer_region="West", gender="Female")
    make_transaction(customer_region="East", gender="Male")
    make_transaction(customer_region="North", gender="Female")

    ids = matching_ids(session, {"customerRegion": ["East", "West"], "gender": "Female"})
    assert ids == {east_female.transaction_id, west_female.transaction_id}


def test_payment_status_and_category_filters(session, make_transaction):
    match = make_transaction(payment_method="Cash", order_status="Returned", product_category="Beauty")
    make_transaction(payment_method="Cash", order_status="Completed", product_category="Beauty")
    make_transaction(payment_method="UPI", order_status="Returned", product_category="Beauty")

    ids = matching_ids(session, {
        "paymentMethod": "Cash",
        "orderStatus": ["Returned"],
        "productCategory": ["Beauty", "Home"],
    })
    assert ids == {match.transaction_id}


def test_date_range_open_ended(session, make_transaction):
    early = make_transaction(date=datetime(2023, 1, 15))
    middle = make_transaction(date=datetime(2023, 6, 15))
    late = make_transaction(date=datetime(2023, 12, 15))

    assert matching_ids(session, {"dateRange": {"start": "2023-06-01"}}) == {
        middle.transaction_id, late.transaction_id
    }
    assert matching_ids(session, {"dateRange": {"end": "2023-06-30"}}) == {
        early.transaction_id, middle.transaction_id
    }
    assert matching_ids(session, {"dateRange": {"start": "2023-06-01", "end": "2023-06-30"}}) == {
        middle.transaction_id
    }


def test_malformed_range_returns_unfiltered_results(session, make_transaction):
    make_transaction(age=20)
    make_transaction(age=80)
    assert len(matching_ids(session, {"ageRange": "{oops"})) == 2


def test_same_input_compiles_to_same_selection(session, make_transaction):
    make_transaction(customer_name="Johnny", age=35, tags="casual")
    make_transaction(customer_name="John", age=60, tags="formal")
    make_transaction(customer_name="Priya", age=35, tags="casual")
    raw = {"search": "john", "tags": "casual", "ageRange": '{"min": 18, "max": 40}'}

    first = build_filter(raw)
    second = build_filter(raw)
    assert str(first.predicate.compile()) == str(second.predicate.compile())
    assert matching_ids(session, raw) == matching_ids(session, dict(raw))


def test_compile_filters_accepts_spec_directly(session, make_transaction):
    match = make_transaction(customer_region="South")
    make_transaction(customer_region="North")

    compiled = compile_filters(FilterSpec(customer_region=["South"]))
    rows = session.query(Transaction.transaction_id).filter(compiled.predicate).all()
    assert [row[0] for row in rows] == [match.transaction_id]
