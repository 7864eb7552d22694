"""Unit tests for constraint descriptors and the built-in catalog.

Tests cover:
- Structural equality over name and parameters
- Message keys of single-bound constraints
- Predicates of the built-in factories
- Serialization
"""

import re
from dataclasses import FrozenInstanceError
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from objvalid import constraints as c
from objvalid.constraints import Constraint
from objvalid.errors import ConstraintViolation
from objvalid.types import ConstraintName


class TestConstraintEquality:
    """Test structural equality of descriptors."""

    def test_same_name_and_params_are_equal(self):
        """Should compare equal when name and params match."""
        assert c.equals(1) == c.equals(1)

    def test_different_params_are_not_equal(self):
        """Should distinguish descriptors by parameter values."""
        assert c.equals(1) != c.equals(2)
        assert c.size(min=5) != c.size(min=3, max=1)

    def test_predicate_is_ignored(self):
        """Should ignore the predicate when comparing."""
        assert c.valid(lambda v: True) == c.valid(lambda v: False)

    def test_name_matches_plain_string(self):
        """Should compare the enum name equal to its string value."""
        assert c.not_null().name == "NotNull"
        assert c.not_null().name is ConstraintName.NOT_NULL

    def test_custom_constraint(self):
        """Should build custom constraints with keyword parameters."""
        multiple = c.constraint("Multiple", lambda v: v % 3 == 0, of=3)

        assert multiple.name == "Multiple"
        assert multiple.parameters == {"of": 3}
        assert multiple.message_key == "Multiple"
        assert multiple.test(9) is True
        assert multiple.test(10) is False


class TestMessageKeys:
    """Test message keys of bounded constraints."""

    def test_default_key_is_name(self):
        """Should use the constraint name as key."""
        assert c.greater(0).message_key == "Greater"

    @pytest.mark.parametrize(
        "kwargs,key",
        [
            ({"min": 1, "max": 3}, "Size"),
            ({"min": 1}, "Size.min"),
            ({"max": 3}, "Size.max"),
            ({}, "Size"),
        ],
    )
    def test_size_keys(self, kwargs, key):
        """Should pick the single-bound variants when one bound is given."""
        assert c.size(**kwargs).message_key == key

    def test_size_records_only_given_bounds(self):
        """Should record only the supplied bounds as parameters."""
        assert c.size(min=5).params == (("min", 5),)
        assert c.size(min=3, max=1).params == (("min", 3), ("max", 1))
        assert c.size().params == ()

    def test_digit_keys(self):
        """Should apply the same scheme to digit constraints."""
        assert c.integer_digits(max=2).message_key == "IntegerDigits.max"
        assert c.decimal_digits(min=1).message_key == "DecimalDigits.min"


class TestNullness:
    """Test the nullness pair."""

    def test_only_nullness_constraints_check_null(self):
        """Should flag only Null and NotNull as nullness checks."""
        assert c.null().checks_null is True
        assert c.not_null().checks_null is True
        assert c.equals(1).checks_null is False
        assert c.valid(bool).checks_null is False

    def test_predicates(self):
        """Should test for absence and presence."""
        assert c.null().test(None) is True
        assert c.null().test(0) is False
        assert c.not_null().test("") is True
        assert c.not_null().test(None) is False


class TestComparison:
    """Test comparison predicates."""

    def test_less_and_greater(self):
        """Should compare strictly."""
        assert c.less(5).test(4) is True
        assert c.less(5).test(5) is False
        assert c.greater(5).test(6) is True
        assert c.greater(5).test(5) is False

    def test_or_equal_variants(self):
        """Should include the boundary."""
        assert c.less_or_equal(5).test(5) is True
        assert c.greater_or_equal(5).test(5) is True
        assert c.greater_or_equal(5).test(4) is False

    def test_between_is_inclusive(self):
        """Should accept both ends of the range."""
        assert c.between(1, 3).test(1) is True
        assert c.between(1, 3).test(3) is True
        assert c.between(1, 3).test(4) is False
        assert c.not_between(1, 3).test(4) is True
        assert c.not_between(1, 3).test(2) is False

    def test_between_params(self):
        """Should record start and end in order."""
        assert c.between(1, 3).parameters == {"start": 1, "end": 3}


class TestContainers:
    """Test container predicates."""

    def test_empty(self):
        """Should count elements."""
        assert c.empty().test([]) is True
        assert c.empty().test({}) is True
        assert c.not_empty().test([1]) is True
        assert c.not_empty().test("") is False

    def test_empty_on_iterator(self):
        """Should count elements of iterables without a length."""
        assert c.not_empty().test(iter([1, 2])) is True

    def test_size(self):
        """Should check the element count against the bounds."""
        assert c.size(min=2).test([1]) is False
        assert c.size(min=2).test([1, 2]) is True
        assert c.size(max=1).test([1, 2]) is False
        assert c.size(min=1, max=2).test((1, 2)) is True
        assert c.size().test([]) is True

    def test_contains(self):
        """Should use element equality."""
        assert c.contains(2).test([1, 2, 3]) is True
        assert c.contains(4).test([1, 2, 3]) is False
        assert c.not_contain(4).test({1, 2}) is True

    def test_contains_all_and_any(self):
        """Should check every or some of the values."""
        assert c.contains_all([1, 2]).test([1, 2, 3]) is True
        assert c.contains_all([1, 4]).test([1, 2, 3]) is False
        assert c.contains_any([4, 1]).test([1, 2, 3]) is True
        assert c.contains_any([4, 5]).test([1, 2, 3]) is False

    def test_negated_all_and_any(self):
        """Should negate the all/any checks."""
        assert c.not_contain_all([1, 4]).test([1, 2, 3]) is True
        assert c.not_contain_all([1, 2]).test([1, 2, 3]) is False
        assert c.not_contain_any([4, 5]).test([1, 2, 3]) is True
        assert c.not_contain_any([4, 1]).test([1, 2, 3]) is False

    def test_contains_on_generator(self):
        """Should materialize iterables without membership support."""
        assert c.contains_all([1, 3]).test(x for x in [1, 2, 3]) is True


class TestText:
    """Test text predicates."""

    def test_blank(self):
        """Should treat whitespace-only text as blank."""
        assert c.blank().test("   ") is True
        assert c.not_blank().test(" a ") is True
        assert c.not_blank().test("") is False

    def test_character_classes(self):
        """Should check every character."""
        assert c.letter().test("abc") is True
        assert c.letter().test("ab1") is False
        assert c.digit().test("123") is True
        assert c.letter_or_digit().test("a1") is True
        assert c.letter_or_digit().test("a-1") is False

    def test_case(self):
        """Should compare against the case-converted value."""
        assert c.upper_case().test("ABC") is True
        assert c.upper_case().test("AbC") is False
        assert c.lower_case().test("abc") is True

    def test_matches_whole_value(self):
        """Should require a full match."""
        assert c.matches(r"\d+").test("123") is True
        assert c.matches(r"\d+").test("123a") is False
        assert c.not_match(r"\d+").test("123a") is True

    def test_contains_regex(self):
        """Should search anywhere in the value."""
        assert c.contains_regex(r"\d").test("a1b") is True
        assert c.not_contain_regex(r"\d").test("abc") is True

    def test_compiled_pattern_is_recorded_as_text(self):
        """Should record the pattern source for compiled patterns."""
        assert c.matches(re.compile(r"\d+")) == c.matches(r"\d+")
        assert c.matches(re.compile(r"\d+")).test("42") is True

    def test_prefix_and_suffix(self):
        """Should check the start and end of the value."""
        assert c.starts_with("ab").test("abc") is True
        assert c.ends_with("bc").test("abc") is True
        assert c.ends_with("x").test("abc") is False

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("alice@example.com", True),
            ("first.last+tag@mail.example.org", True),
            ("alice@", False),
            ("alice.example.com", False),
            ("alice@example", False),
        ],
    )
    def test_email(self, value, expected):
        """Should accept plausible email addresses only."""
        assert c.email().test(value) is expected


class TestDigits:
    """Test digit count predicates."""

    def test_integer_digits(self):
        """Should count digits before the decimal point."""
        assert c.integer_digits(max=3).test(123.45) is True
        assert c.integer_digits(max=2).test(123.45) is False
        assert c.integer_digits(min=1).test(0.5) is True

    def test_decimal_digits(self):
        """Should count digits after the decimal point."""
        assert c.decimal_digits(max=2).test(Decimal("1.25")) is True
        assert c.decimal_digits(max=1).test(Decimal("1.25")) is False
        assert c.decimal_digits(max=0).test(10) is True

    def test_nan_raises(self):
        """Should refuse to count digits of NaN."""
        with pytest.raises(ValueError):
            c.integer_digits(max=1).test(float("nan"))


class TestTemporal:
    """Test temporal predicates."""

    def test_today_for_dates(self):
        """Should compare against the current date."""
        assert c.today().test(date.today()) is True
        assert c.not_today().test(date.today() - timedelta(days=1)) is True

    def test_today_for_aware_datetimes(self):
        """Should convert aware datetimes to the local zone."""
        assert c.today().test(datetime.now(timezone.utc)) is True

    def test_past_and_future(self):
        """Should compare dates and datetimes against now."""
        assert c.past().test(date.today() - timedelta(days=1)) is True
        assert c.future().test(date.today() + timedelta(days=1)) is True
        assert c.past().test(datetime.now() + timedelta(hours=1)) is False
        assert c.future().test(datetime.now(timezone.utc) + timedelta(hours=1)) is True


class TestSerialization:
    """Test descriptor serialization."""

    def test_to_dict(self):
        """Should expose the name and parameters."""
        assert c.between(1, 3).to_dict() == {
            "constraint": "Between",
            "parameters": {"start": 1, "end": 3},
        }

    def test_str(self):
        """Should render the name and parameters."""
        assert str(c.not_null()) == "NotNull"
        assert str(c.size(min=2)) == "Size(min=2)"

    def test_descriptor_is_immutable(self):
        """Should reject attribute assignment."""
        constraint = Constraint("Custom")
        with pytest.raises(FrozenInstanceError):
            constraint.name = "Other"


class TestRecordedForms:
    """Test how argument lists are collapsed before recording."""

    def test_hashable_values_become_a_frozenset(self):
        """Should collapse hashable values into a set."""
        assert c.distinct((2, 1, 2)) == frozenset({1, 2})

    def test_unhashable_values_become_a_tuple(self):
        """Should drop duplicates by equality and keep first-seen order."""
        assert c.distinct(([2], {"a": 1}, [2])) == ([2], {"a": 1})

    def test_membership_with_unhashable_value(self):
        """Should evaluate membership without hashing the value."""
        assert c.one_of(frozenset({1, 2})).test([1]) is False
        assert c.none_of(frozenset({1, 2})).test({"a": 1}) is True
        assert c.one_of(({"a": 1},)).test({"a": 1}) is True

    def test_key_in(self):
        """Should pass when any key is among the values."""
        assert c.key_in(frozenset({"a", "b"})).test({"b": 1, "z": 2}) is True
        assert c.key_in(frozenset({"a", "b"})).test({"z": 2}) is False
        assert c.key_in(["a"]).test({}) is False


class TestHashing:
    """Test hashing of descriptors and violations."""

    def test_equal_descriptors_hash_equal(self):
        """Should agree with equality."""
        assert hash(c.size(min=2)) == hash(c.size(min=2))

    def test_unhashable_parameters(self):
        """Should hash descriptors whose parameters are lists or dicts."""
        assert len({c.one_of([1, 2]), c.one_of([1, 2]), c.one_of([3])}) == 2
        assert hash(c.contains_all(({"a": 1},))) == hash(c.contains_all(({"b": 2},)))

    def test_violations_with_unhashable_values(self):
        """Should put violations with list values in a set."""
        first = ConstraintViolation("tags", [1], c.size(min=2))
        second = ConstraintViolation("tags", [1], c.size(min=2))

        assert {first, second} == {first}
        assert len({first, ConstraintViolation("tags", [1, 2], c.size(min=3))}) == 2
