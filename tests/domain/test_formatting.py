"""Tests for phone number formatting and the policy registry."""

from __future__ import annotations

import pytest

from wavalidate.domain.formatting import (
    POLICY_REGISTRY,
    DigitsOnlyPolicy,
    TrunkPrefixPolicy,
    build_policy,
    extract_digits,
    format_number,
    register_policy,
)


@pytest.fixture
def policy() -> TrunkPrefixPolicy:
    return TrunkPrefixPolicy()


class TestExtractDigits:
    def test_strips_everything_but_digits(self) -> None:
        assert extract_digits("+54 (11) 2233-4455") == "541122334455"

    def test_no_digits(self) -> None:
        assert extract_digits("n/a") == ""


class TestFormatNumber:
    @pytest.mark.parametrize("raw", ["", "   ", "n/a", "---", "phone", "()+"])
    def test_no_digits_gives_empty_string(self, raw: str, policy: TrunkPrefixPolicy) -> None:
        assert format_number(raw, policy) == ""

    @pytest.mark.parametrize(
        "raw",
        ["01122334455", "+54 9 11 2233-4455", "011 15 2233 4455", "abc123def", "0 0 0 7"],
    )
    def test_output_is_only_digits(self, raw: str, policy: TrunkPrefixPolicy) -> None:
        result = format_number(raw, policy)
        assert result
        assert result.isdigit()

    def test_trunk_prefix_replaced(self, policy: TrunkPrefixPolicy) -> None:
        assert format_number("01122334455", policy) == "5491122334455"

    def test_mobile_marker_removed(self, policy: TrunkPrefixPolicy) -> None:
        assert format_number("011 15 2233-4455", policy) == "5491122334455"

    def test_punctuation_ignored(self, policy: TrunkPrefixPolicy) -> None:
        assert format_number("(011) 2233-4455", policy) == "5491122334455"

    @pytest.mark.parametrize("canonical", ["5491122334455", "5493514455667", "14155550100"])
    def test_idempotent_on_canonical_addresses(
        self, canonical: str, policy: TrunkPrefixPolicy
    ) -> None:
        assert format_number(canonical, policy) == canonical
        assert format_number(format_number(canonical, policy), policy) == canonical

    def test_default_policy_is_digits_only(self) -> None:
        assert format_number("011-2233") == "0112233"


class TestTrunkPrefixPolicy:
    def test_only_leading_trunk_digits_stripped(self) -> None:
        assert TrunkPrefixPolicy().apply("0035") == "54935"

    def test_marker_only_removed_after_area_code(self) -> None:
        # "15" appears later in the number, not right after 54911
        assert TrunkPrefixPolicy().apply("01122153344") == "54911221533" + "44"

    def test_custom_prefixes(self) -> None:
        policy = TrunkPrefixPolicy(
            trunk_digit="0", trunk_replacement="44", marker_after="", mobile_marker=""
        )
        assert policy.apply("07911123456") == "447911123456"

    def test_multi_digit_trunk_stripped_as_a_prefix(self) -> None:
        policy = TrunkPrefixPolicy(
            trunk_digit="01", trunk_replacement="7", marker_after="", mobile_marker=""
        )
        assert policy.apply("0110123") == "710123"
        assert policy.apply("0101123") == "7123"


class TestRegistry:
    def test_builtin_policies(self) -> None:
        assert isinstance(build_policy("digits"), DigitsOnlyPolicy)
        assert isinstance(build_policy("trunk_prefix"), TrunkPrefixPolicy)

    def test_options_forwarded(self) -> None:
        policy = build_policy("trunk_prefix", {"trunk_replacement": "55", "mobile_marker": ""})
        assert isinstance(policy, TrunkPrefixPolicy)
        assert policy.trunk_replacement == "55"

    def test_unknown_policy(self) -> None:
        with pytest.raises(ValueError, match="Unknown formatting policy"):
            build_policy("martian")

    def test_register_custom_policy(self) -> None:
        class StripCountry:
            name = "strip_country"

            def apply(self, digits: str) -> str:
                return digits.removeprefix("1")

        try:
            register_policy("strip_country", lambda _options: StripCountry())
            assert format_number("1 415 555 0100", build_policy("strip_country")) == "4155550100"
        finally:
            POLICY_REGISTRY.pop("strip_country", None)

    def test_builtin_cannot_be_replaced(self) -> None:
        with pytest.raises(ValueError, match="built-in"):
            register_policy("digits", lambda _options: DigitsOnlyPolicy())

    def test_factory_must_be_callable(self) -> None:
        with pytest.raises(TypeError):
            register_policy("broken", "not a factory")  # type: ignore[arg-type]
