"""Phone number formatting: raw input line -> canonical directory address.

The core contract is "raw digits in, canonical-address digits out".
Regional rewriting (trunk prefixes, mobile markers) is a swappable
:class:`FormattingPolicy` selected by name from :data:`POLICY_REGISTRY`.

INVARIANT: ``format_number`` returns only digits, or ``""`` when the
input contains no digits.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any, Protocol

_NON_DIGITS = re.compile(r"\D")


class FormattingPolicy(Protocol):
    """Regional normalization applied to a non-empty digit string."""

    name: str

    def apply(self, digits: str) -> str: ...


class DigitsOnlyPolicy:
    """No regional rewriting; the digit string is already canonical."""

    name = "digits"

    def apply(self, digits: str) -> str:
        return digits


class TrunkPrefixPolicy:
    """Replace a national trunk prefix with the international mobile prefix.

    Defaults follow Argentine numbering: ``011 15 2233-4455`` dialled
    nationally becomes ``54 9 11 2233 4455``.  Numbers that do not start
    with the trunk digit are treated as already international and are
    returned untouched, which keeps the policy idempotent.
    """

    name = "trunk_prefix"

    def __init__(
        self,
        *,
        trunk_digit: str = "0",
        trunk_replacement: str = "549",
        marker_after: str = "54911",
        mobile_marker: str = "15",
    ) -> None:
        self.trunk_digit = trunk_digit
        self.trunk_replacement = trunk_replacement
        self.marker_after = marker_after
        self.mobile_marker = mobile_marker

    def apply(self, digits: str) -> str:
        if not self.trunk_digit or not digits.startswith(self.trunk_digit):
            return digits
        rest = digits
        while rest.startswith(self.trunk_digit):
            rest = rest[len(self.trunk_digit) :]
        result = self.trunk_replacement + rest
        prefixed_marker = self.marker_after + self.mobile_marker
        if self.mobile_marker and result.startswith(prefixed_marker):
            result = self.marker_after + result[len(prefixed_marker) :]
        return result


PolicyFactory = Callable[[Mapping[str, Any]], FormattingPolicy]


def _trunk_prefix_factory(options: Mapping[str, Any]) -> FormattingPolicy:
    keys = ("trunk_digit", "trunk_replacement", "marker_after", "mobile_marker")
    return TrunkPrefixPolicy(**{k: str(options[k]) for k in keys if k in options})


POLICY_REGISTRY: dict[str, PolicyFactory] = {
    "digits": lambda _options: DigitsOnlyPolicy(),
    "trunk_prefix": _trunk_prefix_factory,
}


def register_policy(name: str, factory: PolicyFactory) -> None:
    """Register a formatting policy factory under *name*.

    Built-in names cannot be replaced.
    """
    if name in ("digits", "trunk_prefix"):
        msg = f"Cannot override built-in formatting policy {name!r}"
        raise ValueError(msg)
    if not callable(factory):
        msg = f"Formatting policy factory for {name!r} is not callable"
        raise TypeError(msg)
    POLICY_REGISTRY[name] = factory


def build_policy(name: str, options: Mapping[str, Any] | None = None) -> FormattingPolicy:
    """Instantiate the policy registered under *name*."""
    factory = POLICY_REGISTRY.get(name)
    if factory is None:
        known = ", ".join(sorted(POLICY_REGISTRY))
        msg = f"Unknown formatting policy {name!r} (known: {known})"
        raise ValueError(msg)
    return factory(options or {})


def extract_digits(raw: str) -> str:
    """Strip every non-digit character from *raw*."""
    return _NON_DIGITS.sub("", str(raw))


def format_number(raw: str, policy: FormattingPolicy | None = None) -> str:
    """Format a raw input line into a canonical directory address.

    Returns ``""`` when *raw* has no digits; callers treat that as
    unformattable.

    Examples:
        >>> format_number("011 2233-4455", TrunkPrefixPolicy())
        '5491122334455'
        >>> format_number("(0) 11 15 2233 4455", TrunkPrefixPolicy())
        '5491122334455'
        >>> format_number("n/a")
        ''
    """
    digits = extract_digits(raw)
    if not digits:
        return ""
    formatted = (policy or DigitsOnlyPolicy()).apply(digits)
    return extract_digits(formatted)
