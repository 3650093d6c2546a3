"""Composable predicates used to author edit checks.

Predicates are plain functions of one value returning ``bool``. ``that`` binds a
value to a predicate and yields a ``Verdict``; verdicts combine with ``&``, ``|``
and ``~`` and with ``when`` for conditional rules::

    when(
        that(lar.action.action_taken, contained_in(PREAPPROVAL_ACTIONS)),
        that(lar.action.preapproval, equal_to(Preapproval.REQUESTED)),
    )

Range predicates never match sentinels or ``None``, so every combinator is total
over decoded field values.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Any, Callable, Iterable

from .codes import CodedValue

Predicate = Callable[[Any], bool]


class Verdict(Enum):
    SUCCESS = "success"
    FAILURE = "failure"

    @classmethod
    def of(cls, flag: bool) -> Verdict:
        return cls.SUCCESS if flag else cls.FAILURE

    def __bool__(self) -> bool:
        return self is Verdict.SUCCESS

    def __and__(self, other: Verdict) -> Verdict:
        return Verdict.of(bool(self) and bool(other))

    def __or__(self, other: Verdict) -> Verdict:
        return Verdict.of(bool(self) or bool(other))

    def __invert__(self) -> Verdict:
        return Verdict.of(not self)


def that(value: Any, predicate: Predicate) -> Verdict:
    return Verdict.of(predicate(value))


def when(condition: Verdict | bool, consequence: Verdict) -> Verdict:
    """Implication: vacuously successful when the condition does not hold."""
    if not condition:
        return Verdict.SUCCESS
    return consequence


def every(verdicts: Iterable[Verdict]) -> Verdict:
    return Verdict.of(all(verdicts))


def some(verdicts: Iterable[Verdict]) -> Verdict:
    return Verdict.of(any(verdicts))


def _is_comparable(value: Any) -> bool:
    return value is not None and not isinstance(value, CodedValue)


def equal_to(expected: Any) -> Predicate:
    return lambda value: value == expected


def not_equal_to(expected: Any) -> Predicate:
    return lambda value: value != expected


def contained_in(values: Iterable[Any]) -> Predicate:
    members = tuple(values)
    return lambda value: value in members


def not_contained_in(values: Iterable[Any]) -> Predicate:
    members = tuple(values)
    return lambda value: value not in members


def between(low: Any, high: Any) -> Predicate:
    """Inclusive range check."""
    return lambda value: _is_comparable(value) and low <= value <= high


def greater_than(bound: Any) -> Predicate:
    return lambda value: _is_comparable(value) and value > bound


def at_least(bound: Any) -> Predicate:
    return lambda value: _is_comparable(value) and value >= bound


def less_than(bound: Any) -> Predicate:
    return lambda value: _is_comparable(value) and value < bound


def at_most(bound: Any) -> Predicate:
    return lambda value: _is_comparable(value) and value <= bound


def matches(pattern: str) -> Predicate:
    compiled = re.compile(pattern)
    return lambda value: isinstance(value, str) and compiled.fullmatch(value) is not None


def is_blank(value: Any) -> bool:
    return isinstance(value, str) and not value.strip()


def is_sentinel(value: Any) -> bool:
    return isinstance(value, CodedValue) and value.is_sentinel


def is_empty(value: Any) -> bool:
    if isinstance(value, CodedValue):
        return value.is_empty
    return is_blank(value)


def is_populated(value: Any) -> bool:
    return not is_empty(value)


def all_of(*predicates: Predicate) -> Predicate:
    return lambda value: all(predicate(value) for predicate in predicates)


def any_of(*predicates: Predicate) -> Predicate:
    return lambda value: any(predicate(value) for predicate in predicates)


def negate(predicate: Predicate) -> Predicate:
    return lambda value: not predicate(value)
