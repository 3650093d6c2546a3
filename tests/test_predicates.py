from datetime import date

from hmda_checker.domain.codes import NA, Race, UnderwritingSystem
from hmda_checker.domain.predicates import (
    Verdict,
    any_of,
    at_most,
    between,
    contained_in,
    equal_to,
    every,
    greater_than,
    is_empty,
    is_populated,
    is_sentinel,
    matches,
    negate,
    some,
    that,
    when,
)


def test_verdict_combinators():
    success, failure = Verdict.SUCCESS, Verdict.FAILURE

    assert success & success is success
    assert success & failure is failure
    assert failure | success is success
    assert ~failure is success
    assert not failure


def test_when_is_vacuously_true():
    assert when(Verdict.FAILURE, Verdict.FAILURE) is Verdict.SUCCESS
    assert when(Verdict.SUCCESS, Verdict.FAILURE) is Verdict.FAILURE
    assert when(Verdict.SUCCESS, Verdict.SUCCESS) is Verdict.SUCCESS


def test_every_and_some():
    assert every([]) is Verdict.SUCCESS
    assert some([]) is Verdict.FAILURE
    assert every(that(n, greater_than(0)) for n in (1, 2)) is Verdict.SUCCESS
    assert some(that(n, greater_than(1)) for n in (1, 2)) is Verdict.SUCCESS


def test_range_predicates_never_match_sentinels_or_none():
    for value in (NA, None, UnderwritingSystem.EMPTY):
        assert not greater_than(0)(value)
        assert not at_most(10)(value)
        assert not between(0, 10)(value)


def test_range_predicates_on_dates_and_numbers():
    assert at_most(date(2017, 3, 1))(date(2017, 1, 17))
    assert between(1, 3)(3)
    assert not between(1, 3)(4)


def test_membership_and_equality():
    assert that(Race.WHITE, contained_in((Race.ASIAN, Race.WHITE)))
    assert not that(Race.EMPTY, contained_in((Race.ASIAN, Race.WHITE)))
    assert that(NA, equal_to(NA))
    assert not that(date(2017, 1, 1), equal_to(NA))


def test_sentinel_predicates():
    assert is_empty(UnderwritingSystem.EMPTY)
    assert is_populated(UnderwritingSystem.EXEMPT)
    assert is_sentinel(UnderwritingSystem.EXEMPT)
    assert not is_sentinel(UnderwritingSystem.DESKTOP_UNDERWRITER)
    assert is_empty("   ")


def test_matches_and_composition():
    zip_code = any_of(equal_to("NA"), matches(r"[0-9]{5}"))

    assert zip_code("95814")
    assert zip_code("NA")
    assert not zip_code("9581")
    assert not matches(r"[0-9]+")(42)
    assert negate(zip_code)("abcde")
