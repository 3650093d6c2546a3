"""Edits evaluated against one loan application register at a time."""
from __future__ import annotations

from hmda_checker.domain.codes import (
    NA,
    ActionTaken,
    Ethnicity,
    HoepaStatus,
    LienStatus,
    LoanPurpose,
    LoanType,
    Preapproval,
    PropertyType,
    PurchaserType,
    Race,
    Sex,
    UnderwritingResult,
    UnderwritingSystem,
)
from hmda_checker.domain.edits import EditCheck, Scope
from hmda_checker.domain.models import Applicant, LoanApplicationRegister
from hmda_checker.domain.predicates import (
    Verdict,
    any_of,
    at_least,
    at_most,
    contained_in,
    equal_to,
    every,
    greater_than,
    is_blank,
    is_empty,
    is_populated,
    is_sentinel,
    less_than,
    matches,
    negate,
    not_contained_in,
    not_equal_to,
    that,
    when,
)
from hmda_checker.domain.results import Category

PREAPPROVAL_ACTIONS = (ActionTaken.PREAPPROVAL_DENIED, ActionTaken.PREAPPROVAL_APPROVED_NOT_ACCEPTED)
DENIED_ACTIONS = (ActionTaken.DENIED, ActionTaken.PREAPPROVAL_DENIED)
NOT_SOLD_ACTIONS = (
    ActionTaken.APPROVED_NOT_ACCEPTED,
    ActionTaken.DENIED,
    ActionTaken.WITHDRAWN,
    ActionTaken.CLOSED_INCOMPLETE,
    ActionTaken.PREAPPROVAL_DENIED,
    ActionTaken.PREAPPROVAL_APPROVED_NOT_ACCEPTED,
)
PREAPPROVAL_REQUESTED_ACTIONS = (
    ActionTaken.ORIGINATED,
    ActionTaken.APPROVED_NOT_ACCEPTED,
    ActionTaken.PREAPPROVAL_DENIED,
    ActionTaken.PREAPPROVAL_APPROVED_NOT_ACCEPTED,
)
REPORTED_RACES = (
    Race.AMERICAN_INDIAN_OR_ALASKA_NATIVE,
    Race.ASIAN,
    Race.BLACK_OR_AFRICAN_AMERICAN,
    Race.NATIVE_HAWAIIAN_OR_PACIFIC_ISLANDER,
    Race.WHITE,
)
FHA_LOAN_LIMIT = 637
MANUFACTURED_LOAN_LIMIT = 150
MINIMUM_ORIGINATION_INCOME = 10

_DU_RESULTS = (
    UnderwritingResult.APPROVE_ELIGIBLE,
    UnderwritingResult.APPROVE_INELIGIBLE,
    UnderwritingResult.REFER_ELIGIBLE,
    UnderwritingResult.REFER_INELIGIBLE,
    UnderwritingResult.REFER_WITH_CAUTION,
    UnderwritingResult.OUT_OF_SCOPE,
    UnderwritingResult.ERROR,
    UnderwritingResult.OTHER,
)
_LP_RESULTS = (
    UnderwritingResult.ACCEPT,
    UnderwritingResult.CAUTION,
    UnderwritingResult.INELIGIBLE,
    UnderwritingResult.INCOMPLETE,
    UnderwritingResult.INVALID,
    UnderwritingResult.OTHER,
)
_TOTAL_RESULTS = (
    UnderwritingResult.APPROVE_ELIGIBLE,
    UnderwritingResult.APPROVE_INELIGIBLE,
    UnderwritingResult.REFER_ELIGIBLE,
    UnderwritingResult.REFER_INELIGIBLE,
    UnderwritingResult.ACCEPT,
    UnderwritingResult.REFER,
    UnderwritingResult.ERROR,
    UnderwritingResult.OTHER,
)
_GUS_RESULTS = (
    UnderwritingResult.ACCEPT,
    UnderwritingResult.REFER,
    UnderwritingResult.REFER_WITH_CAUTION,
    UnderwritingResult.ELIGIBLE,
    UnderwritingResult.INELIGIBLE,
    UnderwritingResult.INCOMPLETE,
    UnderwritingResult.INVALID,
    UnderwritingResult.UNABLE_TO_DETERMINE,
    UnderwritingResult.ERROR,
    UnderwritingResult.OTHER,
)
_ANY_SYSTEM_RESULT = tuple(result for result in UnderwritingResult if not result.is_sentinel)

VALID_AUS_RESULTS: dict[UnderwritingSystem, tuple[UnderwritingResult, ...]] = {
    UnderwritingSystem.DESKTOP_UNDERWRITER: _DU_RESULTS,
    UnderwritingSystem.LOAN_PROSPECTOR: _LP_RESULTS,
    UnderwritingSystem.TECHNOLOGY_OPEN_TO_APPROVED_LENDERS: _TOTAL_RESULTS,
    UnderwritingSystem.GUARANTEED_UNDERWRITING_SYSTEM: _GUS_RESULTS,
    UnderwritingSystem.OTHER: _ANY_SYSTEM_RESULT,
    UnderwritingSystem.NOT_APPLICABLE: (UnderwritingResult.NOT_APPLICABLE,),
    UnderwritingSystem.EXEMPT: (UnderwritingResult.EXEMPT,),
}


def s200(lar: LoanApplicationRegister) -> Verdict:
    return that(lar.loan.loan_id.strip(), negate(any_of(is_blank, matches(r"0+"))))


def v215(lar: LoanApplicationRegister) -> Verdict:
    application_date = lar.loan.application_date
    return when(
        that(application_date, negate(is_sentinel)),
        that(application_date, at_most(lar.action.action_date)),
    )


def v260(lar: LoanApplicationRegister) -> Verdict:
    return that(lar.loan.amount, greater_than(0))


def v262(lar: LoanApplicationRegister) -> Verdict:
    return when(
        that(lar.loan.application_date, equal_to(NA)),
        that(lar.action.action_taken, equal_to(ActionTaken.PURCHASED)),
    )


def v265(lar: LoanApplicationRegister) -> Verdict:
    return that(lar.loan.term, any_of(equal_to(NA), greater_than(0)))


def v290(lar: LoanApplicationRegister) -> Verdict:
    return that(lar.geography.msa, any_of(equal_to("NA"), matches(r"[0-9]{5}")))


def v295(lar: LoanApplicationRegister) -> Verdict:
    geography = lar.geography
    both_missing = that(geography.state, equal_to("NA")) & that(geography.county, equal_to("NA"))
    both_reported = that(geography.state, matches(r"[0-9]{2}")) & that(geography.county, matches(r"[0-9]{3}"))
    return both_missing | both_reported


def v300(lar: LoanApplicationRegister) -> Verdict:
    geography = lar.geography
    return that(geography.tract, any_of(equal_to("NA"), matches(r"[0-9]{4}\.[0-9]{2}"))) & when(
        that(geography.tract, not_equal_to("NA")),
        that(geography.state, not_equal_to("NA")) & that(geography.county, not_equal_to("NA")),
    )


def v317(lar: LoanApplicationRegister) -> Verdict:
    applicant = lar.applicant
    return (
        that(applicant.ethnicity, not_equal_to(Ethnicity.NO_CO_APPLICANT))
        & that(applicant.race1, not_equal_to(Race.NO_CO_APPLICANT))
        & that(applicant.sex, not_equal_to(Sex.NO_CO_APPLICANT))
    )


def v326(lar: LoanApplicationRegister) -> Verdict:
    co_applicant = lar.co_applicant
    flags = (
        co_applicant.ethnicity is Ethnicity.NO_CO_APPLICANT,
        co_applicant.race1 is Race.NO_CO_APPLICANT,
        co_applicant.sex is Sex.NO_CO_APPLICANT,
    )
    return Verdict.of(all(flags) or not any(flags))


def _races_consistent(applicant: Applicant) -> Verdict:
    additional = applicant.races[1:]
    return (
        that(applicant.race1, is_populated)
        & every(that(race, any_of(is_empty, contained_in(REPORTED_RACES))) for race in additional)
        & when(
            that(applicant.race1, is_sentinel),
            every(that(race, is_empty) for race in additional),
        )
    )


def v330(lar: LoanApplicationRegister) -> Verdict:
    return _races_consistent(lar.applicant) & _races_consistent(lar.co_applicant)


def v347(lar: LoanApplicationRegister) -> Verdict:
    return when(
        that(lar.loan.property_type, equal_to(PropertyType.MULTIFAMILY)),
        that(lar.applicant.income, equal_to(NA)),
    )


def v360(lar: LoanApplicationRegister) -> Verdict:
    return that(lar.applicant.income, any_of(equal_to(NA), greater_than(0)))


def v375(lar: LoanApplicationRegister) -> Verdict:
    return when(
        that(lar.action.action_taken, contained_in(NOT_SOLD_ACTIONS)),
        that(lar.purchaser_type, equal_to(PurchaserType.NOT_APPLICABLE)),
    )


def v470(lar: LoanApplicationRegister) -> Verdict:
    return when(
        that(lar.action.action_taken, contained_in(DENIED_ACTIONS)),
        that(lar.denial.reason1, is_populated),
    )


def v480(lar: LoanApplicationRegister) -> Verdict:
    denial = lar.denial
    return when(
        that(denial.reason1, is_empty),
        that(denial.reason2, is_empty) & that(denial.reason3, is_empty),
    ) & when(that(denial.reason2, is_empty), that(denial.reason3, is_empty))


def v500(lar: LoanApplicationRegister) -> Verdict:
    return when(
        that(lar.action.action_taken, not_equal_to(ActionTaken.ORIGINATED)),
        that(lar.pricing.rate_spread, equal_to(NA)),
    )


def v505(lar: LoanApplicationRegister) -> Verdict:
    return when(
        that(lar.loan.lien_status, contained_in((LienStatus.NOT_SECURED, LienStatus.NOT_APPLICABLE))),
        that(lar.pricing.rate_spread, equal_to(NA)),
    )


def v525(lar: LoanApplicationRegister) -> Verdict:
    return when(
        that(lar.action.action_taken, not_contained_in((ActionTaken.ORIGINATED, ActionTaken.PURCHASED))),
        that(lar.pricing.hoepa_status, equal_to(HoepaStatus.NOT_HIGH_COST)),
    )


def v550(lar: LoanApplicationRegister) -> Verdict:
    return when(
        that(lar.action.action_taken, not_equal_to(ActionTaken.PURCHASED)),
        that(lar.loan.lien_status, not_equal_to(LienStatus.NOT_APPLICABLE)),
    )


def v613_1(lar: LoanApplicationRegister) -> Verdict:
    return that(lar.action.preapproval, contained_in((Preapproval.REQUESTED, Preapproval.NOT_REQUESTED)))


def v613_2(lar: LoanApplicationRegister) -> Verdict:
    return when(
        that(lar.action.action_taken, contained_in(PREAPPROVAL_ACTIONS)),
        that(lar.action.preapproval, equal_to(Preapproval.REQUESTED)),
    )


def v613_3(lar: LoanApplicationRegister) -> Verdict:
    return when(
        that(lar.loan.purpose, contained_in((LoanPurpose.HOME_IMPROVEMENT, LoanPurpose.REFINANCING))),
        that(lar.action.preapproval, equal_to(Preapproval.NOT_REQUESTED)),
    )


def v613_4(lar: LoanApplicationRegister) -> Verdict:
    return when(
        that(lar.action.preapproval, equal_to(Preapproval.REQUESTED)),
        that(lar.action.action_taken, contained_in(PREAPPROVAL_REQUESTED_ACTIONS)),
    )


def v696_1(lar: LoanApplicationRegister) -> Verdict:
    return that(lar.aus.aus1, is_populated)


def v696_2(lar: LoanApplicationRegister) -> Verdict:
    return when(
        that(lar.aus.aus1, contained_in((UnderwritingSystem.NOT_APPLICABLE, UnderwritingSystem.EXEMPT))),
        every(that(system, is_empty) for system in lar.aus.slots[1:]),
    )


def q004(lar: LoanApplicationRegister) -> Verdict:
    return when(
        that(lar.loan.loan_type, equal_to(LoanType.FHA_INSURED))
        & that(lar.loan.property_type, equal_to(PropertyType.ONE_TO_FOUR_FAMILY)),
        that(lar.loan.amount, at_most(FHA_LOAN_LIMIT)),
    )


def q024(lar: LoanApplicationRegister) -> Verdict:
    return when(
        that(lar.action.action_taken, equal_to(ActionTaken.ORIGINATED))
        & that(lar.applicant.income, not_equal_to(NA)),
        that(lar.applicant.income, at_least(MINIMUM_ORIGINATION_INCOME)),
    )


def q036(lar: LoanApplicationRegister) -> Verdict:
    return when(
        that(lar.loan.property_type, equal_to(PropertyType.MANUFACTURED_HOUSING)),
        that(lar.loan.amount, less_than(MANUFACTURED_LOAN_LIMIT)),
    )


def q632(lar: LoanApplicationRegister) -> Verdict:
    return every(
        that(result, is_empty) if system.is_empty else that(result, contained_in(VALID_AUS_RESULTS[system]))
        for system, result in zip(lar.aus.slots, lar.aus_result.slots)
    )


AUS_FIELDS = tuple(f"aus{n}" for n in range(1, 6))
AUS_RESULT_FIELDS = tuple(f"aus_result{n}" for n in range(1, 6))
DENIAL_FIELDS = ("denial_reason1", "denial_reason2", "denial_reason3")


def _lar(check_id: str, category: Category, description: str, evaluate, *fields: str, parent: str | None = None):
    return EditCheck(check_id, category, Scope.LAR, description, evaluate=evaluate, parent=parent, fields=fields)


S, V, Q = Category.SYNTACTICAL, Category.VALIDITY, Category.QUALITY

LAR_EDITS: tuple[EditCheck, ...] = (
    _lar("S200", S, "Loan/application number must not be blank or all zeros", s200, "loan_id"),
    _lar("V215", V, "Application date must be NA or on or before the action taken date", v215,
         "application_date", "action_date"),
    _lar("V260", V, "Loan amount must be greater than zero", v260, "loan_amount"),
    _lar("V262", V, "If application date is NA, action taken must be 6 (purchased)", v262,
         "application_date", "action_taken"),
    _lar("V265", V, "Loan term must be NA or greater than zero", v265, "loan_term"),
    _lar("V290", V, "MSA/MD must be NA or a five digit code", v290, "msa"),
    _lar("V295", V, "State and county must both be NA or both be valid FIPS codes", v295, "state", "county"),
    _lar("V300", V, "Census tract must be NA or in 9999.99 format with state and county reported", v300,
         "tract", "state", "county"),
    _lar("V317", V, "Applicant ethnicity, race and sex must not indicate no co-applicant", v317,
         "applicant_ethnicity", "applicant_race1", "applicant_sex"),
    _lar("V326", V, "Co-applicant ethnicity, race and sex must agree on whether there is a co-applicant", v326,
         "co_applicant_ethnicity", "co_applicant_race1", "co_applicant_sex"),
    _lar("V330", V, "Race 1 must be reported and races 2-5 must be blank or a reported race", v330,
         "applicant_race1", "co_applicant_race1"),
    _lar("V347", V, "If property type is multifamily, applicant income must be NA", v347,
         "property_type", "applicant_income"),
    _lar("V360", V, "Applicant income must be NA or greater than zero", v360, "applicant_income"),
    _lar("V375", V, "If the loan was not originated or purchased, purchaser type must be 0", v375,
         "action_taken", "purchaser_type"),
    _lar("V470", V, "If the application was denied, denial reason 1 must be reported", v470,
         "action_taken", "denial_reason1"),
    _lar("V480", V, "Denial reasons must be reported in order", v480, *DENIAL_FIELDS),
    _lar("V500", V, "If the loan was not originated, rate spread must be NA", v500, "action_taken", "rate_spread"),
    _lar("V505", V, "If the loan is not secured by a lien, rate spread must be NA", v505,
         "lien_status", "rate_spread"),
    _lar("V525", V, "If the loan was not originated or purchased, HOEPA status must be 2", v525,
         "action_taken", "hoepa_status"),
    _lar("V550", V, "Lien status may be 4 (not applicable) only for purchased loans", v550,
         "action_taken", "lien_status"),
    _lar("V613-1", V, "Preapproval must equal 1 or 2", v613_1, "preapproval"),
    _lar("V613-2", V, "If action taken is 7 or 8, preapproval must equal 1", v613_2,
         "action_taken", "preapproval", parent="V613-1"),
    _lar("V613-3", V, "If loan purpose is 2 or 3, preapproval must equal 2", v613_3,
         "loan_purpose", "preapproval", parent="V613-1"),
    _lar("V613-4", V, "If preapproval equals 1, action taken must be 1, 2, 7 or 8", v613_4,
         "preapproval", "action_taken", parent="V613-1"),
    _lar("V696-1", V, "AUS 1 must be reported", v696_1, "aus1"),
    _lar("V696-2", V, "If AUS 1 is not applicable or exempt, AUS 2-5 must be blank", v696_2,
         *AUS_FIELDS, parent="V696-1"),
    _lar("Q004", Q, "FHA loans on one-to-four family property should not exceed the FHA loan limit", q004,
         "loan_type", "property_type", "loan_amount"),
    _lar("Q024", Q, "Originated loans should report applicant income of at least $10 thousand", q024,
         "action_taken", "applicant_income"),
    _lar("Q036", Q, "Loans on manufactured housing should be below $150 thousand", q036,
         "property_type", "loan_amount"),
    _lar("Q632", Q, "AUS Result should be valid for the corresponding AUS", q632, *AUS_FIELDS, *AUS_RESULT_FIELDS),
)
