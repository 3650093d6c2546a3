"""Closed code sets used by the transmittal sheet and loan application register.

Every coded field decodes to exactly one member of its enumeration. Members whose
name appears in ``SENTINEL_NAMES`` stand for "not applicable", "not provided" or an
empty slot; they are ordinary members so a coded field is never ``None``.
"""
from __future__ import annotations

from enum import Enum

SENTINEL_NAMES = frozenset({"EMPTY", "NOT_APPLICABLE", "NOT_PROVIDED", "NO_CO_APPLICANT", "EXEMPT"})


class CodedValue(str, Enum):
    """Base for every closed code set; the member value is the code on the wire."""

    @property
    def code(self) -> str:
        return self.value

    @property
    def is_sentinel(self) -> bool:
        return self.name in SENTINEL_NAMES

    @property
    def is_empty(self) -> bool:
        return self.name == "EMPTY"

    def __str__(self) -> str:
        return self.value


class Unavailable(CodedValue):
    """Sentinel for numeric and date fields reported as ``NA``."""

    NOT_APPLICABLE = "NA"


NA = Unavailable.NOT_APPLICABLE


class AgencyCode(CodedValue):
    OCC = "1"
    FRS = "2"
    FDIC = "3"
    NCUA = "5"
    HUD = "7"
    CFPB = "9"


class LoanType(CodedValue):
    CONVENTIONAL = "1"
    FHA_INSURED = "2"
    VA_GUARANTEED = "3"
    FSA_RHS_GUARANTEED = "4"


class PropertyType(CodedValue):
    ONE_TO_FOUR_FAMILY = "1"
    MANUFACTURED_HOUSING = "2"
    MULTIFAMILY = "3"


class LoanPurpose(CodedValue):
    HOME_PURCHASE = "1"
    HOME_IMPROVEMENT = "2"
    REFINANCING = "3"


class Occupancy(CodedValue):
    OWNER_OCCUPIED = "1"
    NOT_OWNER_OCCUPIED = "2"
    NOT_APPLICABLE = "3"


class Preapproval(CodedValue):
    REQUESTED = "1"
    NOT_REQUESTED = "2"
    NOT_APPLICABLE = "3"


class ActionTaken(CodedValue):
    ORIGINATED = "1"
    APPROVED_NOT_ACCEPTED = "2"
    DENIED = "3"
    WITHDRAWN = "4"
    CLOSED_INCOMPLETE = "5"
    PURCHASED = "6"
    PREAPPROVAL_DENIED = "7"
    PREAPPROVAL_APPROVED_NOT_ACCEPTED = "8"


class Ethnicity(CodedValue):
    HISPANIC_OR_LATINO = "1"
    NOT_HISPANIC_OR_LATINO = "2"
    NOT_PROVIDED = "3"
    NOT_APPLICABLE = "4"
    NO_CO_APPLICANT = "5"


class Race(CodedValue):
    AMERICAN_INDIAN_OR_ALASKA_NATIVE = "1"
    ASIAN = "2"
    BLACK_OR_AFRICAN_AMERICAN = "3"
    NATIVE_HAWAIIAN_OR_PACIFIC_ISLANDER = "4"
    WHITE = "5"
    NOT_PROVIDED = "6"
    NOT_APPLICABLE = "7"
    NO_CO_APPLICANT = "8"
    EMPTY = ""


class Sex(CodedValue):
    MALE = "1"
    FEMALE = "2"
    NOT_PROVIDED = "3"
    NOT_APPLICABLE = "4"
    NO_CO_APPLICANT = "5"


class PurchaserType(CodedValue):
    NOT_APPLICABLE = "0"
    FANNIE_MAE = "1"
    GINNIE_MAE = "2"
    FREDDIE_MAC = "3"
    FARMER_MAC = "4"
    PRIVATE_SECURITIZATION = "5"
    COMMERCIAL_BANK = "6"
    LIFE_INSURANCE_COMPANY = "7"
    AFFILIATE_INSTITUTION = "8"
    OTHER_PURCHASER = "9"


class DenialReason(CodedValue):
    DEBT_TO_INCOME_RATIO = "1"
    EMPLOYMENT_HISTORY = "2"
    CREDIT_HISTORY = "3"
    COLLATERAL = "4"
    INSUFFICIENT_CASH = "5"
    UNVERIFIABLE_INFORMATION = "6"
    CREDIT_APPLICATION_INCOMPLETE = "7"
    MORTGAGE_INSURANCE_DENIED = "8"
    OTHER = "9"
    EMPTY = ""


class HoepaStatus(CodedValue):
    HIGH_COST = "1"
    NOT_HIGH_COST = "2"


class LienStatus(CodedValue):
    FIRST_LIEN = "1"
    SUBORDINATE_LIEN = "2"
    NOT_SECURED = "3"
    NOT_APPLICABLE = "4"


class UnderwritingSystem(CodedValue):
    DESKTOP_UNDERWRITER = "1"
    LOAN_PROSPECTOR = "2"
    TECHNOLOGY_OPEN_TO_APPROVED_LENDERS = "3"
    GUARANTEED_UNDERWRITING_SYSTEM = "4"
    OTHER = "5"
    NOT_APPLICABLE = "6"
    EXEMPT = "1111"
    EMPTY = ""


class UnderwritingResult(CodedValue):
    APPROVE_ELIGIBLE = "1"
    APPROVE_INELIGIBLE = "2"
    REFER_ELIGIBLE = "3"
    REFER_INELIGIBLE = "4"
    REFER_WITH_CAUTION = "5"
    OUT_OF_SCOPE = "6"
    ERROR = "7"
    ACCEPT = "8"
    CAUTION = "9"
    INELIGIBLE = "10"
    INCOMPLETE = "11"
    INVALID = "12"
    REFER = "13"
    ELIGIBLE = "14"
    UNABLE_TO_DETERMINE = "15"
    OTHER = "16"
    NOT_APPLICABLE = "17"
    EXEMPT = "1111"
    EMPTY = ""
