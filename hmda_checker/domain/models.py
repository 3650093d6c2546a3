"""Domain models for HMDA filings.

A filing is one transmittal sheet (the header record) followed by loan
application register records (the detail records). These dataclasses capture
the typed shape produced by the record parser.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from .codes import (
    ActionTaken,
    AgencyCode,
    DenialReason,
    Ethnicity,
    HoepaStatus,
    LienStatus,
    LoanPurpose,
    LoanType,
    NA,
    Occupancy,
    Preapproval,
    PropertyType,
    PurchaserType,
    Race,
    Sex,
    Unavailable,
    UnderwritingResult,
    UnderwritingSystem,
)


@dataclass(frozen=True)
class Timestamp:
    """A ``ccyymmddhhmm`` transmission timestamp.

    Components are range-checked when decoded but not calendar-checked, so
    ``to_datetime`` returns ``None`` for values such as February 30th.
    """

    year: int
    month: int
    day: int
    hour: int
    minute: int

    def to_datetime(self) -> datetime | None:
        try:
            return datetime(self.year, self.month, self.day, self.hour, self.minute)
        except ValueError:
            return None

    def encode(self) -> str:
        return f"{self.year:04d}{self.month:02d}{self.day:02d}{self.hour:02d}{self.minute:02d}"

    def __str__(self) -> str:
        return self.encode()


@dataclass(frozen=True)
class Respondent:
    id: str
    name: str
    address: str
    city: str
    state: str
    zip_code: str


@dataclass(frozen=True)
class Parent:
    name: str
    address: str
    city: str
    state: str
    zip_code: str


@dataclass(frozen=True)
class Contact:
    name: str
    phone: str
    fax: str
    email: str


@dataclass(frozen=True)
class TransmittalSheet:
    """Header record; exactly one per filing."""

    agency_code: AgencyCode
    timestamp: Timestamp
    activity_year: int
    tax_id: str
    total_lines: int
    respondent: Respondent
    parent: Parent
    contact: Contact

    @property
    def record_id(self) -> str:
        return self.respondent.id


@dataclass(frozen=True)
class Loan:
    loan_id: str
    application_date: date | Unavailable
    loan_type: LoanType
    property_type: PropertyType
    purpose: LoanPurpose
    occupancy: Occupancy
    amount: int
    term: int | Unavailable
    lien_status: LienStatus


@dataclass(frozen=True)
class Action:
    preapproval: Preapproval
    action_taken: ActionTaken
    action_date: date


@dataclass(frozen=True)
class Geography:
    msa: str
    state: str
    county: str
    tract: str


@dataclass(frozen=True)
class Applicant:
    ethnicity: Ethnicity
    race1: Race
    race2: Race
    race3: Race
    race4: Race
    race5: Race
    sex: Sex
    income: int | Unavailable = NA

    @property
    def races(self) -> tuple[Race, Race, Race, Race, Race]:
        return (self.race1, self.race2, self.race3, self.race4, self.race5)


@dataclass(frozen=True)
class Denial:
    reason1: DenialReason = DenialReason.EMPTY
    reason2: DenialReason = DenialReason.EMPTY
    reason3: DenialReason = DenialReason.EMPTY

    @property
    def reasons(self) -> tuple[DenialReason, DenialReason, DenialReason]:
        return (self.reason1, self.reason2, self.reason3)


@dataclass(frozen=True)
class Pricing:
    rate_spread: Decimal | Unavailable
    hoepa_status: HoepaStatus


@dataclass(frozen=True)
class AUS:
    """Automated underwriting systems reported in slots one to five."""

    aus1: UnderwritingSystem = UnderwritingSystem.EMPTY
    aus2: UnderwritingSystem = UnderwritingSystem.EMPTY
    aus3: UnderwritingSystem = UnderwritingSystem.EMPTY
    aus4: UnderwritingSystem = UnderwritingSystem.EMPTY
    aus5: UnderwritingSystem = UnderwritingSystem.EMPTY

    @property
    def slots(self) -> tuple[UnderwritingSystem, ...]:
        return (self.aus1, self.aus2, self.aus3, self.aus4, self.aus5)


@dataclass(frozen=True)
class AUSResult:
    """Results paired positionally with the systems in ``AUS``."""

    aus_result1: UnderwritingResult = UnderwritingResult.EMPTY
    aus_result2: UnderwritingResult = UnderwritingResult.EMPTY
    aus_result3: UnderwritingResult = UnderwritingResult.EMPTY
    aus_result4: UnderwritingResult = UnderwritingResult.EMPTY
    aus_result5: UnderwritingResult = UnderwritingResult.EMPTY

    @property
    def slots(self) -> tuple[UnderwritingResult, ...]:
        return (self.aus_result1, self.aus_result2, self.aus_result3, self.aus_result4, self.aus_result5)


@dataclass(frozen=True)
class LoanApplicationRegister:
    """Detail record; one per loan or application."""

    respondent_id: str
    agency_code: AgencyCode
    loan: Loan
    action: Action
    geography: Geography
    applicant: Applicant
    co_applicant: Applicant
    purchaser_type: PurchaserType
    denial: Denial
    pricing: Pricing
    aus: AUS = field(default_factory=AUS)
    aus_result: AUSResult = field(default_factory=AUSResult)

    @property
    def record_id(self) -> str:
        return self.loan.loan_id


@dataclass(frozen=True)
class InstitutionProfile:
    """Registered filer details the transmittal sheet is checked against."""

    respondent_id: str
    agency_code: AgencyCode
    activity_year: int
    tax_id: str
    respondent_name: str = ""
    lei: str = ""
    email_domains: tuple[str, ...] = ()
