"""Edits evaluated against the transmittal sheet alone."""
from __future__ import annotations

from hmda_checker.domain.edits import EditCheck, Scope
from hmda_checker.domain.models import InstitutionProfile, TransmittalSheet
from hmda_checker.domain.predicates import (
    Verdict,
    at_most,
    contained_in,
    equal_to,
    every,
    is_blank,
    matches,
    negate,
    not_contained_in,
    that,
)
from hmda_checker.domain.results import Category

US_STATES = frozenset(
    """
    AL AK AZ AR CA CO CT DE DC FL GA HI ID IL IN IA KS KY LA ME MD MA MI MN MS MO MT NE NV NH NJ NM
    NY NC ND OH OK OR PA RI SC SD TN TX UT VT VA WA WV WI WY PR GU VI AS MP
    """.split()
)
PLACEHOLDER_TAX_IDS = ("99-9999999", "00-0000000")
ZIP_PATTERN = r"[0-9]{5}(-[0-9]{4})?"
TAX_ID_PATTERN = r"[0-9]{2}-[0-9]{7}"
EMAIL_PATTERN = r"[^@\s]+@[^@\s]+\.[^@\s]+"


def s028(ts: TransmittalSheet) -> Verdict:
    return that(ts.timestamp.to_datetime(), negate(equal_to(None)))


def v105(ts: TransmittalSheet) -> Verdict:
    respondent = ts.respondent
    required = (respondent.name, respondent.address, respondent.city, respondent.state, respondent.zip_code)
    return every(that(value, negate(is_blank)) for value in required)


def v108(ts: TransmittalSheet) -> Verdict:
    return that(ts.respondent.state, contained_in(US_STATES))


def v111(ts: TransmittalSheet) -> Verdict:
    return that(ts.respondent.zip_code, matches(ZIP_PATTERN))


def v155(ts: TransmittalSheet) -> Verdict:
    return that(ts.tax_id, matches(TAX_ID_PATTERN))


def v160(ts: TransmittalSheet) -> Verdict:
    return that(ts.contact.email.strip(), matches(EMAIL_PATTERN))


def q020(ts: TransmittalSheet) -> Verdict:
    return that(ts.tax_id, not_contained_in(PLACEHOLDER_TAX_IDS))


def q033(ts: TransmittalSheet) -> Verdict:
    return that(ts.timestamp.year, equal_to(ts.activity_year + 1))


def activity_year_check(filing_year: int | None) -> EditCheck:
    def s100(ts: TransmittalSheet) -> Verdict:
        if filing_year is not None:
            return that(ts.activity_year, equal_to(filing_year))
        return that(ts.activity_year, at_most(ts.timestamp.year))

    description = (
        f"Activity year must equal the filing period {filing_year}"
        if filing_year is not None
        else "Activity year must not be later than the year of the timestamp"
    )
    return EditCheck(
        "S100",
        Category.SYNTACTICAL,
        Scope.TRANSMITTAL,
        description,
        evaluate=s100,
        fields=("activity_year", "timestamp"),
        blocking=True,
    )


def transmittal_edits(filing_year: int | None = None) -> list[EditCheck]:
    return [
        EditCheck(
            "S028",
            Category.SYNTACTICAL,
            Scope.TRANSMITTAL,
            "Transmittal Sheet timestamp must be numeric and in ccyymmddhhmm format",
            evaluate=s028,
            fields=("timestamp",),
        ),
        activity_year_check(filing_year),
        EditCheck(
            "V105",
            Category.VALIDITY,
            Scope.TRANSMITTAL,
            "Respondent name, address, city, state and zip code must not be blank",
            evaluate=v105,
            fields=("respondent_name", "respondent_address", "respondent_city", "respondent_state", "respondent_zip"),
        ),
        EditCheck(
            "V108",
            Category.VALIDITY,
            Scope.TRANSMITTAL,
            "Respondent state must be a valid two-letter state code",
            evaluate=v108,
            fields=("respondent_state",),
        ),
        EditCheck(
            "V111",
            Category.VALIDITY,
            Scope.TRANSMITTAL,
            "Respondent zip code must be in 99999 or 99999-9999 format",
            evaluate=v111,
            fields=("respondent_zip",),
        ),
        EditCheck(
            "V155",
            Category.VALIDITY,
            Scope.TRANSMITTAL,
            "Federal tax id must be in 99-9999999 format",
            evaluate=v155,
            fields=("tax_id",),
        ),
        EditCheck(
            "V160",
            Category.VALIDITY,
            Scope.TRANSMITTAL,
            "Contact email address must be a valid email address",
            evaluate=v160,
            fields=("contact_email",),
        ),
        EditCheck(
            "Q020",
            Category.QUALITY,
            Scope.TRANSMITTAL,
            "Federal tax id should not be a placeholder value",
            evaluate=q020,
            fields=("tax_id",),
        ),
        EditCheck(
            "Q033",
            Category.QUALITY,
            Scope.TRANSMITTAL,
            "The timestamp year should be the year following the activity year",
            evaluate=q033,
            parent="S028",
            fields=("timestamp", "activity_year"),
        ),
    ]


def institution_edits(institution: InstitutionProfile) -> list[EditCheck]:
    def s301(ts: TransmittalSheet) -> Verdict:
        return (
            that(ts.respondent.id, equal_to(institution.respondent_id))
            & that(ts.agency_code, equal_to(institution.agency_code))
            & that(ts.tax_id, equal_to(institution.tax_id))
        )

    def q035(ts: TransmittalSheet) -> Verdict:
        domain = ts.contact.email.strip().rpartition("@")[2].lower()
        return that(domain, contained_in(d.lower() for d in institution.email_domains))

    checks = [
        EditCheck(
            "S301",
            Category.SYNTACTICAL,
            Scope.TRANSMITTAL,
            "Respondent id, agency code and tax id must match the registered institution",
            evaluate=s301,
            fields=("respondent_id", "agency_code", "tax_id"),
        )
    ]
    if institution.email_domains:
        checks.append(
            EditCheck(
                "Q035",
                Category.QUALITY,
                Scope.TRANSMITTAL,
                "Contact email domain should be one of the institution's email domains",
                evaluate=q035,
                parent="V160",
                fields=("contact_email",),
            )
        )
    return checks
