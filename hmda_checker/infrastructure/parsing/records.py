"""Record parser producing transmittal sheets and loan application registers."""
from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Mapping

from hmda_checker.domain.codes import NA
from hmda_checker.domain.errors import InvalidFileFormat
from hmda_checker.domain.models import (
    AUS,
    Action,
    Applicant,
    AUSResult,
    Contact,
    Denial,
    Geography,
    Loan,
    LoanApplicationRegister,
    Parent,
    Pricing,
    Respondent,
    TransmittalSheet,
)
from hmda_checker.domain.results import DecodeError, FormatError, ParsedLine, ParseError, Record
from hmda_checker.infrastructure.parsing.codec import FieldSpec, decode, encode
from hmda_checker.infrastructure.parsing.layout import LAR_LAYOUT, LAR_RECORD_TAG, LAYOUTS, TS_LAYOUT, TS_RECORD_TAG
from hmda_checker.infrastructure.parsing.utils import has_control_characters, to_text

logger = logging.getLogger(__name__)

DEFAULT_DELIMITER = "|"
INVALID_FILE_FORMAT = "Invalid File Format"
BYTE_ORDER_MARK = "\ufeff"


def _build_transmittal_sheet(values: Mapping[str, Any]) -> TransmittalSheet:
    return TransmittalSheet(
        agency_code=values["agency_code"],
        timestamp=values["timestamp"],
        activity_year=values["activity_year"],
        tax_id=values["tax_id"],
        total_lines=values["total_lines"],
        respondent=Respondent(
            id=values["respondent_id"],
            name=values["respondent_name"],
            address=values["respondent_address"],
            city=values["respondent_city"],
            state=values["respondent_state"],
            zip_code=values["respondent_zip"],
        ),
        parent=Parent(
            name=values["parent_name"],
            address=values["parent_address"],
            city=values["parent_city"],
            state=values["parent_state"],
            zip_code=values["parent_zip"],
        ),
        contact=Contact(
            name=values["contact_name"],
            phone=values["contact_phone"],
            fax=values["contact_fax"],
            email=values["contact_email"],
        ),
    )


def _build_applicant(values: Mapping[str, Any], prefix: str, income: Any = NA) -> Applicant:
    return Applicant(
        ethnicity=values[f"{prefix}_ethnicity"],
        race1=values[f"{prefix}_race1"],
        race2=values[f"{prefix}_race2"],
        race3=values[f"{prefix}_race3"],
        race4=values[f"{prefix}_race4"],
        race5=values[f"{prefix}_race5"],
        sex=values[f"{prefix}_sex"],
        income=income,
    )


def _build_lar(values: Mapping[str, Any]) -> LoanApplicationRegister:
    return LoanApplicationRegister(
        respondent_id=values["respondent_id"],
        agency_code=values["agency_code"],
        loan=Loan(
            loan_id=values["loan_id"],
            application_date=values["application_date"],
            loan_type=values["loan_type"],
            property_type=values["property_type"],
            purpose=values["loan_purpose"],
            occupancy=values["occupancy"],
            amount=values["loan_amount"],
            term=values["loan_term"],
            lien_status=values["lien_status"],
        ),
        action=Action(
            preapproval=values["preapproval"],
            action_taken=values["action_taken"],
            action_date=values["action_date"],
        ),
        geography=Geography(
            msa=values["msa"],
            state=values["state"],
            county=values["county"],
            tract=values["tract"],
        ),
        applicant=_build_applicant(values, "applicant", values["applicant_income"]),
        co_applicant=_build_applicant(values, "co_applicant"),
        purchaser_type=values["purchaser_type"],
        denial=Denial(values["denial_reason1"], values["denial_reason2"], values["denial_reason3"]),
        pricing=Pricing(rate_spread=values["rate_spread"], hoepa_status=values["hoepa_status"]),
        aus=AUS(*(values[f"aus{n}"] for n in range(1, 6))),
        aus_result=AUSResult(*(values[f"aus_result{n}"] for n in range(1, 6))),
    )


_BUILDERS = {TS_RECORD_TAG: _build_transmittal_sheet, LAR_RECORD_TAG: _build_lar}


def _flatten_transmittal_sheet(ts: TransmittalSheet) -> dict[str, Any]:
    return {
        "record_id": TS_RECORD_TAG,
        "respondent_id": ts.respondent.id,
        "agency_code": ts.agency_code,
        "timestamp": ts.timestamp,
        "activity_year": ts.activity_year,
        "tax_id": ts.tax_id,
        "total_lines": ts.total_lines,
        "respondent_name": ts.respondent.name,
        "respondent_address": ts.respondent.address,
        "respondent_city": ts.respondent.city,
        "respondent_state": ts.respondent.state,
        "respondent_zip": ts.respondent.zip_code,
        "parent_name": ts.parent.name,
        "parent_address": ts.parent.address,
        "parent_city": ts.parent.city,
        "parent_state": ts.parent.state,
        "parent_zip": ts.parent.zip_code,
        "contact_name": ts.contact.name,
        "contact_phone": ts.contact.phone,
        "contact_fax": ts.contact.fax,
        "contact_email": ts.contact.email,
    }


def _flatten_applicant(applicant: Applicant, prefix: str) -> dict[str, Any]:
    values: dict[str, Any] = {f"{prefix}_ethnicity": applicant.ethnicity, f"{prefix}_sex": applicant.sex}
    for n, race in enumerate(applicant.races, start=1):
        values[f"{prefix}_race{n}"] = race
    return values


def _flatten_lar(lar: LoanApplicationRegister) -> dict[str, Any]:
    values: dict[str, Any] = {
        "record_id": LAR_RECORD_TAG,
        "respondent_id": lar.respondent_id,
        "agency_code": lar.agency_code,
        "loan_id": lar.loan.loan_id,
        "application_date": lar.loan.application_date,
        "loan_type": lar.loan.loan_type,
        "property_type": lar.loan.property_type,
        "loan_purpose": lar.loan.purpose,
        "occupancy": lar.loan.occupancy,
        "loan_amount": lar.loan.amount,
        "loan_term": lar.loan.term,
        "preapproval": lar.action.preapproval,
        "action_taken": lar.action.action_taken,
        "action_date": lar.action.action_date,
        "msa": lar.geography.msa,
        "state": lar.geography.state,
        "county": lar.geography.county,
        "tract": lar.geography.tract,
        "applicant_income": lar.applicant.income,
        "purchaser_type": lar.purchaser_type,
        "rate_spread": lar.pricing.rate_spread,
        "hoepa_status": lar.pricing.hoepa_status,
        "lien_status": lar.loan.lien_status,
    }
    values.update(_flatten_applicant(lar.applicant, "applicant"))
    values.update(_flatten_applicant(lar.co_applicant, "co_applicant"))
    for n, reason in enumerate(lar.denial.reasons, start=1):
        values[f"denial_reason{n}"] = reason
    for n, system in enumerate(lar.aus.slots, start=1):
        values[f"aus{n}"] = system
    for n, result in enumerate(lar.aus_result.slots, start=1):
        values[f"aus_result{n}"] = result
    return values


def format_record(record: Record, delimiter: str = DEFAULT_DELIMITER) -> str:
    """Serialize a record back into one delimited line."""
    if isinstance(record, TransmittalSheet):
        layout, values = TS_LAYOUT, _flatten_transmittal_sheet(record)
    else:
        layout, values = LAR_LAYOUT, _flatten_lar(record)
    return delimiter.join(encode(values[spec.name]) for spec in layout)


def _decode_fields(
    layout: tuple[FieldSpec, ...], tokens: list[str], line_number: int
) -> dict[str, Any] | ParseError:
    values: dict[str, Any] = {}
    for spec, token in zip(layout, tokens):
        value = decode(spec, token)
        if isinstance(value, DecodeError):
            return ParseError(
                line_number=line_number,
                message=value.message,
                field=value.field,
                token=value.token,
            )
        values[spec.name] = value
    return values


def parse_line(raw_line: str, line_number: int = 1, delimiter: str = DEFAULT_DELIMITER) -> Record | ParseError:
    """Parse one line; a malformed line is rejected as a whole."""
    tokens = raw_line.split(delimiter)
    tag = tokens[0]
    layout = LAYOUTS.get(tag)
    if layout is None:
        return ParseError(line_number, f"Unknown record identifier {tag!r}", field="record_id", token=tag)
    if len(tokens) != len(layout):
        return ParseError(
            line_number,
            f"Incorrect number of fields: expected {len(layout)}, found {len(tokens)}",
            expected=len(layout),
            actual=len(tokens),
        )
    values = _decode_fields(layout, tokens, line_number)
    if isinstance(values, ParseError):
        return values
    return _BUILDERS[tag](values)


def check_format(first_line: str, delimiter: str = DEFAULT_DELIMITER) -> FormatError | TransmittalSheet:
    """Decide whether the first line opens a delimited filing at all."""
    if has_control_characters(first_line):
        return FormatError(INVALID_FILE_FORMAT, "binary content in the first line")
    if delimiter not in first_line:
        return FormatError(INVALID_FILE_FORMAT, f"no {delimiter!r} delimiter in the first line")
    parsed = parse_line(first_line, 1, delimiter)
    if isinstance(parsed, ParseError):
        return FormatError(INVALID_FILE_FORMAT, parsed.message)
    if not isinstance(parsed, TransmittalSheet):
        return FormatError(INVALID_FILE_FORMAT, "the first line is not a transmittal sheet")
    return parsed


class FilingParser:
    """Lazily parses a filing one line at a time.

    Iterating twice re-reads the underlying lines, so the parser restarts cleanly
    whenever the line source does. Raises ``InvalidFileFormat`` before yielding
    anything when the content is not a delimited filing.
    """

    def __init__(
        self,
        lines: Iterable[str | bytes],
        delimiter: str = DEFAULT_DELIMITER,
        encoding: str = "utf-8",
    ) -> None:
        self._lines = lines
        self._delimiter = delimiter
        self._encoding = encoding

    def __iter__(self) -> Iterator[ParsedLine]:
        header_seen = False
        for line_number, raw in enumerate(self._lines, start=1):
            try:
                text = to_text(raw, self._encoding)
            except UnicodeDecodeError:
                if not header_seen:
                    raise InvalidFileFormat(FormatError(INVALID_FILE_FORMAT, "content is not text"))
                yield ParsedLine(line_number, ParseError(line_number, f"Line is not valid {self._encoding} text"))
                continue
            if not header_seen:
                text = text.removeprefix(BYTE_ORDER_MARK)
            if not text.strip():
                continue
            if not header_seen:
                checked = check_format(text, self._delimiter)
                if isinstance(checked, FormatError):
                    logger.info("Rejecting filing at line %d: %s", line_number, checked.detail)
                    raise InvalidFileFormat(checked)
                header_seen = True
                yield ParsedLine(line_number, checked)
                continue
            parsed = parse_line(text, line_number, self._delimiter)
            if isinstance(parsed, TransmittalSheet):
                parsed = ParseError(line_number, "Only one transmittal sheet is allowed per filing", field="record_id")
            if isinstance(parsed, ParseError):
                logger.debug("Line %d rejected: %s", line_number, parsed.message)
            yield ParsedLine(line_number, parsed)
        if not header_seen:
            raise InvalidFileFormat(FormatError(INVALID_FILE_FORMAT, "the file is empty"))


def parse_file(
    lines: Iterable[str | bytes],
    delimiter: str = DEFAULT_DELIMITER,
    encoding: str = "utf-8",
) -> Iterator[ParsedLine]:
    return iter(FilingParser(lines, delimiter, encoding))
