"""Field codec: raw tokens to typed values and back.

``decode`` never raises for bad input; it returns a ``DecodeError`` naming the
field and the offending token.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from hmda_checker.domain.codes import NA, CodedValue
from hmda_checker.domain.models import Timestamp
from hmda_checker.domain.results import DecodeError

NA_TOKEN = NA.code

_UNSIGNED = re.compile(r"[0-9]+")
_SIGNED = re.compile(r"[+-]?[0-9]+")
_DECIMAL = re.compile(r"[0-9]+(\.[0-9]+)?")
_SIGNED_DECIMAL = re.compile(r"[+-]?[0-9]+(\.[0-9]+)?")
_TIMESTAMP = re.compile(r"[0-9]{12}")
_DATE = re.compile(r"[0-9]{8}")


class FieldKind(Enum):
    INTEGER = "integer"
    DECIMAL = "decimal"
    TIMESTAMP = "timestamp"
    DATE = "date"
    CODE = "code"
    TEXT = "text"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind
    width: int | None = None
    signed: bool = False
    codes: type[CodedValue] | None = None
    allow_na: bool = False


class PaddedInt(int):
    """An integer decoded from a zero-padded token; remembers the token width."""

    def __new__(cls, token):
        value = super().__new__(cls, token)
        value.width = len(str(token).lstrip("+-"))
        return value


class PaddedDecimal(Decimal):
    """A decimal decoded from a token with a zero-padded integer part."""

    def __new__(cls, token):
        value = super().__new__(cls, token)
        value.width = len(str(token).lstrip("+-"))
        return value


def _is_padded(digits: str) -> bool:
    return len(digits) > 1 and digits[0] == "0" and digits[1] != "."


def _error(spec: FieldSpec, token: str, reason: str) -> DecodeError:
    return DecodeError(field=spec.name, token=token, reason=reason)


def _decode_integer(spec: FieldSpec, token: str) -> int | DecodeError:
    pattern = _SIGNED if spec.signed else _UNSIGNED
    if not pattern.fullmatch(token):
        return _error(spec, token, "must be numeric")
    digits = token.lstrip("+-")
    if spec.width is not None and len(digits) > spec.width:
        return _error(spec, token, f"must have at most {spec.width} digits")
    return PaddedInt(token) if _is_padded(digits) else int(token)


def _decode_decimal(spec: FieldSpec, token: str) -> Decimal | DecodeError:
    pattern = _SIGNED_DECIMAL if spec.signed else _DECIMAL
    if not pattern.fullmatch(token):
        return _error(spec, token, "must be a decimal number")
    if spec.width is not None and len(token.lstrip("+-")) > spec.width:
        return _error(spec, token, f"must be at most {spec.width} characters")
    try:
        if _is_padded(token.lstrip("+-")):
            return PaddedDecimal(token)
        return Decimal(token)
    except InvalidOperation:
        return _error(spec, token, "must be a decimal number")


def _decode_timestamp(spec: FieldSpec, token: str) -> Timestamp | DecodeError:
    if not _TIMESTAMP.fullmatch(token):
        return _error(spec, token, "must be numeric in ccyymmddhhmm format")
    year, month, day = int(token[0:4]), int(token[4:6]), int(token[6:8])
    hour, minute = int(token[8:10]), int(token[10:12])
    if not 1 <= month <= 12:
        return _error(spec, token, "month must be 01-12")
    if not 1 <= day <= 31:
        return _error(spec, token, "day must be 01-31")
    if not 0 <= hour <= 23:
        return _error(spec, token, "hour must be 00-23")
    if not 0 <= minute <= 59:
        return _error(spec, token, "minute must be 00-59")
    return Timestamp(year, month, day, hour, minute)


def _decode_date(spec: FieldSpec, token: str) -> date | DecodeError:
    if not _DATE.fullmatch(token):
        return _error(spec, token, "must be numeric in ccyymmdd format")
    try:
        return date(int(token[0:4]), int(token[4:6]), int(token[6:8]))
    except ValueError:
        return _error(spec, token, "is not a calendar date")


def _decode_code(spec: FieldSpec, token: str) -> CodedValue | DecodeError:
    try:
        return spec.codes(token)
    except ValueError:
        return _error(spec, token, f"is not a valid {spec.codes.__name__} code")


def _decode_text(spec: FieldSpec, token: str) -> str | DecodeError:
    if spec.width is not None and len(token) > spec.width:
        return _error(spec, token, f"must be at most {spec.width} characters")
    return token


_DECODERS = {
    FieldKind.INTEGER: _decode_integer,
    FieldKind.DECIMAL: _decode_decimal,
    FieldKind.TIMESTAMP: _decode_timestamp,
    FieldKind.DATE: _decode_date,
    FieldKind.CODE: _decode_code,
    FieldKind.TEXT: _decode_text,
}


def decode(spec: FieldSpec, token: str) -> Any:
    """Decode ``token`` as ``spec`` describes; returns the value or a ``DecodeError``."""
    if spec.allow_na and token == NA_TOKEN:
        return NA
    return _DECODERS[spec.kind](spec, token)


def encode(value: Any) -> str:
    if isinstance(value, CodedValue):
        return value.code
    if isinstance(value, Timestamp):
        return value.encode()
    if isinstance(value, date):
        return f"{value.year:04d}{value.month:02d}{value.day:02d}"
    if isinstance(value, (PaddedInt, PaddedDecimal)):
        sign = "-" if value < 0 else ""
        return sign + encode(abs(value)).zfill(value.width)
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, bool):
        raise TypeError("Boolean values have no field encoding")
    if isinstance(value, (int, str)):
        return str(value)
    raise TypeError(f"Unsupported field value: {value!r}")
