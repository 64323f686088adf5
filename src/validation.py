"""
Row validation: turns one raw CSV field tuple into a Record.

Validation is pure. Each check raises a RowError subclass naming the line and the
column so the caller can abort the ingest with a precise reason.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Sequence

from src.domain.models import Record
from src.errors import (
    InvalidDateError,
    InvalidFieldError,
    InvalidIdentifierError,
    InvalidPriceError,
    RowMalformedError,
)

_DIGITS = re.compile(r"[0-9]+")
_ISO_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_CENTS = Decimal("0.01")
# Column limits of the prices table: BIGINT id, NUMERIC integer part.
MAX_IDENTIFIER = 2**63 - 1
MAX_PRICE_INTEGER_DIGITS = 131_072


def parse_identifier(value: str, line_number: int) -> int:
    text = value.strip()
    if not _DIGITS.fullmatch(text):
        raise InvalidIdentifierError(
            f"invalid id {value!r}: expected a non-negative integer",
            line_number=line_number,
            field="id",
        )
    identifier = int(text)
    if identifier > MAX_IDENTIFIER:
        raise InvalidIdentifierError(
            f"invalid id {value!r}: exceeds {MAX_IDENTIFIER}",
            line_number=line_number,
            field="id",
        )
    return identifier


def parse_text(value: str, field: str, line_number: int) -> str:
    text = value.strip()
    if not text:
        raise InvalidFieldError(f"{field} must not be empty", line_number=line_number, field=field)
    return text


def parse_price(value: str, line_number: int) -> Decimal:
    """
    Parse a non-negative decimal price, rounded half-up to cents.

    Prices are persisted at the same two-decimal precision they are exported
    with, so an export re-ingests to identical values.
    """
    text = value.strip()
    try:
        price = Decimal(text)
    except InvalidOperation as exc:
        raise InvalidPriceError(
            f"invalid price {value!r}", line_number=line_number, field="price"
        ) from exc
    if not price.is_finite() or price < 0:
        raise InvalidPriceError(
            f"invalid price {value!r}: expected a non-negative number",
            line_number=line_number,
            field="price",
        )
    if price.adjusted() >= MAX_PRICE_INTEGER_DIGITS:
        raise InvalidPriceError(
            f"invalid price {value!r}: more than {MAX_PRICE_INTEGER_DIGITS} integer digits",
            line_number=line_number,
            field="price",
        )
    with localcontext() as ctx:
        # Enough digits to hold the value once rounded to cents.
        ctx.prec = max(ctx.prec, price.adjusted() + 4)
        price = price.quantize(_CENTS, rounding=ROUND_HALF_UP)
    # "-0" parses as negative zero; store it as plain zero.
    return price.copy_abs()


def parse_date(value: str, line_number: int) -> date:
    text = value.strip()
    if not _ISO_DATE.fullmatch(text):
        raise InvalidDateError(
            f"invalid create_date {value!r}: expected YYYY-MM-DD",
            line_number=line_number,
            field="create_date",
        )
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError as exc:
        raise InvalidDateError(
            f"invalid create_date {value!r}: {exc}",
            line_number=line_number,
            field="create_date",
        ) from exc


def validate_row(fields: Sequence[str], line_number: int) -> Record:
    """
    Map one raw `(id, name, category, price, create_date)` tuple to a Record.

    Parameters
    ----------
    fields : Sequence[str]
        The five raw CSV fields, in header order.
    line_number : int
        1-based line number used in error messages.

    Raises
    ------
    RowMalformedError
        If `fields` does not hold exactly five values.
    InvalidIdentifierError, InvalidFieldError, InvalidPriceError, InvalidDateError
        On the first field that fails its check, checked left to right.
    """
    if len(fields) != 5:
        raise RowMalformedError(f"expected 5 fields, got {len(fields)}", line_number=line_number)
    raw_id, raw_name, raw_category, raw_price, raw_date = fields

    return Record(
        id=parse_identifier(raw_id, line_number),
        name=parse_text(raw_name, "name", line_number),
        category=parse_text(raw_category, "category", line_number),
        price=parse_price(raw_price, line_number),
        created_at=parse_date(raw_date, line_number),
    )


__all__ = [
    "parse_date",
    "parse_identifier",
    "parse_price",
    "parse_text",
    "validate_row",
]
