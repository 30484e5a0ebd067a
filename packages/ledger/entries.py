"""Parsing of ledger transaction lines."""

from __future__ import annotations

import csv
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Iterable, Iterator

ZERO = Decimal("0")
CENT = Decimal("0.01")

_FIELD_COUNT = 5


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """Single ``date,account,memo,debit,credit`` row."""

    date: str
    account: str
    memo: str
    debit: Decimal
    credit: Decimal

    @property
    def amount(self) -> Decimal:
        """Signed contribution of the row: debit minus credit."""

        return self.debit - self.credit


def parse_amount(value: str | None) -> Decimal:
    """Parse a monetary field, treating blank, malformed and non-finite values as zero."""

    if value is None:
        return ZERO
    text = value.strip()
    if not text:
        return ZERO
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return ZERO
    if not amount.is_finite():
        return ZERO
    return amount


def format_amount(value: Decimal) -> str:
    """Render an amount with two decimal places."""

    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the two decimals
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        quantized = value.quantize(CENT, rounding=ROUND_HALF_UP)
    if quantized.is_zero():
        quantized = abs(quantized)
    return f"{quantized:f}"


def parse_row(fields: list[str]) -> LedgerEntry:
    padded = list(fields[:_FIELD_COUNT]) + [""] * (_FIELD_COUNT - len(fields))
    date, account, memo, debit, credit = padded
    return LedgerEntry(
        date=date.strip(),
        account=account.strip(),
        memo=memo,
        debit=parse_amount(debit),
        credit=parse_amount(credit),
    )


def parse_lines(lines: Iterable[str]) -> Iterator[LedgerEntry]:
    """Yield entries for every non-blank line; there is no header row."""

    for fields in csv.reader(lines):
        if not fields or not any(field.strip() for field in fields):
            continue
        yield parse_row(fields)
