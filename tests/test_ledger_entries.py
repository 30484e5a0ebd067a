from decimal import Decimal

import pytest

from packages.ledger import (
    LedgerEntry,
    format_amount,
    parse_amount,
    parse_lines,
    parse_row,
    trial_balance_report,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("100", Decimal("100")),
        (" 12.5 ", Decimal("12.5")),
        ("-3.25", Decimal("-3.25")),
        ("", Decimal("0")),
        ("   ", Decimal("0")),
        (None, Decimal("0")),
        ("abc", Decimal("0")),
        ("NaN", Decimal("0")),
        ("Infinity", Decimal("0")),
    ],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (Decimal("10"), "10.00"),
        (Decimal("0.005"), "0.01"),
        (Decimal("-0.005"), "-0.01"),
        (Decimal("1234.567"), "1234.57"),
        (Decimal("-0.001"), "0.00"),
        (Decimal("-0"), "0.00"),
    ],
)
def test_format_amount(value, expected):
    assert format_amount(value) == expected


def test_parse_row_pads_short_rows():
    entry = parse_row(["2023-01-01", "Cash"])

    assert entry == LedgerEntry(
        date="2023-01-01", account="Cash", memo="", debit=Decimal("0"), credit=Decimal("0")
    )


def test_parse_row_ignores_extra_fields():
    entry = parse_row(["2023-01-01", "Cash", "memo", "5", "2", "surplus"])

    assert entry.amount == Decimal("3")


def test_parse_lines_skips_blank_lines_and_keeps_quoted_memos():
    lines = [
        "2023-01-01,Cash,Opening,100,0\n",
        "\n",
        "  \n",
        '2023-02-01,Cash,"Rent, February",0,40\n',
    ]

    entries = list(parse_lines(lines))

    assert [entry.memo for entry in entries] == ["Opening", "Rent, February"]
    assert entries[1].credit == Decimal("40")


def test_parse_lines_treats_malformed_amounts_as_zero():
    entries = list(parse_lines(["2023-01-01,Cash,Broken,ten,\n"]))

    assert entries[0].debit == Decimal("0")
    assert entries[0].credit == Decimal("0")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (Decimal("1e30"), "1" + "0" * 30 + ".00"),
        (Decimal("-123456789012345678901234567890.125"), "-123456789012345678901234567890.13"),
    ],
)
def test_format_amount_keeps_amounts_wider_than_default_precision(value, expected):
    assert format_amount(value) == expected


def test_trial_balance_renders_very_large_amounts():
    report = trial_balance_report(parse_lines(["2023-01-01,A,memo,1e30,0"]))

    assert report == "Account,Balance\nA," + "1" + "0" * 30 + ".00"
