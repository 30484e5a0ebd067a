"""Ledger parsing, aggregation and report rendering."""

from .entries import LedgerEntry, format_amount, parse_amount, parse_lines, parse_row
from .reports import (
    FinancialStatement,
    account_balances,
    financial_statement,
    financial_statement_report,
    render_financial_statement,
    render_trial_balance,
    render_yearly_cash,
    trial_balance_report,
    yearly_cash_balances,
    yearly_cash_report,
)
from .snapshot import LedgerSnapshot, load_snapshot
from .taxonomy import DEFAULT_TAXONOMY, FinancialTaxonomy

__all__ = [
    "DEFAULT_TAXONOMY",
    "FinancialStatement",
    "FinancialTaxonomy",
    "LedgerEntry",
    "LedgerSnapshot",
    "account_balances",
    "financial_statement",
    "financial_statement_report",
    "format_amount",
    "load_snapshot",
    "parse_amount",
    "parse_lines",
    "parse_row",
    "render_financial_statement",
    "render_trial_balance",
    "render_yearly_cash",
    "trial_balance_report",
    "yearly_cash_balances",
    "yearly_cash_report",
]
