"""Aggregation and rendering of the accounting reports."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping

from .entries import ZERO, LedgerEntry, format_amount
from .taxonomy import DEFAULT_TAXONOMY, FinancialTaxonomy

CASH_ACCOUNT = "Cash"

TRIAL_BALANCE_HEADER = "Account,Balance"
YEARLY_CASH_HEADER = "Financial Year,Cash Balance"

_YEAR_RE = re.compile(r"(?<!\d)(\d{4})(?!\d)")


def account_balances(entries: Iterable[LedgerEntry]) -> dict[str, Decimal]:
    """Accumulate debit minus credit per account, keeping first-seen order."""

    balances: dict[str, Decimal] = {}
    for entry in entries:
        balances[entry.account] = balances.get(entry.account, ZERO) + entry.amount
    return balances


def extract_year(value: str) -> str | None:
    text = value.strip()
    try:
        return str(date.fromisoformat(text[:10]).year)
    except ValueError:
        pass
    match = _YEAR_RE.search(text)
    return match.group(1) if match else None


def yearly_cash_balances(entries: Iterable[LedgerEntry], *, account: str = CASH_ACCOUNT) -> dict[str, Decimal]:
    """Net cash movement per calendar year, ordered by year.

    Rows whose date carries no recognisable year cannot be bucketed and are
    left out.
    """

    by_year: dict[str, Decimal] = {}
    for entry in entries:
        if entry.account != account:
            continue
        year = extract_year(entry.date)
        if year is None:
            continue
        by_year[year] = by_year.get(year, ZERO) + entry.amount
    return {year: by_year[year] for year in sorted(by_year)}


@dataclass(frozen=True, slots=True)
class FinancialStatement:
    """Balances of the taxonomy accounts together with the derived totals."""

    taxonomy: FinancialTaxonomy
    balances: Mapping[str, Decimal]

    def balance(self, account: str) -> Decimal:
        return self.balances.get(account, ZERO)

    def _total(self, accounts: Iterable[str]) -> Decimal:
        return sum((self.balance(account) for account in accounts), ZERO)

    @property
    def total_revenue(self) -> Decimal:
        return self._total(self.taxonomy.income_statement.revenues)

    @property
    def total_expenses(self) -> Decimal:
        return self._total(self.taxonomy.income_statement.expenses)

    @property
    def net_income(self) -> Decimal:
        return self.total_revenue - self.total_expenses

    @property
    def total_assets(self) -> Decimal:
        return self._total(self.taxonomy.balance_sheet.assets)

    @property
    def total_liabilities(self) -> Decimal:
        return self._total(self.taxonomy.balance_sheet.liabilities)

    @property
    def total_equity(self) -> Decimal:
        """Equity accounts plus the period's net income as retained earnings."""

        return self._total(self.taxonomy.balance_sheet.equity) + self.net_income


def financial_statement(
    entries: Iterable[LedgerEntry], taxonomy: FinancialTaxonomy = DEFAULT_TAXONOMY
) -> FinancialStatement:
    balances = {account: ZERO for account in taxonomy.accounts()}
    for entry in entries:
        if entry.account in balances:
            balances[entry.account] += entry.amount
    return FinancialStatement(taxonomy=taxonomy, balances=balances)


def render_trial_balance(balances: Mapping[str, Decimal]) -> list[str]:
    lines = [TRIAL_BALANCE_HEADER]
    lines.extend(f"{account},{format_amount(balance)}" for account, balance in balances.items())
    return lines


def render_yearly_cash(by_year: Mapping[str, Decimal]) -> list[str]:
    lines = [YEARLY_CASH_HEADER]
    lines.extend(f"{year},{format_amount(balance)}" for year, balance in by_year.items())
    return lines


def render_financial_statement(statement: FinancialStatement) -> list[str]:
    """Lay out the statement section by section.

    The closing ``Assets = Liabilities + Equity`` line only displays both
    sides; it does not check that they agree.
    """

    taxonomy = statement.taxonomy

    def account_rows(accounts: Iterable[str]) -> list[str]:
        return [f"{account},{format_amount(statement.balance(account))}" for account in accounts]

    lines = ["Basic Financial Statement", "", "Income Statement"]
    lines += account_rows(taxonomy.income_statement.revenues)
    lines += account_rows(taxonomy.income_statement.expenses)
    lines += [f"Net Income,{format_amount(statement.net_income)}", ""]

    lines += ["Balance Sheet", "Assets"]
    lines += account_rows(taxonomy.balance_sheet.assets)
    lines += [f"Total Assets,{format_amount(statement.total_assets)}", ""]

    lines += ["Liabilities"]
    lines += account_rows(taxonomy.balance_sheet.liabilities)
    lines += [f"Total Liabilities,{format_amount(statement.total_liabilities)}", ""]

    lines += ["Equity"]
    lines += account_rows(taxonomy.balance_sheet.equity)
    lines += [
        f"Retained Earnings (Net Income),{format_amount(statement.net_income)}",
        f"Total Equity,{format_amount(statement.total_equity)}",
        "",
    ]

    right_hand_side = statement.total_liabilities + statement.total_equity
    lines.append(
        f"Assets = Liabilities + Equity, {format_amount(statement.total_assets)} = {format_amount(right_hand_side)}"
    )
    return lines


def trial_balance_report(entries: Iterable[LedgerEntry]) -> str:
    return "\n".join(render_trial_balance(account_balances(entries)))


def yearly_cash_report(entries: Iterable[LedgerEntry]) -> str:
    return "\n".join(render_yearly_cash(yearly_cash_balances(entries)))


def financial_statement_report(
    entries: Iterable[LedgerEntry], taxonomy: FinancialTaxonomy = DEFAULT_TAXONOMY
) -> str:
    return "\n".join(render_financial_statement(financial_statement(entries, taxonomy)))
