"""Account taxonomy used by the financial statement."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class IncomeStatementSections(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    revenues: tuple[str, ...] = Field(..., min_length=1)
    expenses: tuple[str, ...] = Field(..., min_length=1)


class BalanceSheetSections(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    assets: tuple[str, ...] = Field(..., min_length=1)
    liabilities: tuple[str, ...] = Field(..., min_length=1)
    equity: tuple[str, ...] = Field(..., min_length=1)


class FinancialTaxonomy(BaseModel):
    """Maps account names onto income statement and balance sheet sections."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    income_statement: IncomeStatementSections
    balance_sheet: BalanceSheetSections

    @model_validator(mode="after")
    def _accounts_are_unique(self) -> "FinancialTaxonomy":
        seen: set[str] = set()
        for account in self.accounts():
            if account in seen:
                raise ValueError(f"Account '{account}' is listed in more than one section")
            seen.add(account)
        return self

    def accounts(self) -> tuple[str, ...]:
        return (
            *self.income_statement.revenues,
            *self.income_statement.expenses,
            *self.balance_sheet.assets,
            *self.balance_sheet.liabilities,
            *self.balance_sheet.equity,
        )


DEFAULT_TAXONOMY = FinancialTaxonomy(
    income_statement=IncomeStatementSections(
        revenues=("Sales Revenue",),
        expenses=(
            "Cost of Goods Sold",
            "Salaries Expense",
            "Rent Expense",
            "Utilities Expense",
            "Interest Expense",
            "Tax Expense",
        ),
    ),
    balance_sheet=BalanceSheetSections(
        assets=(
            "Cash",
            "Accounts Receivable",
            "Inventory",
            "Fixed Assets",
            "Prepaid Expenses",
        ),
        liabilities=(
            "Accounts Payable",
            "Loan Payable",
            "Sales Tax Payable",
            "Accrued Liabilities",
            "Unearned Revenue",
            "Dividends Payable",
        ),
        equity=("Common Stock", "Retained Earnings"),
    ),
)
