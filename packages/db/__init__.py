"""Database models and utilities."""

from .models import CompanyTable, TicketTable, UserTable
from .seed import seed_test_data

__all__ = [
    "CompanyTable",
    "TicketTable",
    "UserTable",
    "seed_test_data",
]
