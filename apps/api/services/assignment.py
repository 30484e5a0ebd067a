"""Rules deciding the category and assignee role of a new ticket."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping


class TicketType(str, Enum):
    MANAGEMENT_REPORT = "managementReport"
    STRIKE_OFF = "strikeOff"
    REGISTRATION_ADDRESS_CHANGE = "registrationAddressChange"
    OTHER = "other"


class TicketCategory(str, Enum):
    ACCOUNTING = "accounting"
    MANAGEMENT = "management"
    CORPORATE = "corporate"


class TicketStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"


class UserRole(str, Enum):
    ACCOUNTANT = "accountant"
    CORPORATE_SECRETARY = "corporateSecretary"
    DIRECTOR = "director"


@dataclass(frozen=True, slots=True)
class AssignmentRule:
    """How a ticket type is categorised and who may be assigned to it.

    ``roles`` are tried in order; the next role is only consulted when the
    company has no user with the current one. With ``unique`` set, more than
    one user holding the matched role is a conflict instead of picking the
    most recently created one.
    """

    category: TicketCategory
    roles: tuple[UserRole, ...]
    unique: bool = True
    one_per_company: bool = False
    resolves_open_tickets: bool = False
    missing_assignee_message: str = "No suitable assignee found for this ticket type"


_CORPORATE_ROLES = (UserRole.CORPORATE_SECRETARY, UserRole.DIRECTOR)

ASSIGNMENT_RULES: Mapping[TicketType, AssignmentRule] = {
    TicketType.MANAGEMENT_REPORT: AssignmentRule(
        category=TicketCategory.ACCOUNTING,
        roles=(UserRole.ACCOUNTANT,),
        unique=False,
        missing_assignee_message="Cannot find user with role accountant to create a ticket",
    ),
    TicketType.STRIKE_OFF: AssignmentRule(
        category=TicketCategory.MANAGEMENT,
        roles=(UserRole.DIRECTOR,),
        resolves_open_tickets=True,
        missing_assignee_message="No director found. Cannot create a strikeOff ticket",
    ),
    TicketType.REGISTRATION_ADDRESS_CHANGE: AssignmentRule(
        category=TicketCategory.CORPORATE,
        roles=_CORPORATE_ROLES,
        one_per_company=True,
    ),
    TicketType.OTHER: AssignmentRule(
        category=TicketCategory.CORPORATE,
        roles=_CORPORATE_ROLES,
    ),
}


def rule_for(ticket_type: TicketType, rules: Mapping[TicketType, AssignmentRule] = ASSIGNMENT_RULES) -> AssignmentRule:
    """Return the rule of ``ticket_type``, falling back to the ``other`` rule."""

    return rules.get(ticket_type) or rules[TicketType.OTHER]
