from apps.api.services.assignment import (
    ASSIGNMENT_RULES,
    AssignmentRule,
    TicketCategory,
    TicketType,
    UserRole,
    rule_for,
)


def test_every_ticket_type_has_a_rule():
    assert set(ASSIGNMENT_RULES) == set(TicketType)


def test_management_report_goes_to_any_accountant():
    rule = rule_for(TicketType.MANAGEMENT_REPORT)

    assert rule.category is TicketCategory.ACCOUNTING
    assert rule.roles == (UserRole.ACCOUNTANT,)
    assert rule.unique is False


def test_strike_off_needs_a_single_director_and_resolves_tickets():
    rule = rule_for(TicketType.STRIKE_OFF)

    assert rule.category is TicketCategory.MANAGEMENT
    assert rule.roles == (UserRole.DIRECTOR,)
    assert rule.unique is True
    assert rule.resolves_open_tickets is True


def test_corporate_rules_fall_back_from_secretary_to_director():
    for ticket_type in (TicketType.REGISTRATION_ADDRESS_CHANGE, TicketType.OTHER):
        rule = rule_for(ticket_type)
        assert rule.category is TicketCategory.CORPORATE
        assert rule.roles == (UserRole.CORPORATE_SECRETARY, UserRole.DIRECTOR)

    assert rule_for(TicketType.REGISTRATION_ADDRESS_CHANGE).one_per_company is True
    assert rule_for(TicketType.OTHER).one_per_company is False


def test_missing_rule_falls_back_to_other():
    fallback = AssignmentRule(category=TicketCategory.CORPORATE, roles=(UserRole.DIRECTOR,))
    rules = {TicketType.OTHER: fallback}

    assert rule_for(TicketType.STRIKE_OFF, rules) is fallback
