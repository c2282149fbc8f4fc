"""
CONTRIBUTION SERVICE
====================

CRITICAL BUSINESS RULES:
1. The contribution ledger is append-only (no update, no delete)
2. Amount must be > 0 and in whole cents
3. One contribution per member per cycle is expected but NOT enforced;
   duplicates are accepted and logged for the treasurer to review
"""

import logging
from datetime import date
from decimal import Decimal
from chama_ledger.extensions import db
from chama_ledger.models import Contribution, Member
from chama_ledger.records import to_date, to_decimal, RecordError
from chama_ledger.services.authorization_service import (
    can_manage_group, require_authorization, AuthorizationError
)
from chama_ledger.services.ledger_service import split_contribution

logger = logging.getLogger(__name__)


# ============================================================
# CUSTOM EXCEPTIONS
# ============================================================

class ContributionError(Exception):
    """Base exception for contribution operations"""
    pass


class InvalidAmountError(ContributionError):
    """Raised when amount is invalid"""
    pass


def parse_amount(amount):
    """Turn user input into a positive amount in whole cents."""
    try:
        value = to_decimal(amount)
    except RecordError:
        raise InvalidAmountError("Please enter a valid amount")

    if not value.is_finite() or value <= 0:
        raise InvalidAmountError("Contribution amount must be greater than 0")

    if value != value.quantize(Decimal('0.01')):
        raise InvalidAmountError("Contribution amount cannot have more than 2 decimal places")

    return value


# ============================================================
# RECORD CONTRIBUTION (Admin action)
# ============================================================

def record_contribution(recorded_by_member_id, member_id, amount, cycle_number, contribution_date=None):
    """
    Append a contribution to the ledger.

    Returns: (Contribution, ContributionSplit)
    """
    try:
        require_authorization(can_manage_group, recorded_by_member_id)

        value = parse_amount(amount)

        try:
            member_id = int(member_id)
        except (TypeError, ValueError):
            raise ContributionError("A member must be selected")

        member = db.session.get(Member, member_id)
        if member is None:
            raise ContributionError(f"Member {member_id} not found")

        try:
            cycle_number = int(cycle_number)
        except (TypeError, ValueError):
            raise ContributionError("Cycle number must be a whole number")
        if cycle_number < 1:
            raise ContributionError("Cycle number must be 1 or greater")

        try:
            contribution_date = to_date(contribution_date) or date.today()
        except RecordError as e:
            raise ContributionError(str(e))

        duplicate = Contribution.query.filter_by(
            member_id=member_id,
            cycle_number=cycle_number
        ).first()
        if duplicate:
            logger.warning(
                "Member %s already has a contribution for cycle %s (#%s); recording another",
                member_id, cycle_number, duplicate.id
            )

        contribution = Contribution(
            member_id=member_id,
            amount=value,
            date=contribution_date,
            cycle_number=cycle_number,
            recorded_by=recorded_by_member_id
        )
        db.session.add(contribution)
        db.session.commit()

        split = split_contribution(value)
        logger.info(
            "Contribution #%s: member %s cycle %s amount %s (lending %s, welfare %s)",
            contribution.id, member_id, cycle_number, value,
            split.lending_amount, split.welfare_amount
        )

        return contribution, split

    except (AuthorizationError, ContributionError):
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        raise ContributionError(f"Contribution failed: {str(e)}")
