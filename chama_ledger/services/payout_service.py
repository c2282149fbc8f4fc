"""
PAYOUT SERVICE
==============

Handles:
- Scheduling payout cycles (one recipient per cycle)
- Marking a payout as completed
"""

import logging
from datetime import datetime
from chama_ledger.extensions import db
from chama_ledger.models import Payout, Member, PayoutStatus
from chama_ledger.records import to_date, RecordError
from chama_ledger.services.authorization_service import (
    can_manage_group, require_authorization, AuthorizationError
)
from chama_ledger.services.contribution_service import parse_amount, InvalidAmountError

logger = logging.getLogger(__name__)


class PayoutError(Exception):
    """Base exception for payout operations"""
    pass


# ============================================================
# SCHEDULE PAYOUT (Admin action)
# ============================================================

def schedule_payout(scheduled_by_member_id, cycle_number, member_id, payout_date, amount):
    """
    Add a cycle to the payout schedule.

    Dates are expected to rise with cycle numbers. An out-of-order date
    is accepted (cycle order decides whose turn is next) but logged.
    """
    try:
        require_authorization(can_manage_group, scheduled_by_member_id)

        try:
            cycle_number = int(cycle_number)
        except (TypeError, ValueError):
            raise PayoutError("Cycle number must be a whole number")
        if cycle_number < 1:
            raise PayoutError("Cycle number must be 1 or greater")

        try:
            payout_date = to_date(payout_date)
        except RecordError as e:
            raise PayoutError(str(e))
        if payout_date is None:
            raise PayoutError("Payout date is required")

        try:
            value = parse_amount(amount)
        except InvalidAmountError:
            raise PayoutError("Payout amount must be a positive amount")

        try:
            member_id = int(member_id)
        except (TypeError, ValueError):
            raise PayoutError("A recipient must be selected")

        member = db.session.get(Member, member_id)
        if member is None:
            raise PayoutError(f"Member {member_id} not found")

        if Payout.query.filter_by(cycle_number=cycle_number).first():
            raise PayoutError(f"Cycle {cycle_number} is already scheduled")

        earlier = Payout.query.filter(
            Payout.cycle_number < cycle_number,
            Payout.date > payout_date
        ).first()
        later = Payout.query.filter(
            Payout.cycle_number > cycle_number,
            Payout.date < payout_date
        ).first()
        if earlier or later:
            logger.warning("Cycle %s date %s is out of order with the schedule", cycle_number, payout_date)

        payout = Payout(
            cycle_number=cycle_number,
            member_id=member_id,
            date=payout_date,
            amount=value,
            status=PayoutStatus.SCHEDULED.value
        )
        db.session.add(payout)
        db.session.commit()

        logger.info("Cycle %s scheduled for %s on %s", cycle_number, member.name, payout_date)
        return payout

    except (AuthorizationError, PayoutError):
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        raise PayoutError(f"Failed to schedule payout: {str(e)}")


# ============================================================
# COMPLETE PAYOUT (Admin action)
# ============================================================

def mark_payout_completed(payout_id, completed_by_member_id):
    """Mark a payout as paid out. Completed payouts show as Received."""
    try:
        require_authorization(can_manage_group, completed_by_member_id)

        payout = db.session.get(Payout, payout_id)
        if payout is None:
            raise PayoutError(f"Payout {payout_id} not found")

        if payout.status == PayoutStatus.COMPLETED.value:
            raise PayoutError(f"Cycle {payout.cycle_number} is already completed")

        payout.status = PayoutStatus.COMPLETED.value
        payout.completed_at = datetime.utcnow()
        db.session.commit()

        logger.info("Cycle %s marked completed by %s", payout.cycle_number, completed_by_member_id)
        return payout

    except (AuthorizationError, PayoutError):
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        raise PayoutError(f"Failed to complete payout: {str(e)}")
