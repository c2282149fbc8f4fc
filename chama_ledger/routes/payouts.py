"""
PAYOUT SCHEDULE ROUTES
======================
"""

from datetime import date
from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from chama_ledger.data_sources import get_data_source
from chama_ledger.services.ledger_service import resolve_schedule
from chama_ledger.utils import format_currency, format_date

payouts_bp = Blueprint('payouts', __name__)


def _cycle_json(cycle, member_id, badge=None):
    is_me = member_id is not None and cycle.member_id == member_id
    return {
        'id': cycle.id,
        'cycle_number': cycle.cycle_number,
        'member_id': cycle.member_id,
        'recipient': 'You' if is_me else (cycle.recipient_name or 'Member'),
        'is_me': is_me,
        'date': cycle.date.isoformat(),
        'date_display': format_date(cycle.date),
        'amount': str(cycle.amount),
        'amount_display': format_currency(cycle.amount),
        'status': badge.value if badge else None,
    }


@payouts_bp.route('/payouts')
@login_required
def schedule():
    source = get_data_source()
    member_id = source.resolve_member_id(current_user)
    cycles = source.get_payout_schedule()
    resolution = resolve_schedule(cycles, date.today())

    my_cycles = [c for c in cycles if c.member_id == member_id]
    my_payout = min(my_cycles, key=lambda c: c.cycle_number) if my_cycles else None

    return jsonify({
        'my_payout': _cycle_json(my_payout, member_id, resolution.badge_for(my_payout.cycle_number)) if my_payout else None,
        'my_turn': f"#{my_payout.cycle_number}" if my_payout else 'N/A',
        'next': _cycle_json(resolution.next, member_id, resolution.badge_for(resolution.next.cycle_number)) if resolution.next else None,
        'days_until_next': resolution.days_until_next,
        'completed_count': len(resolution.completed),
        'schedule': [_cycle_json(cycle, member_id, badge) for cycle, badge in resolution.classified],
    })
