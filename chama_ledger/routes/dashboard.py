"""
MEMBER DASHBOARD ROUTES
=======================

Overview card and the member's own contributions.
Reads go through the configured data source, then the ledger service.
"""

from datetime import date
from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from chama_ledger.data_sources import get_data_source
from chama_ledger.services.ledger_service import (
    dashboard_stats, split_contribution, ledger_totals
)
from chama_ledger.utils import to_json, format_currency, format_date

dashboard_bp = Blueprint('dashboard', __name__)

RECENT_CONTRIBUTIONS = 5
UPCOMING_PAYOUTS = 4


@dashboard_bp.route('/dashboard')
@login_required
def overview():
    source = get_data_source()
    member_id = source.resolve_member_id(current_user)
    today = date.today()

    members = source.get_members()
    contributions = source.get_contributions()
    cycles = source.get_payout_schedule()

    stats = dashboard_stats(
        member_id=member_id,
        members=members,
        contributions=contributions,
        cycles=cycles,
        today=today,
        contribution_per_cycle=current_app.config['WELFARE_CONTRIBUTION_PER_CYCLE'],
        total_cycles=current_app.config['WELFARE_TOTAL_CYCLES']
    )

    own = [c for c in contributions if c.member_id == member_id]
    upcoming = [c for c in cycles if c.date >= today][:UPCOMING_PAYOUTS]

    return jsonify({
        'stats': to_json(stats),
        'display': {
            'total_contributions': format_currency(stats['total_contributions']),
            'welfare_balance': format_currency(stats['welfare_balance']),
            'payout_date': format_date(stats['payout_date']),
            'next_payout_date': format_date(stats['next_payout_date']),
            'payout_turn': f"#{stats['payout_turn']}" if stats['payout_turn'] else 'N/A',
            'days_until_next': stats['days_until_next'] if stats['days_until_next'] is not None else 'N/A',
        },
        'recent_contributions': [to_json(c) for c in own[:RECENT_CONTRIBUTIONS]],
        'upcoming_payouts': [to_json(c) for c in upcoming],
    })


@dashboard_bp.route('/contributions')
@login_required
def my_contributions():
    source = get_data_source()
    member_id = source.resolve_member_id(current_user)
    # a login with no counterpart in the source has no contributions
    contributions = source.get_contributions(member_id=member_id) if member_id is not None else []

    rows = []
    for contribution in contributions:
        split = split_contribution(contribution)
        rows.append({
            'id': contribution.id,
            'date': contribution.date.isoformat(),
            'cycle_number': contribution.cycle_number,
            'amount': str(contribution.amount),
            'lending_amount': str(split.lending_amount),
            'welfare_amount': str(split.welfare_amount),
            'amount_display': format_currency(contribution.amount),
        })

    return jsonify({
        'contributions': rows,
        'totals': to_json(ledger_totals(contributions)),
    })
