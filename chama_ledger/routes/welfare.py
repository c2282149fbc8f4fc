"""
WELFARE ROUTES
==============

The welfare fund summary.

'summary' is the cycle-counter figure (completed cycles x amount per
cycle). 'ledger_balance' is the sum of the welfare shares of recorded
contributions. Both are reported; they are not reconciled.
"""

from datetime import date
from flask import Blueprint, jsonify, current_app
from flask_login import login_required
from chama_ledger.data_sources import get_data_source
from chama_ledger.services.ledger_service import (
    summarize_welfare, ledger_welfare_balance, WelfareCycleStatus
)
from chama_ledger.utils import to_json, format_currency, format_date

welfare_bp = Blueprint('welfare', __name__)


@welfare_bp.route('/welfare')
@login_required
def summary():
    source = get_data_source()
    cycles = source.get_payout_schedule()
    contributions = source.get_contributions()

    welfare = summarize_welfare(
        cycles,
        date.today(),
        current_app.config['WELFARE_CONTRIBUTION_PER_CYCLE'],
        current_app.config['WELFARE_TOTAL_CYCLES']
    )

    # Each completed cycle banks one fixed amount into the fund
    transactions = [
        {
            'cycle_number': row.cycle_number,
            'date_of_issue': row.payout_date.isoformat(),
            'recipient': row.recipient or 'Group Welfare',
            'amount': str(welfare.contribution_per_cycle),
            'status': row.status.value,
        }
        for row in reversed(welfare.cycles)
        if row.status is WelfareCycleStatus.COMPLETED
    ]

    return jsonify({
        'summary': to_json(welfare),
        'display': {
            'current_balance': format_currency(welfare.current_balance),
            'final_amount': format_currency(welfare.final_amount),
            'contribution_per_cycle': format_currency(welfare.contribution_per_cycle),
            'completed': f"{welfare.completed_cycles} / {welfare.total_cycles}",
            'next_payout_date': format_date(welfare.next_payout_date),
            'next_recipient': welfare.next_recipient or 'N/A',
        },
        'ledger_balance': str(ledger_welfare_balance(contributions)),
        'transactions': transactions,
    })
