"""
LEDGER SERVICE - PURE CALCULATIONS
==================================

The rotating payout / welfare-cycle model.

RULES:
1. Every contribution is split: 1/6 to welfare, the rest to lending
2. welfare + lending == contribution, to the cent
3. Payout order is cycle_number order, never date order
4. Welfare balance = completed cycles x fixed amount per cycle
5. Turn numbers only grow: max + 1, gaps are kept

Nothing in this module touches the database, the request or the clock.
Callers fetch the records first and pass 'today' in explicitly.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP, localcontext
from enum import Enum
from typing import Optional

from chama_ledger.records import to_date, to_decimal


WELFARE_DIVISOR = Decimal('6')
CENT = Decimal('0.01')
ZERO = Decimal('0.00')
DEFAULT_PRECISION = 28


class PayoutBadge(Enum):
    RECEIVED = 'Received'
    TODAY = 'Today'
    PENDING = 'Pending'


class WelfareCycleStatus(Enum):
    COMPLETED = 'Completed'
    UPCOMING = 'Upcoming'


# ============================================================
# RESULT TYPES
# ============================================================

@dataclass(frozen=True)
class ContributionSplit:
    lending_amount: Decimal
    welfare_amount: Decimal

    @property
    def total(self):
        return self.lending_amount + self.welfare_amount


@dataclass(frozen=True)
class ScheduleResolution:
    completed: tuple
    due_today: tuple
    pending: tuple
    next: Optional[object]
    days_until_next: Optional[int]
    # (cycle, PayoutBadge) pairs in input order
    classified: tuple = ()

    def badge_for(self, cycle_number):
        for cycle, badge in self.classified:
            if cycle.cycle_number == cycle_number:
                return badge
        return None


@dataclass(frozen=True)
class WelfareCycle:
    cycle_number: int
    payout_date: date
    recipient: Optional[str]
    welfare_balance: Decimal
    status: WelfareCycleStatus


@dataclass(frozen=True)
class WelfareSummary:
    current_balance: Decimal
    completed_cycles: int
    total_cycles: int
    contribution_per_cycle: Decimal
    final_amount: Decimal
    next_payout_date: Optional[date]
    next_recipient: Optional[str]
    progress_percent: Decimal = Decimal('0')
    cycles: tuple = field(default=())


# ============================================================
# CONTRIBUTION SPLITTER
# ============================================================

def split_contribution(contribution):
    """
    Split a contribution into its lending and welfare shares.

    Accepts a ContributionRecord (anything with .amount) or a bare amount.
    The welfare share is rounded to the cent; the lending share takes
    whatever is left so the two always add back to the original amount.

    Amounts <= 0 are bad data, not an error: both shares come back as 0.

    Example:
    - 500    -> welfare 83.33, lending 416.67
    - 100.005 -> welfare 16.67, lending 83.335
    """
    amount = getattr(contribution, 'amount', contribution)
    amount = to_decimal(amount)

    if not amount.is_finite() or amount <= 0:
        return ContributionSplit(lending_amount=ZERO, welfare_amount=ZERO)

    with localcontext() as ctx:
        ctx.prec = _split_precision(amount)
        welfare = (amount / WELFARE_DIVISOR).quantize(CENT, rounding=ROUND_HALF_UP)
        lending = amount - welfare

    return ContributionSplit(
        lending_amount=lending,
        welfare_amount=welfare
    )


def _split_precision(amount):
    """
    Enough significant digits to hold the amount down to its last decimal
    and the welfare share down to the cent, so nothing is rounded away.
    """
    exponent = amount.as_tuple().exponent
    needed = max(amount.adjusted(), 0) + 1 + max(-exponent, 2)
    return max(DEFAULT_PRECISION, needed + 4)


def ledger_totals(contributions):
    """Sum gross, lending and welfare amounts over recorded contributions."""
    gross = ZERO
    lending = ZERO
    welfare = ZERO

    for contribution in contributions:
        split = split_contribution(contribution)
        gross += split.total
        lending += split.lending_amount
        welfare += split.welfare_amount

    return {
        'gross': gross,
        'lending': lending,
        'welfare': welfare,
    }


def ledger_welfare_balance(contributions):
    """
    Welfare balance from the recorded contributions themselves.

    This is the ledger-accurate figure. summarize_welfare() keeps the
    cycle-counter figure the dashboard has always shown; the two can
    disagree and are reported side by side.
    """
    return ledger_totals(contributions)['welfare']


# ============================================================
# PAYOUT SCHEDULE RESOLVER
# ============================================================

def payout_badge(cycle, today):
    """
    Received: explicitly completed, or the payout date has passed
    Today:    payout date is today (calendar day)
    Pending:  payout date is in the future
    """
    today = to_date(today)

    if cycle.status == 'completed':
        return PayoutBadge.RECEIVED
    if cycle.date < today:
        return PayoutBadge.RECEIVED
    if cycle.date == today:
        return PayoutBadge.TODAY
    return PayoutBadge.PENDING


def resolve_schedule(cycles, today):
    """
    Classify every payout cycle against today and find the next one.

    next is the outstanding (Today or Pending) cycle with the smallest
    cycle_number. Dates are only used for the badge and the countdown,
    so a mistyped date cannot reorder whose turn comes next.

    An empty schedule is not an error: next and days_until_next are None.
    """
    today = to_date(today)

    completed = []
    due_today = []
    pending = []
    classified = []

    for cycle in cycles:
        badge = payout_badge(cycle, today)
        classified.append((cycle, badge))

        if badge is PayoutBadge.RECEIVED:
            completed.append(cycle)
        elif badge is PayoutBadge.TODAY:
            due_today.append(cycle)
        else:
            pending.append(cycle)

    outstanding = due_today + pending
    next_cycle = min(outstanding, key=lambda c: c.cycle_number) if outstanding else None

    days_until_next = None
    if next_cycle is not None:
        days_until_next = max((next_cycle.date - today).days, 0)

    return ScheduleResolution(
        completed=tuple(completed),
        due_today=tuple(due_today),
        pending=tuple(pending),
        next=next_cycle,
        days_until_next=days_until_next,
        classified=tuple(classified)
    )


# ============================================================
# WELFARE ACCUMULATOR
# ============================================================

def summarize_welfare(cycles, today, contribution_per_cycle, total_cycles):
    """
    Build the welfare summary shown on the welfare page.

    current_balance = completed cycles x contribution_per_cycle, where a
    cycle counts as completed once its date is on or before today.
    It does not look at recorded contributions; see ledger_welfare_balance().
    """
    today = to_date(today)
    per_cycle = to_decimal(contribution_per_cycle, 'contribution_per_cycle')
    total_cycles = int(total_cycles or 0)

    cycles = list(cycles)
    completed_cycles = sum(1 for c in cycles if c.date <= today)
    resolution = resolve_schedule(cycles, today)
    next_cycle = resolution.next

    if total_cycles <= 0:
        progress = Decimal('0')
    else:
        progress = Decimal(completed_cycles) * 100 / Decimal(total_cycles)
        progress = min(progress, Decimal('100')).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)

    rows = []
    for cycle in sorted(cycles, key=lambda c: c.cycle_number):
        rows.append(WelfareCycle(
            cycle_number=cycle.cycle_number,
            payout_date=cycle.date,
            recipient=cycle.recipient_name,
            welfare_balance=cycle.cycle_number * per_cycle,
            status=WelfareCycleStatus.COMPLETED if cycle.date <= today else WelfareCycleStatus.UPCOMING
        ))

    return WelfareSummary(
        current_balance=completed_cycles * per_cycle,
        completed_cycles=completed_cycles,
        total_cycles=total_cycles,
        contribution_per_cycle=per_cycle,
        final_amount=total_cycles * per_cycle,
        next_payout_date=next_cycle.date if next_cycle else None,
        next_recipient=next_cycle.recipient_name if next_cycle else None,
        progress_percent=progress,
        cycles=tuple(rows)
    )


# ============================================================
# MEMBER TURN ASSIGNMENT
# ============================================================

def _turn_of(member):
    if isinstance(member, dict):
        return member.get('turn_number')
    return getattr(member, 'turn_number', None)


def next_turn(existing_members):
    """
    Next turn number for a new member: highest existing turn + 1.

    Turns of removed members are not reused and gaps are not filled:
    turns 1 and 3 give 4, not 2.
    """
    turns = [_turn_of(m) for m in existing_members]
    return max((t for t in turns if t is not None), default=0) + 1


# ============================================================
# MEMBER DASHBOARD
# ============================================================

def dashboard_stats(member_id, members, contributions, cycles, today,
                    contribution_per_cycle, total_cycles):
    """Everything the member overview card needs, in one pass."""
    today = to_date(today)
    cycles = list(cycles)

    own_contributions = [c for c in contributions if c.member_id == member_id]
    total_contributions = sum((to_decimal(c.amount) for c in own_contributions), ZERO)

    member = next((m for m in members if m.id == member_id), None)
    own_cycles = sorted(
        (c for c in cycles if c.member_id == member_id),
        key=lambda c: c.cycle_number
    )
    my_payout = own_cycles[0] if own_cycles else None

    if my_payout is not None:
        payout_turn = my_payout.cycle_number
    elif member is not None:
        payout_turn = member.turn_number
    else:
        payout_turn = None

    summary = summarize_welfare(cycles, today, contribution_per_cycle, total_cycles)
    resolution = resolve_schedule(cycles, today)

    return {
        'member_id': member_id,
        'member_name': member.name if member else None,
        'total_contributions': total_contributions,
        'contribution_count': len(own_contributions),
        'welfare_balance': summary.current_balance,
        'payout_turn': payout_turn,
        'payout_date': my_payout.date if my_payout else None,
        'payout_amount': my_payout.amount if my_payout else None,
        'current_cycle': summary.completed_cycles,
        'total_members': sum(1 for m in members if m.is_active),
        'next_recipient': summary.next_recipient,
        'next_payout_date': summary.next_payout_date,
        'days_until_next': resolution.days_until_next,
        'is_my_turn_next': resolution.next is not None and resolution.next.member_id == member_id,
    }
