"""
Services Package
================

Business logic layer for the chama ledger.

ledger_service holds the pure payout / welfare calculations.
The other services change data (members, contributions, payouts,
invites, projects) and own their db transactions.
Routes should call these services, not manipulate models directly.
"""

from chama_ledger.services.ledger_service import (
    split_contribution,
    resolve_schedule,
    summarize_welfare,
    ledger_welfare_balance,
    ledger_totals,
    next_turn,
    dashboard_stats,
    payout_badge,
    PayoutBadge,
    ContributionSplit,
    ScheduleResolution,
    WelfareSummary
)

from chama_ledger.services.authorization_service import (
    can_manage_group,
    can_change_role,
    is_active_member,
    is_admin_member,
    require_authorization,
    AuthorizationError
)

from chama_ledger.services.membership_service import (
    create_member,
    add_member,
    update_member,
    update_profile,
    list_members,
    MembershipError
)

from chama_ledger.services.contribution_service import (
    record_contribution,
    ContributionError,
    InvalidAmountError
)

from chama_ledger.services.payout_service import (
    schedule_payout,
    mark_payout_completed,
    PayoutError
)

from chama_ledger.services.invite_service import (
    create_invite,
    revoke_invite,
    redeem_invite,
    list_invites,
    InviteError
)

from chama_ledger.services.project_service import (
    create_project,
    join_project,
    leave_project,
    ProjectError
)
