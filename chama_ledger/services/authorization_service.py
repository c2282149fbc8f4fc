"""
CENTRALIZED AUTHORIZATION SERVICE
==================================

All permission checks live here.
Routes and other services call these functions.

Checks return (allowed, reason) so callers can show the reason.
"""

from chama_ledger.models import Member, MemberRole, MemberStatus
from chama_ledger.extensions import db


class AuthorizationError(Exception):
    """Raised when authorization fails"""
    pass


# ============================================================
# MEMBERSHIP CHECKS
# ============================================================

def get_active_member(member_id):
    """Get member record if the member is active"""
    member = db.session.get(Member, member_id)
    if member is None or member.status != MemberStatus.ACTIVE.value:
        return None
    return member


def is_active_member(member_id):
    return get_active_member(member_id) is not None


def is_admin_member(member_id):
    """Check if member is active and holds an admin role"""
    member = get_active_member(member_id)
    return member is not None and member.is_admin()


# ============================================================
# ADMIN ACTIONS
# ============================================================

def can_manage_group(member_id):
    """
    Check if member can manage members, invites, contributions and payouts.

    Requirements:
    - Member must be active
    - Member must be admin or superadmin
    """
    member = db.session.get(Member, member_id)
    if member is None:
        return False, "Member not found"

    if member.status != MemberStatus.ACTIVE.value:
        return False, "Your membership is not active"

    if not member.is_admin():
        return False, "Admin access required"

    return True, None


def can_change_role(actor_id, target_id, new_role):
    """
    Only a superadmin may grant or revoke the superadmin role,
    and nobody may change their own role.
    """
    allowed, reason = can_manage_group(actor_id)
    if not allowed:
        return False, reason

    if actor_id == target_id:
        return False, "You cannot change your own role"

    actor = db.session.get(Member, actor_id)
    target = db.session.get(Member, target_id)
    if target is None:
        return False, "Member not found"

    touches_superadmin = MemberRole.SUPERADMIN.value in (new_role, target.role)
    if touches_superadmin and actor.role != MemberRole.SUPERADMIN.value:
        return False, "Only a superadmin can change superadmin roles"

    return True, None


# ============================================================
# HELPER
# ============================================================

def require_authorization(check_func, *args, error_class=AuthorizationError):
    """
    Wrapper to raise exception if authorization fails.

    Usage:
        require_authorization(can_manage_group, member_id)
    """
    allowed, reason = check_func(*args)
    if not allowed:
        raise error_class(reason)
    return True
