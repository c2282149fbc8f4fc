"""
MEMBERSHIP SERVICE
==================

Handles:
- Adding members (with turn assignment)
- Updating member details, role and status
- Members editing their own profile
- Listing the roster
"""

import logging
from datetime import date
from chama_ledger.extensions import db
from chama_ledger.models import Member, MemberRole, MemberStatus
from chama_ledger.records import normalize_optional, to_date, RecordError
from chama_ledger.services.authorization_service import (
    can_manage_group, can_change_role, require_authorization, AuthorizationError
)
from chama_ledger.services.ledger_service import next_turn

logger = logging.getLogger(__name__)

VALID_ROLES = [r.value for r in MemberRole]
VALID_STATUSES = [s.value for s in MemberStatus]

UPDATABLE_FIELDS = ('name', 'email', 'phone_number', 'role', 'status', 'join_date')
PROFILE_FIELDS = ('name', 'phone_number')


class MembershipError(Exception):
    """Base exception for membership operations"""
    pass


def _check_email_free(email, exclude_member_id=None):
    if not email:
        return
    query = Member.query.filter(db.func.lower(Member.email) == email.lower())
    if exclude_member_id is not None:
        query = query.filter(Member.id != exclude_member_id)
    if query.first():
        raise MembershipError(f"Email {email} is already registered")


# ============================================================
# CREATE MEMBER (no permission check)
# ============================================================

def create_member(name, email=None, phone_number=None, role=MemberRole.MEMBER.value,
                  status=MemberStatus.ACTIVE.value, join_date=None, password=None):
    """
    Create a member and give them the next turn in the rotation.

    Turn = highest turn ever assigned + 1, counting inactive members too,
    so a departed member's turn is never handed out again.

    Flushes but does not commit; callers own the transaction.
    """
    name = normalize_optional(name)
    if not name:
        raise MembershipError("Member name is required")

    email = normalize_optional(email)
    email = email.lower() if email else None
    role = normalize_optional(role) or MemberRole.MEMBER.value
    status = normalize_optional(status) or MemberStatus.ACTIVE.value

    if role not in VALID_ROLES:
        raise MembershipError(f"Invalid role '{role}'")
    if status not in VALID_STATUSES:
        raise MembershipError(f"Invalid status '{status}'")

    try:
        join_date = to_date(join_date, 'join_date') or date.today()
    except RecordError as e:
        raise MembershipError(str(e))

    _check_email_free(email)

    existing_turns = db.session.query(Member.turn_number).all()
    turn_number = next_turn([{'turn_number': t} for (t,) in existing_turns])

    member = Member(
        name=name,
        email=email,
        phone_number=normalize_optional(phone_number),
        role=role,
        status=status,
        turn_number=turn_number,
        join_date=join_date
    )
    if password:
        member.set_password(password)

    db.session.add(member)
    db.session.flush()

    logger.info("Member %s added with turn #%s", member.name, turn_number)
    return member


# ============================================================
# ADD MEMBER (Admin action)
# ============================================================

def add_member(added_by_member_id, name, email=None, phone_number=None,
               role=MemberRole.MEMBER.value, status=MemberStatus.ACTIVE.value,
               join_date=None, password=None):
    """Admin adds a member to the group"""
    try:
        require_authorization(can_manage_group, added_by_member_id)

        if role == MemberRole.SUPERADMIN.value:
            adder = db.session.get(Member, added_by_member_id)
            if adder.role != MemberRole.SUPERADMIN.value:
                raise AuthorizationError("Only a superadmin can add a superadmin")

        member = create_member(
            name=name,
            email=email,
            phone_number=phone_number,
            role=role,
            status=status,
            join_date=join_date,
            password=password
        )
        db.session.commit()

        return member

    except (AuthorizationError, MembershipError):
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        raise MembershipError(f"Failed to add member: {str(e)}")


# ============================================================
# UPDATE MEMBER (Admin action)
# ============================================================

def update_member(member_id, updated_by_member_id, updates):
    """
    Update member details.

    Only fields in UPDATABLE_FIELDS are applied. turn_number is
    fixed at creation and cannot be changed here.
    Keys that are absent are left alone; blank optional values clear the field.
    """
    try:
        require_authorization(can_manage_group, updated_by_member_id)

        member = db.session.get(Member, member_id)
        if member is None:
            raise MembershipError("Member not found")

        changes = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS}

        if 'role' in changes:
            new_role = normalize_optional(changes['role']) or MemberRole.MEMBER.value
            if new_role not in VALID_ROLES:
                raise MembershipError(f"Invalid role '{new_role}'")
            if new_role != member.role:
                require_authorization(can_change_role, updated_by_member_id, member_id, new_role)
            member.role = new_role

        if 'status' in changes:
            new_status = normalize_optional(changes['status']) or MemberStatus.ACTIVE.value
            if new_status not in VALID_STATUSES:
                raise MembershipError(f"Invalid status '{new_status}'")
            if member_id == updated_by_member_id and new_status != MemberStatus.ACTIVE.value:
                raise MembershipError("You cannot deactivate yourself")
            member.status = new_status

        if 'name' in changes:
            name = normalize_optional(changes['name'])
            if not name:
                raise MembershipError("Member name is required")
            member.name = name

        if 'email' in changes:
            email = normalize_optional(changes['email'])
            email = email.lower() if email else None
            _check_email_free(email, exclude_member_id=member_id)
            member.email = email

        if 'phone_number' in changes:
            member.phone_number = normalize_optional(changes['phone_number'])

        if 'join_date' in changes:
            try:
                member.join_date = to_date(changes['join_date'], 'join_date') or member.join_date
            except RecordError as e:
                raise MembershipError(str(e))

        db.session.commit()
        logger.info("Member %s updated by %s: %s", member_id, updated_by_member_id, sorted(changes))

        return member

    except (AuthorizationError, MembershipError):
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        raise MembershipError(f"Failed to update member: {str(e)}")


# ============================================================
# OWN PROFILE
# ============================================================

def update_profile(member_id, updates):
    """
    A member edits their own name and phone number.

    Other keys are ignored; role, status, email and turn are admin-managed.
    """
    try:
        member = db.session.get(Member, member_id)
        if member is None:
            raise MembershipError("Member not found")

        changes = {k: v for k, v in updates.items() if k in PROFILE_FIELDS}

        if 'name' in changes:
            name = normalize_optional(changes['name'])
            if not name:
                raise MembershipError("Member name is required")
            member.name = name

        if 'phone_number' in changes:
            member.phone_number = normalize_optional(changes['phone_number'])

        db.session.commit()
        logger.info("Member %s updated own profile: %s", member_id, sorted(changes))

        return member

    except MembershipError:
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        raise MembershipError(f"Failed to update profile: {str(e)}")


# ============================================================
# ROSTER
# ============================================================

def list_members(include_inactive=True):
    """Members ordered by turn number"""
    query = Member.query
    if not include_inactive:
        query = query.filter_by(status=MemberStatus.ACTIVE.value)
    return query.order_by(Member.turn_number.asc()).all()
