"""
INVITE SERVICE
==============

Handles:
- Creating invite codes (admin)
- Revoking invites (admin)
- Redeeming an invite to become a member

Invite codes look like JNG-ABCD-EFGH-JKLM. The plain code is returned
once, at creation; only its SHA-256 hash and an 8-character prefix are
stored.
"""

import hashlib
import logging
import secrets
from datetime import datetime
from chama_ledger.extensions import db
from chama_ledger.models import MemberInvite, InviteStatus, MemberRole
from chama_ledger.records import normalize_optional
from chama_ledger.services.authorization_service import (
    can_manage_group, require_authorization, AuthorizationError
)
from chama_ledger.services.membership_service import create_member, MembershipError

logger = logging.getLogger(__name__)

# No 0/O, 1/I to keep codes readable over the phone
INVITE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
INVITE_CODE_LENGTH = 12
MIN_PASSWORD_LENGTH = 6


class InviteError(Exception):
    """Base exception for invite operations"""
    pass


# ============================================================
# CODE HELPERS
# ============================================================

def generate_invite_code(prefix='JNG'):
    chars = ''.join(secrets.choice(INVITE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))
    return f"{prefix}-{chars[0:4]}-{chars[4:8]}-{chars[8:12]}"


def normalize_invite_code(code):
    return (code or '').strip().upper()


def hash_invite_code(code):
    return hashlib.sha256(normalize_invite_code(code).encode('utf-8')).hexdigest()


def invite_code_prefix(code):
    return normalize_invite_code(code).replace('-', '')[:8]


def _parse_expiry(value):
    value = normalize_optional(value)
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise InviteError(f"Invalid expiry date: {value!r}")


# ============================================================
# CREATE INVITE (Admin action)
# ============================================================

def create_invite(created_by_member_id, email=None, phone_number=None,
                  role=MemberRole.MEMBER.value, expires_at=None, notes=None, prefix='JNG'):
    """
    Create a pending invite.

    Returns: (MemberInvite, plain invite code)
    """
    try:
        require_authorization(can_manage_group, created_by_member_id)

        role = normalize_optional(role) or MemberRole.MEMBER.value
        if role not in (MemberRole.MEMBER.value, MemberRole.ADMIN.value):
            raise InviteError(f"Invites cannot grant the '{role}' role")

        expires_at = _parse_expiry(expires_at)
        if expires_at is not None and expires_at <= datetime.utcnow():
            raise InviteError("Expiry must be in the future")

        code = generate_invite_code(prefix)
        email = normalize_optional(email)

        invite = MemberInvite(
            email=email.lower() if email else None,
            phone_number=normalize_optional(phone_number),
            role=role,
            status=InviteStatus.PENDING.value,
            code_hash=hash_invite_code(code),
            code_prefix=invite_code_prefix(code),
            created_by=created_by_member_id,
            expires_at=expires_at,
            notes=normalize_optional(notes)
        )
        db.session.add(invite)
        db.session.commit()

        logger.info("Invite %s created by %s", invite.code_prefix, created_by_member_id)
        return invite, code

    except (AuthorizationError, InviteError):
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        raise InviteError(f"Failed to create invite: {str(e)}")


# ============================================================
# REVOKE INVITE (Admin action)
# ============================================================

def revoke_invite(invite_id, revoked_by_member_id):
    try:
        require_authorization(can_manage_group, revoked_by_member_id)

        invite = db.session.get(MemberInvite, invite_id)
        if invite is None:
            raise InviteError(f"Invite {invite_id} not found")

        if invite.status != InviteStatus.PENDING.value:
            raise InviteError(f"Only pending invites can be revoked (this one is {invite.status})")

        invite.status = InviteStatus.REVOKED.value
        db.session.commit()

        logger.info("Invite %s revoked by %s", invite.code_prefix, revoked_by_member_id)
        return invite

    except (AuthorizationError, InviteError):
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        raise InviteError(f"Failed to revoke invite: {str(e)}")


def list_invites():
    """Newest first"""
    return MemberInvite.query.order_by(MemberInvite.created_at.desc(), MemberInvite.id.desc()).all()


# ============================================================
# REDEEM INVITE
# ============================================================

def redeem_invite(code, name, password, email=None, phone_number=None):
    """
    Turn a pending invite into a member.

    STRICT RULES:
    - Invite must be pending and not expired
    - If the invite names an email, the new member must use it
    - The new member gets the next turn number

    Returns: Member
    """
    try:
        if not normalize_invite_code(code):
            raise InviteError("Invite code is required")

        invite = MemberInvite.query.filter_by(code_hash=hash_invite_code(code)).first()
        if invite is None:
            raise InviteError("Invalid invite code")

        if invite.status != InviteStatus.PENDING.value:
            raise InviteError(f"This invite is {invite.status}")

        if invite.is_expired():
            raise InviteError("This invite has expired")

        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise InviteError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        email = normalize_optional(email)
        email = email.lower() if email else None
        if invite.email:
            if email and email != invite.email:
                raise InviteError("This invite was issued for a different email")
            email = invite.email

        member = create_member(
            name=name,
            email=email,
            phone_number=normalize_optional(phone_number) or invite.phone_number,
            role=invite.role,
            password=password
        )

        invite.status = InviteStatus.ACCEPTED.value
        invite.accepted_by = member.id
        db.session.commit()

        logger.info("Invite %s redeemed by member %s", invite.code_prefix, member.id)
        return member

    except MembershipError as e:
        db.session.rollback()
        raise InviteError(str(e))
    except InviteError:
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        raise InviteError(f"Failed to redeem invite: {str(e)}")
