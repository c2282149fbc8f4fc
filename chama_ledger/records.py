"""
RECORDS
=======

Typed, read-only views of members, contributions and payout cycles.

Rows from the database and the bundled fixtures arrive as loose
mappings (optional keys, ISO date strings, numbers as strings).
They are normalised here, once, so the ledger functions only ever
see well-formed values.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional


class RecordError(ValueError):
    """Raised when a mapping cannot be turned into a record"""
    pass


def normalize_optional(value):
    """Blank strings and None both mean 'not provided'."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def to_decimal(value, field='amount'):
    if value is None or value == '':
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    try:
        # str() first so floats keep their printed value (0.1 -> '0.1')
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise RecordError(f"Invalid {field}: {value!r}")


def to_date(value, field='date'):
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise RecordError(f"Invalid {field}: {value!r}")


def _required(data, key):
    if data.get(key) is None:
        raise RecordError(f"Missing required field '{key}'")
    return data[key]


@dataclass(frozen=True)
class MemberRecord:
    id: int
    name: str
    turn_number: int
    join_date: Optional[date] = None
    status: str = 'active'
    role: str = 'member'
    email: Optional[str] = None
    phone_number: Optional[str] = None

    @property
    def is_active(self):
        return self.status == 'active'

    @classmethod
    def from_mapping(cls, data):
        return cls(
            id=int(_required(data, 'id')),
            name=normalize_optional(data.get('name')) or 'Member',
            turn_number=int(_required(data, 'turn_number')),
            join_date=to_date(data.get('join_date'), 'join_date'),
            status=normalize_optional(data.get('status')) or 'active',
            role=normalize_optional(data.get('role')) or 'member',
            email=normalize_optional(data.get('email')),
            phone_number=normalize_optional(data.get('phone_number')),
        )


@dataclass(frozen=True)
class ContributionRecord:
    id: Optional[int]
    member_id: int
    amount: Decimal
    date: date
    cycle_number: int

    @classmethod
    def from_mapping(cls, data):
        contribution_date = to_date(_required(data, 'date'))
        return cls(
            id=data.get('id'),
            member_id=int(_required(data, 'member_id')),
            amount=to_decimal(data.get('amount')),
            date=contribution_date,
            cycle_number=int(_required(data, 'cycle_number')),
        )


@dataclass(frozen=True)
class PayoutRecord:
    cycle_number: int
    member_id: int
    date: date
    amount: Decimal
    id: Optional[int] = None
    status: Optional[str] = None
    recipient_name: Optional[str] = None

    @property
    def is_marked_completed(self):
        return self.status == 'completed'

    @classmethod
    def from_mapping(cls, data):
        recipient = data.get('recipient_name')
        if recipient is None and isinstance(data.get('members'), dict):
            # joined shape: {'members': {'name': ...}}
            recipient = data['members'].get('name')

        return cls(
            id=data.get('id'),
            cycle_number=int(_required(data, 'cycle_number')),
            member_id=int(_required(data, 'member_id')),
            date=to_date(_required(data, 'date')),
            amount=to_decimal(data.get('amount')),
            status=normalize_optional(data.get('status')),
            recipient_name=normalize_optional(recipient),
        )


@dataclass(frozen=True)
class ProjectRecord:
    id: int
    code: str
    name: str
    status: str = 'active'
    description: Optional[str] = None
    start_date: Optional[date] = None
    leader_name: Optional[str] = None
    member_count: int = 0
    # the viewing member's own role in the project, if they joined
    membership_role: Optional[str] = None
    joined_on: Optional[date] = None

    @property
    def is_member(self):
        return self.membership_role is not None

    @classmethod
    def from_mapping(cls, data):
        membership = data.get('membership') or {}
        return cls(
            id=int(_required(data, 'id')),
            code=str(_required(data, 'code')).strip().upper(),
            name=normalize_optional(data.get('name')) or 'Project',
            status=(normalize_optional(data.get('status')) or 'active').lower(),
            description=normalize_optional(data.get('description')),
            start_date=to_date(data.get('start_date'), 'start_date'),
            leader_name=normalize_optional(data.get('leader_name')),
            member_count=int(data.get('member_count') or 0),
            membership_role=normalize_optional(membership.get('role')),
            joined_on=to_date(membership.get('term_start'), 'term_start'),
        )
