from datetime import datetime, date
from enum import Enum
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from chama_ledger.extensions import db


class MemberRole(Enum):
    MEMBER = 'member'
    ADMIN = 'admin'
    SUPERADMIN = 'superadmin'


ADMIN_ROLES = (MemberRole.ADMIN.value, MemberRole.SUPERADMIN.value)


class MemberStatus(Enum):
    ACTIVE = 'active'
    INACTIVE = 'inactive'


class PayoutStatus(Enum):
    SCHEDULED = 'scheduled'
    COMPLETED = 'completed'


class InviteStatus(Enum):
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    REVOKED = 'revoked'


class ProjectStatus(Enum):
    ACTIVE = 'active'
    COMPLETED = 'completed'


# ============================================================
# MEMBER MODEL
# ============================================================
class Member(UserMixin, db.Model):
    """
    A member of the savings group.

    turn_number is the member's fixed rank in the payout rotation.
    It is assigned once when the member joins and never reused.
    """
    __tablename__ = 'members'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=True)
    phone_number = db.Column(db.String(30), nullable=True)
    password_hash = db.Column(db.String(256), nullable=True)

    role = db.Column(db.String(20), default=MemberRole.MEMBER.value, nullable=False)
    status = db.Column(db.String(20), default=MemberStatus.ACTIVE.value, nullable=False)
    turn_number = db.Column(db.Integer, nullable=False)
    join_date = db.Column(db.Date, default=date.today, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    contributions = db.relationship('Contribution', backref='member', lazy='dynamic',
                                    foreign_keys='Contribution.member_id')
    contributions_recorded = db.relationship('Contribution', backref='recorder', lazy='dynamic',
                                             foreign_keys='Contribution.recorded_by')
    payouts = db.relationship('Payout', backref='member', lazy='dynamic')
    project_memberships = db.relationship('ProjectMember', backref='member', lazy='dynamic')

    def set_password(self, password):
        """Hash and set the member's password."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Verify password against stored hash."""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def is_admin(self):
        return self.role in ADMIN_ROLES

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone_number': self.phone_number,
            'role': self.role,
            'status': self.status,
            'turn_number': self.turn_number,
            'join_date': self.join_date,
        }

    def __repr__(self):
        return f'<Member {self.name} turn={self.turn_number}>'


# ============================================================
# CONTRIBUTION MODEL
# ============================================================
class Contribution(db.Model):
    """
    A payment made by a member into the group pool.

    Append-only: rows are never updated or deleted once recorded.
    """
    __tablename__ = 'contributions'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)  # Must be > 0
    date = db.Column(db.Date, nullable=False)
    cycle_number = db.Column(db.Integer, nullable=False)

    recorded_by = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'member_id': self.member_id,
            'amount': self.amount,
            'date': self.date,
            'cycle_number': self.cycle_number,
        }

    def __repr__(self):
        return f'<Contribution member={self.member_id} cycle={self.cycle_number} amount={self.amount}>'


# ============================================================
# PAYOUT MODEL
# ============================================================
class Payout(db.Model):
    """
    One cycle of the rotating payout schedule.
    Exactly one recipient per cycle.
    """
    __tablename__ = 'payouts'

    id = db.Column(db.Integer, primary_key=True)
    cycle_number = db.Column(db.Integer, unique=True, nullable=False)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)
    date = db.Column(db.Date, nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)

    status = db.Column(db.String(20), default=PayoutStatus.SCHEDULED.value, nullable=False)
    completed_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'cycle_number': self.cycle_number,
            'member_id': self.member_id,
            'date': self.date,
            'amount': self.amount,
            'status': self.status,
            'recipient_name': self.member.name if self.member else None,
        }

    def __repr__(self):
        return f'<Payout cycle={self.cycle_number} member={self.member_id}>'


# ============================================================
# MEMBER INVITE MODEL
# ============================================================
class MemberInvite(db.Model):
    """
    An invitation to join the group.

    Only the SHA-256 hash of the invite code is stored. The plain
    code is shown once, when the invite is created.
    """
    __tablename__ = 'member_invites'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), nullable=True)
    phone_number = db.Column(db.String(30), nullable=True)
    role = db.Column(db.String(20), default=MemberRole.MEMBER.value, nullable=False)
    status = db.Column(db.String(20), default=InviteStatus.PENDING.value, nullable=False)

    code_hash = db.Column(db.String(64), unique=True, nullable=False)
    code_prefix = db.Column(db.String(8), nullable=False)

    created_by = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=True)
    accepted_by = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=True)
    expires_at = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def is_expired(self, now=None):
        if self.expires_at is None:
            return False
        return (now or datetime.utcnow()) >= self.expires_at

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'phone_number': self.phone_number,
            'role': self.role,
            'status': self.status,
            'code_prefix': self.code_prefix,
            'created_by': self.created_by,
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
            'notes': self.notes,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<MemberInvite {self.code_prefix} {self.status}>'


# ============================================================
# IGA PROJECT MODELS
# ============================================================
class IgaProject(db.Model):
    """
    An income-generating activity run by the group (fish farming, poultry...).
    Members opt in through ProjectMember.
    """
    __tablename__ = 'iga_projects'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(10), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), default=ProjectStatus.ACTIVE.value, nullable=False)
    start_date = db.Column(db.Date, default=date.today, nullable=False)
    project_leader = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    leader = db.relationship('Member', foreign_keys=[project_leader])
    members = db.relationship('ProjectMember', backref='project', lazy='dynamic',
                              cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'code': self.code,
            'name': self.name,
            'description': self.description,
            'status': self.status,
            'start_date': self.start_date,
            'project_leader': self.project_leader,
            'leader_name': self.leader.name if self.leader else None,
        }

    def __repr__(self):
        return f'<IgaProject {self.code} {self.status}>'


class ProjectMember(db.Model):
    """A member taking part in an IGA project."""
    __tablename__ = 'iga_committee_members'

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.Integer, db.ForeignKey('iga_projects.id'), nullable=False)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)
    role = db.Column(db.String(30), default='Member', nullable=False)
    term_start = db.Column(db.Date, default=date.today, nullable=False)

    # One membership per member per project
    __table_args__ = (
        db.UniqueConstraint('project_id', 'member_id', name='unique_project_member'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'project_id': self.project_id,
            'member_id': self.member_id,
            'role': self.role,
            'term_start': self.term_start,
        }

    def __repr__(self):
        return f'<ProjectMember member={self.member_id} project={self.project_id}>'
