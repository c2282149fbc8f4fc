"""
DATA SOURCES
============

Where members, contributions, the payout schedule and IGA projects are read from.

- SqlDataSource:     the live database (Flask-SQLAlchemy models)
- FixtureDataSource: the bundled sample group, for demos and local work

The app picks one at startup from the DATA_SOURCE setting. Routes ask
for the configured source instead of checking configuration themselves.
All sources return records (see records.py), sorted the same way.
"""

import logging
from datetime import date
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from chama_ledger.extensions import db
from chama_ledger.models import Member, Contribution, Payout, IgaProject, ProjectMember
from chama_ledger.records import MemberRecord, ContributionRecord, PayoutRecord, ProjectRecord
from chama_ledger import fixtures

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'chama_data_source'


class DataSourceError(Exception):
    """Raised when records cannot be loaded from the store"""
    pass


class DataSource:
    """Read interface shared by every data source."""

    name = None
    supports_writes = False

    def get_members(self):
        """All members, ordered by turn number."""
        raise NotImplementedError

    def get_contributions(self, member_id=None):
        """Contributions, newest first; optionally only one member's."""
        raise NotImplementedError

    def get_payout_schedule(self):
        """Payout cycles ordered by cycle number."""
        raise NotImplementedError

    def get_member(self, member_id):
        return next((m for m in self.get_members() if m.id == member_id), None)

    def get_projects(self, member_id=None):
        """IGA projects, newest first, with member counts and member_id's own membership."""
        raise NotImplementedError

    def resolve_member_id(self, user):
        """Id of the logged-in member within this source, or None."""
        return user.id


# ============================================================
# LIVE DATABASE
# ============================================================

class SqlDataSource(DataSource):
    name = 'sql'
    supports_writes = True

    def get_members(self):
        try:
            rows = Member.query.order_by(Member.turn_number.asc()).all()
        except SQLAlchemyError as e:
            logger.error("Error fetching members: %s", e)
            raise DataSourceError("Could not load members")
        return [MemberRecord.from_mapping(m.to_dict()) for m in rows]

    def get_contributions(self, member_id=None):
        try:
            query = Contribution.query
            if member_id is not None:
                query = query.filter_by(member_id=member_id)
            rows = query.order_by(Contribution.date.desc(), Contribution.id.desc()).all()
        except SQLAlchemyError as e:
            logger.error("Error fetching contributions: %s", e)
            raise DataSourceError("Could not load contributions")
        return [ContributionRecord.from_mapping(c.to_dict()) for c in rows]

    def get_payout_schedule(self):
        try:
            rows = Payout.query.order_by(Payout.cycle_number.asc()).all()
        except SQLAlchemyError as e:
            logger.error("Error fetching payouts: %s", e)
            raise DataSourceError("Could not load payout schedule")
        return [PayoutRecord.from_mapping(p.to_dict()) for p in rows]

    def get_projects(self, member_id=None):
        try:
            projects = IgaProject.query.order_by(IgaProject.start_date.desc(), IgaProject.id.desc()).all()

            counts = dict(
                db.session.query(ProjectMember.project_id, db.func.count(ProjectMember.id))
                .group_by(ProjectMember.project_id)
                .all()
            )

            memberships = {}
            if member_id is not None:
                memberships = {
                    pm.project_id: pm
                    for pm in ProjectMember.query.filter_by(member_id=member_id).all()
                }
        except SQLAlchemyError as e:
            logger.error("Error fetching projects: %s", e)
            raise DataSourceError("Could not load projects")

        records = []
        for project in projects:
            data = project.to_dict()
            data['member_count'] = counts.get(project.id, 0)
            membership = memberships.get(project.id)
            data['membership'] = membership.to_dict() if membership else None
            records.append(ProjectRecord.from_mapping(data))
        return records


# ============================================================
# BUNDLED FIXTURES
# ============================================================

class FixtureDataSource(DataSource):
    name = 'fixture'

    def __init__(self, members=None, contributions=None, payouts=None, projects=None):
        self._members = members if members is not None else fixtures.FIXTURE_MEMBERS
        self._contributions = contributions if contributions is not None else fixtures.FIXTURE_CONTRIBUTIONS
        self._payouts = payouts if payouts is not None else fixtures.FIXTURE_PAYOUTS
        self._projects = projects if projects is not None else fixtures.FIXTURE_PROJECTS

    def get_members(self):
        records = [MemberRecord.from_mapping(m) for m in self._members]
        return sorted(records, key=lambda m: m.turn_number)

    def get_contributions(self, member_id=None):
        records = [ContributionRecord.from_mapping(c) for c in self._contributions]
        if member_id is not None:
            records = [c for c in records if c.member_id == member_id]
        return sorted(records, key=lambda c: (c.date, c.id or 0), reverse=True)

    def get_payout_schedule(self):
        records = [PayoutRecord.from_mapping(p) for p in self._payouts]
        return sorted(records, key=lambda p: p.cycle_number)

    def get_projects(self, member_id=None):
        # fixture projects carry no memberships
        records = [ProjectRecord.from_mapping(p) for p in self._projects]
        return sorted(records, key=lambda p: (p.start_date or date.min, p.id), reverse=True)

    def resolve_member_id(self, user):
        """
        Fixture ids do not line up with database ids, so the logged-in
        member is matched to the sample roster by email.
        """
        email = (getattr(user, 'email', None) or '').strip().lower()
        if not email:
            return None
        match = next((m for m in self.get_members() if (m.email or '').lower() == email), None)
        return match.id if match else None


DATA_SOURCES = {
    SqlDataSource.name: SqlDataSource,
    FixtureDataSource.name: FixtureDataSource,
}


def init_data_source(app):
    """Attach the configured data source to the app."""
    kind = app.config.get('DATA_SOURCE', 'sql')
    if kind not in DATA_SOURCES:
        raise ValueError(f"Unknown DATA_SOURCE '{kind}'. Use one of: {', '.join(DATA_SOURCES)}")

    app.extensions[EXTENSION_KEY] = DATA_SOURCES[kind]()
    logger.info("Using '%s' data source", kind)


def get_data_source():
    return current_app.extensions[EXTENSION_KEY]
