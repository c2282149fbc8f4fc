"""
Flask CLI commands.

    flask --app run init-db
    flask --app run seed-demo --password secret123
"""

import logging
import click
from flask import current_app
from flask.cli import with_appcontext
from chama_ledger.extensions import db
from chama_ledger.models import Member, Contribution, Payout, IgaProject
from chama_ledger.records import MemberRecord, ContributionRecord, PayoutRecord, ProjectRecord
from chama_ledger import fixtures

logger = logging.getLogger(__name__)


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create database tables."""
    db.create_all()
    click.echo('Database tables created.')


@click.command('seed-demo')
@click.option('--password', default='changeme123', show_default=True,
              help='Login password given to every demo member.')
@with_appcontext
def seed_demo_command(password):
    """Load the sample group (roster, contributions, payout schedule, projects)."""
    if Member.query.first() is not None:
        raise click.ClickException('Members already exist; seed-demo only runs on an empty database.')

    for data in fixtures.FIXTURE_MEMBERS:
        record = MemberRecord.from_mapping(data)
        member = Member(
            id=record.id,
            name=record.name,
            email=record.email,
            role=record.role,
            status=record.status,
            turn_number=record.turn_number,
            join_date=record.join_date
        )
        member.set_password(password)
        db.session.add(member)

    for data in fixtures.FIXTURE_PAYOUTS:
        record = PayoutRecord.from_mapping(data)
        db.session.add(Payout(
            cycle_number=record.cycle_number,
            member_id=record.member_id,
            date=record.date,
            amount=record.amount
        ))

    for data in fixtures.FIXTURE_CONTRIBUTIONS:
        record = ContributionRecord.from_mapping(data)
        db.session.add(Contribution(
            member_id=record.member_id,
            amount=record.amount,
            date=record.date,
            cycle_number=record.cycle_number
        ))

    # member counts are display-only in the fixtures; nobody is enrolled
    for data in fixtures.FIXTURE_PROJECTS:
        record = ProjectRecord.from_mapping(data)
        db.session.add(IgaProject(
            code=record.code,
            name=record.name,
            description=record.description,
            status=record.status,
            start_date=record.start_date
        ))

    db.session.commit()

    logger.info("Seeded demo group into %s", current_app.config['SQLALCHEMY_DATABASE_URI'])
    click.echo(
        f"Seeded {len(fixtures.FIXTURE_MEMBERS)} members, "
        f"{len(fixtures.FIXTURE_PAYOUTS)} payout cycles, "
        f"{len(fixtures.FIXTURE_PROJECTS)} projects and "
        f"{len(fixtures.FIXTURE_CONTRIBUTIONS)} contributions."
    )


def register_commands(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_demo_command)
