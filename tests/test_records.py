from datetime import date, datetime
from decimal import Decimal

import pytest

from chama_ledger.data_sources import FixtureDataSource
from chama_ledger.records import (
    MemberRecord, ContributionRecord, PayoutRecord, ProjectRecord, RecordError, normalize_optional
)
from chama_ledger.utils import format_currency, format_date, to_json
from chama_ledger.services.ledger_service import split_contribution


class TestRecords:
    def test_member_defaults(self):
        record = MemberRecord.from_mapping({'id': '4', 'name': ' Eunice ', 'turn_number': 4, 'role': '', 'status': None})
        assert record.id == 4
        assert record.name == 'Eunice'
        assert record.role == 'member'
        assert record.status == 'active'
        assert record.is_active

    def test_contribution_parses_strings(self):
        record = ContributionRecord.from_mapping({
            'id': 1, 'member_id': '8', 'amount': '500.50', 'date': '2025-12-15T10:00:00', 'cycle_number': '1'
        })
        assert record.member_id == 8
        assert record.amount == Decimal('500.50')
        assert record.date == date(2025, 12, 15)

    def test_payout_reads_joined_member_name(self):
        record = PayoutRecord.from_mapping({
            'cycle_number': 3, 'member_id': 3, 'date': datetime(2026, 1, 15, 9, 0),
            'amount': 5000, 'members': {'name': 'Ketty Awino'}
        })
        assert record.recipient_name == 'Ketty Awino'
        assert record.date == date(2026, 1, 15)
        assert not record.is_marked_completed

    def test_missing_required_field(self):
        with pytest.raises(RecordError):
            PayoutRecord.from_mapping({'cycle_number': 1, 'date': '2026-01-01'})

    def test_bad_date(self):
        with pytest.raises(RecordError):
            ContributionRecord.from_mapping({'member_id': 1, 'amount': 1, 'date': 'soon', 'cycle_number': 1})

    def test_normalize_optional(self):
        assert normalize_optional('  ') is None
        assert normalize_optional(' x ') == 'x'
        assert normalize_optional(0) == 0

    def test_project_membership(self):
        record = ProjectRecord.from_mapping({
            'id': 1, 'code': 'jgf ', 'name': 'Community Fish Farming', 'status': 'Active',
            'member_count': None, 'membership': {'role': 'Member', 'term_start': '2026-01-05'}
        })
        assert record.code == 'JGF'
        assert record.status == 'active'
        assert record.member_count == 0
        assert record.is_member
        assert record.joined_on == date(2026, 1, 5)

        assert not ProjectRecord.from_mapping({'id': 2, 'code': 'JPP'}).is_member


class TestFixtureDataSource:
    def test_schedule_is_ordered_by_cycle(self):
        source = FixtureDataSource()
        cycles = source.get_payout_schedule()
        assert [c.cycle_number for c in cycles] == list(range(1, 13))
        assert cycles[7].recipient_name == 'Timothy Ongeche'

    def test_member_contributions(self):
        source = FixtureDataSource()
        contributions = source.get_contributions(member_id=8)
        assert [c.cycle_number for c in contributions] == [2, 1]
        assert sum(c.amount for c in contributions) == Decimal('1000')

    def test_custom_data(self):
        source = FixtureDataSource(
            members=[{'id': 2, 'name': 'B', 'turn_number': 2}, {'id': 1, 'name': 'A', 'turn_number': 1}],
            contributions=[],
            payouts=[]
        )
        assert [m.id for m in source.get_members()] == [1, 2]
        assert source.get_member(2).name == 'B'
        assert source.get_member(99) is None
        assert source.get_payout_schedule() == []

    def test_login_matched_by_email(self):
        class User:
            id = 1
            email = 'Timothy@Example.com'

        source = FixtureDataSource()
        assert source.resolve_member_id(User()) == 8

        User.email = 'nobody@example.com'
        assert source.resolve_member_id(User()) is None


class TestFormatting:
    def test_currency(self):
        assert format_currency(2000) == 'Ksh. 2,000'
        assert format_currency(Decimal('416.67')) == 'Ksh. 416.67'
        assert format_currency(Decimal('1234567.50')) == 'Ksh. 1,234,567.5'
        assert format_currency(Decimal('0.00')) == 'Ksh. 0'
        assert format_currency(None) == 'Ksh. 0'

    def test_date(self):
        assert format_date(date(2025, 12, 15)) == '15 Dec 2025'
        assert format_date('2026-03-30') == '30 Mar 2026'
        assert format_date(None) == 'N/A'

    def test_to_json(self):
        data = to_json({'split': split_contribution(500), 'when': date(2026, 1, 1), 'items': (1, Decimal('2.50'))})
        assert data == {
            'split': {'lending_amount': '416.67', 'welfare_amount': '83.33'},
            'when': '2026-01-01',
            'items': [1, '2.50'],
        }
