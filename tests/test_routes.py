from datetime import date, timedelta

from chama_ledger.extensions import db
from chama_ledger.models import Contribution, Payout, Member, IgaProject, ProjectMember
from chama_ledger.services.contribution_service import record_contribution
from conftest import login, PASSWORD


def add_payout(cycle_number, member, when, amount='5000.00', status='scheduled'):
    payout = Payout(cycle_number=cycle_number, member_id=member.id, date=when, amount=amount, status=status)
    db.session.add(payout)
    db.session.commit()
    return payout


def add_contribution(member, amount, cycle_number, when=None):
    contribution = Contribution(member_id=member.id, amount=amount, cycle_number=cycle_number,
                                date=when or date.today())
    db.session.add(contribution)
    db.session.commit()
    return contribution


class TestModels:
    def test_contribution_links_member_and_recorder(self, admin, member):
        contribution, _ = record_contribution(admin.id, member.id, '500', 1)

        assert contribution.member is member
        assert contribution.recorder is admin
        assert member.contributions.count() == 1
        assert admin.contributions.count() == 0
        assert admin.contributions_recorded.count() == 1


class TestAuth:
    def test_login_success(self, client, member):
        response = login(client, 'TIMOTHY@example.com')
        assert response.status_code == 200
        assert response.get_json()['member']['turn_number'] == 2
        assert response.get_json()['is_admin'] is False

    def test_login_wrong_password(self, client, member):
        response = login(client, member.email, 'wrong-password')
        assert response.status_code == 401

    def test_inactive_member_cannot_login(self, client, member):
        member.status = 'inactive'
        db.session.commit()
        assert login(client, member.email).status_code == 403

    def test_pages_need_login(self, client):
        for path in ['/dashboard', '/payouts', '/welfare', '/contributions', '/admin/members']:
            response = client.get(path)
            assert response.status_code == 401

    def test_logout(self, member_client):
        assert member_client.get('/logout').status_code == 200
        assert member_client.get('/dashboard').status_code == 401


class TestMemberPages:
    def test_dashboard(self, member_client, admin, member):
        today = date.today()
        add_payout(1, admin, today - timedelta(days=15))
        add_payout(2, member, today + timedelta(days=15))
        add_contribution(member, '500.00', 1, today - timedelta(days=15))
        add_contribution(member, '500.00', 2)

        response = member_client.get('/dashboard')
        assert response.status_code == 200

        data = response.get_json()
        assert data['stats']['total_contributions'] == '1000.00'
        assert data['stats']['payout_turn'] == 2
        assert data['stats']['welfare_balance'] == '1000'
        assert data['stats']['current_cycle'] == 1
        assert data['stats']['total_members'] == 2
        assert data['stats']['days_until_next'] == 15
        assert data['stats']['next_recipient'] == 'Timothy Ongeche'
        assert data['display']['total_contributions'] == 'Ksh. 1,000'
        assert data['display']['payout_turn'] == '#2'
        assert len(data['recent_contributions']) == 2
        assert len(data['upcoming_payouts']) == 1

    def test_dashboard_without_schedule(self, member_client):
        data = member_client.get('/dashboard').get_json()
        assert data['stats']['next_payout_date'] is None
        assert data['display']['next_payout_date'] == 'N/A'
        assert data['display']['days_until_next'] == 'N/A'

    def test_contributions_show_split(self, member_client, member):
        add_contribution(member, '500.00', 1)

        data = member_client.get('/contributions').get_json()
        row = data['contributions'][0]
        assert row['welfare_amount'] == '83.33'
        assert row['lending_amount'] == '416.67'
        assert row['amount_display'] == 'Ksh. 500'
        assert data['totals']['welfare'] == '83.33'

    def test_payout_badges(self, member_client, admin, member):
        today = date.today()
        add_payout(1, admin, today - timedelta(days=1))
        add_payout(2, member, today)

        data = member_client.get('/payouts').get_json()
        assert [row['status'] for row in data['schedule']] == ['Received', 'Today']
        assert data['schedule'][1]['recipient'] == 'You'
        assert data['my_turn'] == '#2'
        assert data['next']['cycle_number'] == 2
        assert data['days_until_next'] == 0

    def test_empty_payout_schedule(self, member_client):
        data = member_client.get('/payouts').get_json()
        assert data['schedule'] == []
        assert data['next'] is None
        assert data['days_until_next'] is None
        assert data['my_turn'] == 'N/A'

    def test_welfare_summary(self, member_client, admin, member):
        today = date.today()
        add_payout(1, admin, today - timedelta(days=30))
        add_payout(2, member, today - timedelta(days=15))
        add_payout(3, admin, today + timedelta(days=15))
        add_contribution(member, '500.00', 1)

        data = member_client.get('/welfare').get_json()
        assert data['summary']['current_balance'] == '2000'
        assert data['summary']['completed_cycles'] == 2
        assert data['summary']['final_amount'] == '12000'
        assert data['display']['completed'] == '2 / 12'
        assert data['display']['current_balance'] == 'Ksh. 2,000'
        assert data['ledger_balance'] == '83.33'
        assert [t['cycle_number'] for t in data['transactions']] == [2, 1]


class TestAdmin:
    def test_member_cannot_use_admin(self, member_client):
        response = member_client.post('/admin/members', json={'name': 'Ketty Awino'})
        assert response.status_code == 403

    def test_add_member_takes_next_turn(self, admin_client, member):
        member.status = 'inactive'
        db.session.commit()

        response = admin_client.post('/admin/members', json={'name': 'Ketty Awino', 'email': 'ketty@example.com'})
        assert response.status_code == 201
        # turn 2 belongs to an inactive member and is not reused
        assert response.get_json()['member']['turn_number'] == 3

    def test_add_member_duplicate_email(self, admin_client, member):
        response = admin_client.post('/admin/members', json={'name': 'Other', 'email': member.email})
        assert response.status_code == 400

    def test_update_member(self, admin_client, member):
        response = admin_client.post(f'/admin/members/{member.id}', json={
            'phone_number': '0712345678', 'turn_number': 9, 'role': 'admin'
        })
        assert response.status_code == 200
        data = response.get_json()['member']
        assert data['phone_number'] == '0712345678'
        assert data['turn_number'] == 2
        assert data['role'] == 'admin'

    def test_only_superadmin_grants_superadmin(self, admin_client, admin, member):
        response = admin_client.post(f'/admin/members/{member.id}', json={'role': 'superadmin'})
        assert response.status_code == 403

        admin.role = 'superadmin'
        db.session.commit()
        response = admin_client.post(f'/admin/members/{member.id}', json={'role': 'superadmin'})
        assert response.status_code == 200
        assert response.get_json()['member']['role'] == 'superadmin'

    def test_update_missing_member(self, admin_client):
        assert admin_client.post('/admin/members/999', json={'name': 'X'}).status_code == 404

    def test_record_contribution(self, admin_client, member):
        response = admin_client.post('/admin/contributions', json={
            'member_id': member.id, 'amount': '500', 'cycle_number': 1, 'date': '2026-01-15'
        })
        assert response.status_code == 201
        assert response.get_json()['split'] == {'lending_amount': '416.67', 'welfare_amount': '83.33'}
        assert Contribution.query.count() == 1

    def test_duplicate_cycle_contribution_is_accepted(self, admin_client, member):
        payload = {'member_id': member.id, 'amount': '500', 'cycle_number': 1}
        assert admin_client.post('/admin/contributions', json=payload).status_code == 201
        assert admin_client.post('/admin/contributions', json=payload).status_code == 201
        assert Contribution.query.filter_by(member_id=member.id, cycle_number=1).count() == 2

    def test_invalid_contribution_amount(self, admin_client, member):
        for amount in ['0', '-10', 'abc', '10.555']:
            response = admin_client.post('/admin/contributions', json={
                'member_id': member.id, 'amount': amount, 'cycle_number': 1
            })
            assert response.status_code == 400
        assert Contribution.query.count() == 0

    def test_schedule_and_complete_payout(self, admin_client, member):
        when = (date.today() + timedelta(days=5)).isoformat()
        response = admin_client.post('/admin/payouts', json={
            'cycle_number': 1, 'member_id': member.id, 'date': when, 'amount': '5000'
        })
        assert response.status_code == 201
        payout_id = response.get_json()['payout']['id']

        duplicate = admin_client.post('/admin/payouts', json={
            'cycle_number': 1, 'member_id': member.id, 'date': when, 'amount': '5000'
        })
        assert duplicate.status_code == 400

        response = admin_client.post(f'/admin/payouts/{payout_id}/complete')
        assert response.status_code == 200
        assert response.get_json()['payout']['status'] == 'completed'

        schedule = admin_client.get('/payouts').get_json()['schedule']
        assert schedule[0]['status'] == 'Received'

        assert admin_client.post(f'/admin/payouts/{payout_id}/complete').status_code == 400
        assert admin_client.post('/admin/payouts/999/complete').status_code == 404


class TestInvites:
    def test_invite_and_register(self, admin_client, member):
        response = admin_client.post('/admin/invites', json={'email': 'ketty@example.com', 'notes': 'Cycle 3'})
        assert response.status_code == 201
        code = response.get_json()['code']
        assert code.startswith('JNG-')
        assert response.get_json()['invite']['code_prefix'] == code.replace('-', '')[:8]

        admin_client.get('/logout')

        response = admin_client.post('/register', json={
            'invite_code': code.lower(), 'name': 'Ketty Awino', 'password': PASSWORD
        })
        assert response.status_code == 201
        assert response.get_json()['turn_number'] == 3

        new_member = db.session.get(Member, response.get_json()['member_id'])
        assert new_member.email == 'ketty@example.com'
        assert login(admin_client, 'ketty@example.com').status_code == 200

    def test_invite_cannot_be_used_twice(self, client, admin):
        from chama_ledger.services.invite_service import create_invite
        invite, code = create_invite(admin.id)

        first = client.post('/register', json={'invite_code': code, 'name': 'A', 'password': PASSWORD, 'email': 'a@example.com'})
        assert first.status_code == 201
        client.get('/logout')
        second = client.post('/register', json={'invite_code': code, 'name': 'B', 'password': PASSWORD, 'email': 'b@example.com'})
        assert second.status_code == 400

    def test_revoked_invite(self, admin_client):
        response = admin_client.post('/admin/invites', json={})
        invite_id = response.get_json()['invite']['id']
        code = response.get_json()['code']

        response = admin_client.post(f'/admin/invites/{invite_id}/revoke')
        assert response.status_code == 200
        assert response.get_json()['invite']['status'] == 'revoked'

        listing = admin_client.get('/admin/invites').get_json()['invites']
        assert listing[0]['status'] == 'revoked'
        assert 'code_hash' not in listing[0]

        admin_client.get('/logout')
        response = admin_client.post('/register', json={'invite_code': code, 'name': 'X', 'password': PASSWORD})
        assert response.status_code == 400

    def test_invalid_code(self, client):
        response = client.post('/register', json={'invite_code': 'JNG-AAAA-BBBB-CCCC', 'name': 'X', 'password': PASSWORD})
        assert response.status_code == 400


class TestFixtureDataSource:
    def test_reads_fixture_group(self, fixture_app):
        from chama_ledger.services.membership_service import create_member
        create_member(name='Orpah Achieng', email='orpah@example.com', role='admin', password=PASSWORD)
        db.session.commit()

        client = fixture_app.test_client()
        assert login(client, 'orpah@example.com').status_code == 200

        stats = client.get('/dashboard').get_json()['stats']
        assert stats['payout_turn'] == 1
        assert stats['total_contributions'] == '1000.00'
        assert stats['total_members'] == 12

        welfare = client.get('/welfare').get_json()
        assert welfare['summary']['final_amount'] == '12000'
        assert welfare['ledger_balance'] == '1999.92'

        assert len(client.get('/payouts').get_json()['schedule']) == 12

    def test_admin_changes_refused(self, fixture_app):
        from chama_ledger.services.membership_service import create_member
        create_member(name='Orpah Achieng', email='orpah@example.com', role='admin', password=PASSWORD)
        db.session.commit()

        client = fixture_app.test_client()
        login(client, 'orpah@example.com')
        assert client.post('/admin/members', json={'name': 'X'}).status_code == 503

    def test_login_is_matched_to_sample_member_by_email(self, fixture_app):
        from chama_ledger.services.membership_service import create_member
        # database id 2 belongs to Timothy, who is member 8 in the sample group
        create_member(name='Orpah Achieng', email='orpah@example.com', role='admin', password=PASSWORD)
        create_member(name='Timothy Ongeche', email='timothy@example.com', password=PASSWORD)
        db.session.commit()

        client = fixture_app.test_client()
        assert login(client, 'timothy@example.com').status_code == 200

        stats = client.get('/dashboard').get_json()['stats']
        assert stats['member_id'] == 8
        assert stats['payout_turn'] == 8
        assert stats['member_name'] == 'Timothy Ongeche'

        payouts = client.get('/payouts').get_json()
        assert payouts['my_turn'] == '#8'
        assert [row['cycle_number'] for row in payouts['schedule'] if row['is_me']] == [8]

        contributions = client.get('/contributions').get_json()['contributions']
        assert len(contributions) == 2

    def test_login_without_sample_member(self, fixture_app):
        from chama_ledger.services.membership_service import create_member
        create_member(name='Visitor', email='visitor@example.com', password=PASSWORD)
        db.session.commit()

        client = fixture_app.test_client()
        login(client, 'visitor@example.com')

        stats = client.get('/dashboard').get_json()['stats']
        assert stats['payout_turn'] is None
        assert stats['total_contributions'] == '0.00'
        assert client.get('/contributions').get_json()['contributions'] == []
        assert client.get('/payouts').get_json()['my_turn'] == 'N/A'

    def test_sample_projects(self, fixture_app):
        from chama_ledger.services.membership_service import create_member
        create_member(name='Timothy Ongeche', email='timothy@example.com', password=PASSWORD)
        db.session.commit()

        client = fixture_app.test_client()
        login(client, 'timothy@example.com')

        data = client.get('/projects').get_json()
        assert [p['code'] for p in data['projects']] == ['JPP', 'JGF']
        assert data['projects'][0]['member_count'] == 5
        assert data['active_count'] == 2
        assert client.post('/projects/1/join').status_code == 503


def add_project(code='JGF', name='Community Fish Farming', status='active', start=None):
    project = IgaProject(code=code, name=name, status=status, start_date=start or date(2025, 6, 1))
    db.session.add(project)
    db.session.commit()
    return project


class TestProjects:
    def test_list_with_counts_and_membership(self, member_client, admin, member):
        fish = add_project()
        poultry = add_project('JPP', 'Poultry Keeping Project', start=date(2025, 9, 15))
        db.session.add(ProjectMember(project_id=fish.id, member_id=admin.id))
        db.session.add(ProjectMember(project_id=fish.id, member_id=member.id, role='Treasurer'))
        db.session.commit()

        data = member_client.get('/projects').get_json()
        rows = {p['code']: p for p in data['projects']}

        assert [p['code'] for p in data['projects']] == ['JPP', 'JGF']
        assert rows['JGF']['member_count'] == 2
        assert rows['JGF']['is_member'] is True
        assert rows['JGF']['membership_role'] == 'Treasurer'
        assert rows['JPP']['member_count'] == 0
        assert rows['JPP']['is_member'] is False
        assert rows['JPP']['id'] == poultry.id

    def test_join_and_leave(self, member_client, member):
        project = add_project()

        response = member_client.post(f'/projects/{project.id}/join')
        assert response.status_code == 201
        assert response.get_json()['membership']['role'] == 'Member'

        assert member_client.post(f'/projects/{project.id}/join').status_code == 400
        assert member_client.get('/projects').get_json()['projects'][0]['member_count'] == 1

        assert member_client.post(f'/projects/{project.id}/leave').status_code == 200
        assert ProjectMember.query.count() == 0
        assert member_client.post(f'/projects/{project.id}/leave').status_code == 400

    def test_completed_project_is_closed(self, member_client):
        project = add_project(status='completed')
        assert member_client.post(f'/projects/{project.id}/join').status_code == 400

    def test_missing_project(self, member_client):
        assert member_client.post('/projects/999/join').status_code == 404

    def test_admin_creates_project(self, admin_client, admin):
        response = admin_client.post('/admin/projects', json={
            'code': 'jgf', 'name': 'Community Fish Farming', 'start_date': '2025-06-01', 'project_leader': admin.id
        })
        assert response.status_code == 201
        project = response.get_json()['project']
        assert project['code'] == 'JGF'
        assert project['leader_name'] == 'Orpah Achieng'

        duplicate = admin_client.post('/admin/projects', json={'code': 'JGF', 'name': 'Again'})
        assert duplicate.status_code == 400

    def test_member_cannot_create_project(self, member_client):
        response = member_client.post('/admin/projects', json={'code': 'JPP', 'name': 'Poultry'})
        assert response.status_code == 403


class TestProfile:
    def test_update_own_name_and_phone(self, member_client, member):
        response = member_client.patch('/me', json={
            'name': 'Timothy O.', 'phone_number': '0712345678', 'role': 'admin', 'turn_number': 1
        })
        assert response.status_code == 200

        data = response.get_json()['member']
        assert data['name'] == 'Timothy O.'
        assert data['phone_number'] == '0712345678'
        assert data['role'] == 'member'
        assert data['turn_number'] == 2

    def test_name_cannot_be_blank(self, member_client):
        assert member_client.patch('/me', json={'name': '  '}).status_code == 400

    def test_needs_login(self, client):
        assert client.patch('/me', json={'name': 'X'}).status_code == 401
