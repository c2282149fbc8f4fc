"""
ADMIN ROUTES
============

Admin-specific actions:
- Member roster (list, add, update)
- Recording contributions
- Payout schedule (schedule cycle, mark completed)
- Invites (list, create, revoke)
- IGA projects (create)
"""

from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from chama_ledger.extensions import db
from chama_ledger.models import Payout, MemberInvite
from chama_ledger.routes.common import request_data, json_error, admin_required
from chama_ledger.services.authorization_service import AuthorizationError
from chama_ledger.services.membership_service import (
    add_member, update_member, list_members, MembershipError
)
from chama_ledger.services.contribution_service import record_contribution, ContributionError
from chama_ledger.services.payout_service import (
    schedule_payout, mark_payout_completed, PayoutError
)
from chama_ledger.services.invite_service import (
    create_invite, revoke_invite, list_invites, InviteError
)
from chama_ledger.services.project_service import create_project, ProjectError
from chama_ledger.utils import to_json

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')


# ============== MEMBERS ==============
@admin_bp.route('/members', methods=['GET'])
@login_required
@admin_required
def members():
    include_inactive = request.args.get('include_inactive', '1') != '0'
    return jsonify({
        'members': [to_json(m.to_dict()) for m in list_members(include_inactive=include_inactive)]
    })


@admin_bp.route('/members', methods=['POST'])
@login_required
@admin_required
def create_member_route():
    data = request_data()

    try:
        member = add_member(
            added_by_member_id=current_user.id,
            name=data.get('name'),
            email=data.get('email'),
            phone_number=data.get('phone_number'),
            role=data.get('role') or 'member',
            status=data.get('status') or 'active',
            join_date=data.get('join_date'),
            password=data.get('password')
        )
    except AuthorizationError as e:
        return json_error(str(e), 403)
    except MembershipError as e:
        return json_error(str(e))

    return jsonify({
        'message': f'{member.name} added with turn #{member.turn_number}',
        'member': to_json(member.to_dict()),
    }), 201


@admin_bp.route('/members/<int:member_id>', methods=['POST'])
@login_required
@admin_required
def update_member_route(member_id):
    try:
        member = update_member(member_id, current_user.id, request_data())
    except AuthorizationError as e:
        return json_error(str(e), 403)
    except MembershipError as e:
        return json_error(str(e), 404 if str(e) == 'Member not found' else 400)

    return jsonify({'member': to_json(member.to_dict())})


# ============== CONTRIBUTIONS ==============
@admin_bp.route('/contributions', methods=['POST'])
@login_required
@admin_required
def record_contribution_route():
    data = request_data()

    try:
        contribution, split = record_contribution(
            recorded_by_member_id=current_user.id,
            member_id=data.get('member_id'),
            amount=data.get('amount'),
            cycle_number=data.get('cycle_number'),
            contribution_date=data.get('date')
        )
    except AuthorizationError as e:
        return json_error(str(e), 403)
    except ContributionError as e:
        return json_error(str(e))

    return jsonify({
        'contribution': to_json(contribution.to_dict()),
        'split': to_json(split),
    }), 201


# ============== PAYOUTS ==============
@admin_bp.route('/payouts', methods=['POST'])
@login_required
@admin_required
def schedule_payout_route():
    data = request_data()

    try:
        payout = schedule_payout(
            scheduled_by_member_id=current_user.id,
            cycle_number=data.get('cycle_number'),
            member_id=data.get('member_id'),
            payout_date=data.get('date'),
            amount=data.get('amount')
        )
    except AuthorizationError as e:
        return json_error(str(e), 403)
    except PayoutError as e:
        return json_error(str(e))

    return jsonify({'payout': to_json(payout.to_dict())}), 201


@admin_bp.route('/payouts/<int:payout_id>/complete', methods=['POST'])
@login_required
@admin_required
def complete_payout_route(payout_id):
    db.get_or_404(Payout, payout_id)

    try:
        payout = mark_payout_completed(payout_id, current_user.id)
    except AuthorizationError as e:
        return json_error(str(e), 403)
    except PayoutError as e:
        return json_error(str(e))

    return jsonify({'payout': to_json(payout.to_dict())})


# ============== INVITES ==============
@admin_bp.route('/invites', methods=['GET'])
@login_required
@admin_required
def invites():
    return jsonify({'invites': [i.to_dict() for i in list_invites()]})


@admin_bp.route('/invites', methods=['POST'])
@login_required
@admin_required
def create_invite_route():
    data = request_data()

    try:
        invite, code = create_invite(
            created_by_member_id=current_user.id,
            email=data.get('email'),
            phone_number=data.get('phone_number'),
            role=data.get('role') or 'member',
            expires_at=data.get('expires_at'),
            notes=data.get('notes'),
            prefix=current_app.config['INVITE_CODE_PREFIX']
        )
    except AuthorizationError as e:
        return json_error(str(e), 403)
    except InviteError as e:
        return json_error(str(e))

    # The plain code is only ever returned here
    return jsonify({'invite': invite.to_dict(), 'code': code}), 201


@admin_bp.route('/invites/<int:invite_id>/revoke', methods=['POST'])
@login_required
@admin_required
def revoke_invite_route(invite_id):
    db.get_or_404(MemberInvite, invite_id)

    try:
        invite = revoke_invite(invite_id, current_user.id)
    except AuthorizationError as e:
        return json_error(str(e), 403)
    except InviteError as e:
        return json_error(str(e))

    return jsonify({'invite': invite.to_dict()})


# ============== PROJECTS ==============
@admin_bp.route('/projects', methods=['POST'])
@login_required
@admin_required
def create_project_route():
    data = request_data()

    try:
        project = create_project(
            created_by_member_id=current_user.id,
            code=data.get('code'),
            name=data.get('name'),
            description=data.get('description'),
            start_date=data.get('start_date'),
            project_leader_id=data.get('project_leader'),
            status=data.get('status') or 'active'
        )
    except AuthorizationError as e:
        return json_error(str(e), 403)
    except ProjectError as e:
        return json_error(str(e))

    return jsonify({'project': to_json(project.to_dict())}), 201
