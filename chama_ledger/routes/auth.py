"""
AUTHENTICATION ROUTES
=====================
"""

from flask import Blueprint, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from chama_ledger.models import Member, MemberStatus
from chama_ledger.extensions import db
from chama_ledger.routes.common import request_data, json_error
from chama_ledger.services.invite_service import redeem_invite, InviteError
from chama_ledger.services.membership_service import update_profile, MembershipError
from chama_ledger.utils import to_json

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request_data()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    remember = str(data.get('remember', '')).lower() in ('1', 'true', 'on', 'yes')

    if not email or not password:
        return json_error('Email and password are required!')

    member = Member.query.filter(db.func.lower(Member.email) == email).first()

    if member is None or not member.check_password(password):
        return json_error('Invalid email or password!', 401)

    if member.status != MemberStatus.ACTIVE.value:
        return json_error('Your membership is not active.', 403)

    login_user(member, remember=remember)
    return jsonify({
        'message': f'Welcome back, {member.name}!',
        'member': to_json(member.to_dict()),
        'is_admin': member.is_admin(),
    })


@auth_bp.route('/register', methods=['POST'])
def register():
    if current_user.is_authenticated:
        return json_error('You are already signed in.')

    data = request_data()

    try:
        member = redeem_invite(
            code=data.get('invite_code'),
            name=data.get('name'),
            password=data.get('password'),
            email=data.get('email'),
            phone_number=data.get('phone_number')
        )
    except InviteError as e:
        return json_error(str(e))

    return jsonify({
        'message': 'Registration successful! Please login.',
        'member_id': member.id,
        'turn_number': member.turn_number,
    }), 201


@auth_bp.route('/logout')
@login_required
def logout():
    logout_user()
    return jsonify({'message': 'You have been logged out.'})


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify({
        'member': to_json(current_user.to_dict()),
        'is_admin': current_user.is_admin(),
    })


@auth_bp.route('/me', methods=['PATCH'])
@login_required
def update_me():
    try:
        member = update_profile(current_user.id, request_data())
    except MembershipError as e:
        return json_error(str(e))

    return jsonify({
        'message': 'Profile updated.',
        'member': to_json(member.to_dict()),
    })
