"""
Shared helpers for the JSON blueprints.
"""

from functools import wraps
from flask import jsonify, request
from flask_login import current_user

from chama_ledger.data_sources import get_data_source
from chama_ledger.services.authorization_service import can_manage_group


def request_data():
    """JSON body if there is one, otherwise form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def json_error(message, status=400):
    return jsonify({'error': message}), status


def admin_required(view):
    """
    Admin-only endpoint guard. Use below @login_required.

    Admin changes are written to the database, so they are refused
    while the app is serving fixture data.
    """
    @wraps(view)
    def wrapped(*args, **kwargs):
        allowed, reason = can_manage_group(current_user.id)
        if not allowed:
            return json_error(reason, 403)

        if not get_data_source().supports_writes:
            return json_error('Admin changes need the database backend (DATA_SOURCE=sql)', 503)

        return view(*args, **kwargs)
    return wrapped


def database_required(view):
    """Refuse member writes while the app is serving fixture data."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not get_data_source().supports_writes:
            return json_error('This action needs the database backend (DATA_SOURCE=sql)', 503)
        return view(*args, **kwargs)
    return wrapped
