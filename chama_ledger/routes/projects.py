"""
IGA PROJECT ROUTES
==================

Project list with each project's member count and the current
member's own participation, plus joining and leaving.
"""

from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from chama_ledger.extensions import db
from chama_ledger.models import IgaProject
from chama_ledger.data_sources import get_data_source
from chama_ledger.routes.common import json_error, database_required
from chama_ledger.services.authorization_service import AuthorizationError
from chama_ledger.services.project_service import join_project, leave_project, ProjectError
from chama_ledger.utils import to_json, format_date

projects_bp = Blueprint('projects', __name__)


@projects_bp.route('/projects')
@login_required
def projects():
    source = get_data_source()
    records = source.get_projects(member_id=source.resolve_member_id(current_user))

    rows = []
    for project in records:
        row = to_json(project)
        row['is_member'] = project.is_member
        row['start_date_display'] = format_date(project.start_date)
        rows.append(row)

    return jsonify({
        'projects': rows,
        'active_count': sum(1 for p in records if p.status == 'active'),
        'completed_count': sum(1 for p in records if p.status == 'completed'),
    })


@projects_bp.route('/projects/<int:project_id>/join', methods=['POST'])
@login_required
@database_required
def join(project_id):
    db.get_or_404(IgaProject, project_id)

    try:
        membership = join_project(project_id, current_user.id)
    except AuthorizationError as e:
        return json_error(str(e), 403)
    except ProjectError as e:
        return json_error(str(e))

    return jsonify({'membership': to_json(membership.to_dict())}), 201


@projects_bp.route('/projects/<int:project_id>/leave', methods=['POST'])
@login_required
@database_required
def leave(project_id):
    db.get_or_404(IgaProject, project_id)

    try:
        leave_project(project_id, current_user.id)
    except ProjectError as e:
        return json_error(str(e))

    return jsonify({'message': 'You have left the project.'})
