"""
PROJECT SERVICE
===============

Income-generating activity (IGA) projects.

Handles:
- Creating projects (Admin action)
- Members joining and leaving projects

Listing goes through the data source (see data_sources.py) so the
project page also works on the bundled sample data.
"""

import logging
from datetime import date
from chama_ledger.extensions import db
from chama_ledger.models import IgaProject, ProjectMember, Member, ProjectStatus
from chama_ledger.records import normalize_optional, to_date, RecordError
from chama_ledger.services.authorization_service import (
    can_manage_group, get_active_member, require_authorization, AuthorizationError
)

logger = logging.getLogger(__name__)

VALID_PROJECT_STATUSES = [s.value for s in ProjectStatus]
DEFAULT_PROJECT_ROLE = 'Member'


class ProjectError(Exception):
    """Base exception for project operations"""
    pass


def _get_project(project_id):
    project = db.session.get(IgaProject, project_id)
    if project is None:
        raise ProjectError("Project not found")
    return project


# ============================================================
# CREATE PROJECT (Admin action)
# ============================================================

def create_project(created_by_member_id, code, name, description=None,
                   start_date=None, project_leader_id=None, status=ProjectStatus.ACTIVE.value):
    """
    Admin registers a new IGA project.

    code is a short unique tag such as 'JGF' and is stored upper-case.
    """
    try:
        require_authorization(can_manage_group, created_by_member_id)

        code = normalize_optional(code)
        name = normalize_optional(name)
        if not code:
            raise ProjectError("Project code is required")
        if not name:
            raise ProjectError("Project name is required")
        code = code.upper()

        status = (normalize_optional(status) or ProjectStatus.ACTIVE.value).lower()
        if status not in VALID_PROJECT_STATUSES:
            raise ProjectError(f"Invalid status '{status}'")

        if IgaProject.query.filter_by(code=code).first():
            raise ProjectError(f"Project code {code} is already in use")

        try:
            start_date = to_date(start_date, 'start_date') or date.today()
        except RecordError as e:
            raise ProjectError(str(e))

        if project_leader_id not in (None, ''):
            try:
                project_leader_id = int(project_leader_id)
            except (TypeError, ValueError):
                raise ProjectError("Invalid project leader")
            if db.session.get(Member, project_leader_id) is None:
                raise ProjectError("Project leader not found")
        else:
            project_leader_id = None

        project = IgaProject(
            code=code,
            name=name,
            description=normalize_optional(description),
            status=status,
            start_date=start_date,
            project_leader=project_leader_id
        )
        db.session.add(project)
        db.session.commit()

        logger.info("Project %s created by %s", code, created_by_member_id)
        return project

    except (AuthorizationError, ProjectError):
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        raise ProjectError(f"Failed to create project: {str(e)}")


# ============================================================
# JOIN / LEAVE
# ============================================================

def join_project(project_id, member_id):
    """Active member opts into a project with the default role"""
    try:
        if get_active_member(member_id) is None:
            raise AuthorizationError("Your membership is not active")

        project = _get_project(project_id)
        if project.status != ProjectStatus.ACTIVE.value:
            raise ProjectError("This project is no longer accepting members")

        existing = ProjectMember.query.filter_by(project_id=project_id, member_id=member_id).first()
        if existing:
            raise ProjectError("You are already a member of this project")

        membership = ProjectMember(
            project_id=project_id,
            member_id=member_id,
            role=DEFAULT_PROJECT_ROLE,
            term_start=date.today()
        )
        db.session.add(membership)
        db.session.commit()

        logger.info("Member %s joined project %s", member_id, project.code)
        return membership

    except (AuthorizationError, ProjectError):
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        raise ProjectError(f"Failed to join project: {str(e)}")


def leave_project(project_id, member_id):
    try:
        project = _get_project(project_id)

        membership = ProjectMember.query.filter_by(project_id=project_id, member_id=member_id).first()
        if membership is None:
            raise ProjectError("You are not a member of this project")

        db.session.delete(membership)
        db.session.commit()

        logger.info("Member %s left project %s", member_id, project.code)
        return True

    except ProjectError:
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        raise ProjectError(f"Failed to leave project: {str(e)}")
