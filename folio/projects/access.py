"""
Project access rules.

Owners and designers of a project get OWNER access from the designer side.
Everyone else needs a participant row; vendor-side participants only see
selections attributed to their vendor. Platform admins are treated as
owners.
"""
from collections import namedtuple

from django.db.models import Q

from folio.core.roles import get_user_role, ROLE_ADMIN
from .models import Project, ProjectParticipant

ProjectAccess = namedtuple('ProjectAccess', ['role', 'side', 'vendor_id'])

EDIT_ROLES = ('OWNER', 'EDITOR')


class ProjectAccessDenied(Exception):
    """User may not view or change the project or selection"""


def get_project_access(user, project):
    """ProjectAccess for a user on a project, or None"""
    if not user or not user.is_authenticated:
        return None

    if project.owner_id == user.id or project.designer_id == user.id:
        return ProjectAccess('OWNER', 'DESIGNER', None)

    participant = ProjectParticipant.objects.filter(project=project, user=user).first()
    if participant is not None:
        return ProjectAccess(participant.role, participant.side, participant.vendor_id)

    if get_user_role(user) == ROLE_ADMIN:
        return ProjectAccess('OWNER', 'DESIGNER', None)

    return None


def accessible_projects(user):
    """Projects a user can view"""
    queryset = Project.objects.select_related('designer', 'owner')
    if get_user_role(user) == ROLE_ADMIN:
        return queryset
    return queryset.filter(
        Q(owner=user) | Q(designer=user) | Q(participants__user=user)
    ).distinct()


def assert_project_view(user, project):
    access = get_project_access(user, project)
    if access is None:
        raise ProjectAccessDenied('Permission denied')
    return access


def assert_project_edit(user, project):
    access = assert_project_view(user, project)
    if access.role not in EDIT_ROLES:
        raise ProjectAccessDenied('Permission denied: insufficient project role')
    return access


def can_view_selection(access, selection):
    if access.side == 'VENDOR':
        return access.vendor_id is not None and access.vendor_id == selection.vendor_id
    return True


def assert_selection_view(user, selection):
    access = assert_project_view(user, selection.project)
    if not can_view_selection(access, selection):
        raise ProjectAccessDenied('Permission denied')
    return access


def assert_selection_edit(user, selection):
    access = assert_selection_view(user, selection)
    if access.role not in EDIT_ROLES:
        raise ProjectAccessDenied('Permission denied: insufficient project role')
    return access


def visible_selections(access, queryset):
    """Restrict a selection queryset to what the access allows"""
    if access.side == 'VENDOR':
        if access.vendor_id is None:
            return queryset.none()
        return queryset.filter(vendor_id=access.vendor_id)
    return queryset


# Vendors move their own quotes between these; the designer side decides on sent ones
VENDOR_QUOTE_STATUSES = ('DRAFT', 'SENT', 'EXPIRED')
DESIGNER_QUOTE_STATUSES = ('ACCEPTED', 'REJECTED')


def can_attach_quote(access):
    return access.side == 'VENDOR' and access.vendor_id is not None


def visible_quotes(access, queryset):
    """Vendors see their own quotes; the designer side sees everything but drafts"""
    if access.side == 'VENDOR':
        if access.vendor_id is None:
            return queryset.none()
        return queryset.filter(vendor_id=access.vendor_id)
    return queryset.exclude(status='DRAFT')


def assert_quote_status_change(access, quote, new_status):
    if new_status in VENDOR_QUOTE_STATUSES:
        if access.side != 'VENDOR' or access.vendor_id != quote.vendor_id:
            raise ProjectAccessDenied('Permission denied: only the quoting vendor can change this status')
    elif access.side != 'DESIGNER' or access.role not in EDIT_ROLES:
        raise ProjectAccessDenied('Permission denied: only project editors can accept or reject quotes')
    return access
