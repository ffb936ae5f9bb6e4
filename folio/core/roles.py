"""Role resolution and capability flags for the marketplace roles"""

ROLE_HOMEOWNER = 'homeowner'
ROLE_DESIGNER = 'designer'
ROLE_VENDOR = 'vendor'
ROLE_STUDENT = 'student'
ROLE_ADMIN = 'admin'

ALL_ROLES = [ROLE_HOMEOWNER, ROLE_DESIGNER, ROLE_VENDOR, ROLE_STUDENT, ROLE_ADMIN]

# Django group name per role (see create_role_groups command)
ROLE_GROUPS = {
    ROLE_HOMEOWNER: 'Homeowner',
    ROLE_DESIGNER: 'Designer',
    ROLE_VENDOR: 'Vendor',
    ROLE_STUDENT: 'Student',
    ROLE_ADMIN: 'Admin',
}

# Roles any signed-in user may switch into from the role selector.
# Admin is never self-assignable.
SWITCHABLE_ROLES = [ROLE_HOMEOWNER, ROLE_DESIGNER, ROLE_VENDOR, ROLE_STUDENT]


def normalize_role(value):
    """Lower-case a role value; unknown or empty values become 'guest'"""
    if not value:
        return 'guest'
    role = str(value).strip().lower()
    return role if role in ALL_ROLES else 'guest'


def get_user_role(user):
    """
    Resolve the effective role for a user.

    Group membership wins over the stored role field so that admins can be
    managed from the Django admin. Superusers/staff without an application
    group fall back to admin.
    """
    if not user or not user.is_authenticated:
        return 'guest'

    group_names = set(user.groups.values_list('name', flat=True))
    if ROLE_GROUPS[ROLE_ADMIN] in group_names:
        return ROLE_ADMIN

    role = normalize_role(getattr(user, 'role', None))
    if role != 'guest':
        if role == ROLE_HOMEOWNER and (user.is_superuser or user.is_staff):
            return ROLE_ADMIN
        return role

    if user.is_superuser or user.is_staff:
        return ROLE_ADMIN
    return ROLE_HOMEOWNER


def is_admin_user(user):
    return get_user_role(user) == ROLE_ADMIN


def role_capabilities(role):
    """Capability flags sent to the client alongside the user profile"""
    is_admin = role == ROLE_ADMIN
    is_designer = role == ROLE_DESIGNER
    is_vendor = role == ROLE_VENDOR
    return {
        'is_admin': is_admin,
        'can_access_admin': is_admin,
        'can_manage_designers': is_admin,
        'can_manage_vendors': is_admin,
        'can_approve_products': is_admin,
        'can_approve_events': is_admin,
        'can_create_project': is_admin or is_designer or is_vendor,
        'can_create_product': is_admin or is_vendor,
        'can_create_event': is_admin or is_vendor,
        'can_tag_images': is_admin or is_designer,
        'can_view_vendor_analytics': is_admin or is_vendor,
    }
