"""
Role-based navigation.

Builds the sidebar menu, the header "create" shortcut and the layout choice
for a role. Everything here is pure so the client can render straight from
the response of /navigation/ or /auth/me/.
"""
from .roles import ROLE_ADMIN, ROLE_DESIGNER, ROLE_VENDOR, ROLE_STUDENT, ROLE_HOMEOWNER, normalize_role

BASE_NAV_ITEMS = [
    {'href': '/', 'icon': 'home', 'label': 'Home'},
    {'href': '/inspire', 'icon': 'lightbulb', 'label': 'Inspire'},
    {'href': '/events', 'icon': 'newspaper', 'label': 'Events'},
    {'href': '/vendor', 'icon': 'store', 'label': 'Shop'},
    {'href': '/community', 'icon': 'users', 'label': 'Community'},
]

ROLE_NAV_ITEMS = {
    ROLE_DESIGNER: [
        {'href': '/jobs', 'icon': 'briefcase', 'label': 'Jobs'},
        {'href': '/projects', 'icon': 'folder', 'label': 'Projects'},
        {'href': '/watch', 'icon': 'play', 'label': 'Watch'},
    ],
    ROLE_VENDOR: [
        {'href': '/vendor/dashboard', 'icon': 'chart', 'label': 'Vendor Dashboard'},
        {'href': '/vendor/events', 'icon': 'calendar', 'label': 'My Events'},
    ],
    ROLE_STUDENT: [
        {'href': '/student/classes', 'icon': 'graduation', 'label': 'Classes'},
        {'href': '/student/portfolio', 'icon': 'folder', 'label': 'Portfolio'},
    ],
    ROLE_HOMEOWNER: [
        {'href': '/homeowner/folders', 'icon': 'folder', 'label': 'Folders'},
    ],
}

PROFILE_NAV_ITEM = {'href': '/select-role', 'icon': 'user', 'label': 'Profile'}

ADMIN_SECTION = [
    {'href': '/admin', 'icon': 'shield', 'label': 'Dashboard'},
    {'href': '/admin/user-management', 'icon': 'users', 'label': 'Designers & Vendors'},
    {'href': '/admin/products', 'icon': 'box', 'label': 'Products'},
    {'href': '/admin/events', 'icon': 'calendar', 'label': 'Events'},
    {'href': '/admin/events/approvals', 'icon': 'check', 'label': 'Event Approvals'},
    {'href': '/admin/vendor-analytics', 'icon': 'chart', 'label': 'Vendor Analytics'},
]

CREATE_TARGETS = {
    ROLE_DESIGNER: {'href': '/designer/create-project', 'label': 'New Project'},
    ROLE_VENDOR: {'href': '/vendor/create-product', 'label': 'New Product'},
    ROLE_ADMIN: {'href': '/admin/create-event', 'label': 'New Event'},
}

# Admin and vendor get the full layout; everyone else the simple one
MAIN_LAYOUT_ROLES = {ROLE_ADMIN, ROLE_VENDOR}


def get_nav_items(role):
    role = normalize_role(role)
    items = [dict(item) for item in BASE_NAV_ITEMS]
    items.extend(dict(item) for item in ROLE_NAV_ITEMS.get(role, []))
    items.append(dict(PROFILE_NAV_ITEM))
    return items


def get_admin_section(role):
    if normalize_role(role) != ROLE_ADMIN:
        return []
    return [dict(item) for item in ADMIN_SECTION]


def get_create_target(role):
    target = CREATE_TARGETS.get(normalize_role(role))
    return dict(target) if target else None


def can_create_project(role):
    return normalize_role(role) in (ROLE_DESIGNER, ROLE_VENDOR, ROLE_ADMIN)


def get_layout(role):
    return 'main' if normalize_role(role) in MAIN_LAYOUT_ROLES else 'simple'


def is_active(href, pathname):
    """Home matches only itself; every other item matches its path prefix"""
    if not pathname:
        return False
    if href == '/':
        return pathname == '/'
    return pathname.startswith(href)


def build_navigation(role, pathname=None):
    """Full navigation payload for a role, marking the active item"""
    role = normalize_role(role)
    items = get_nav_items(role)
    admin_items = get_admin_section(role)
    for item in items + admin_items:
        item['active'] = is_active(item['href'], pathname)
    create_target = get_create_target(role)
    return {
        'role': role,
        'layout': get_layout(role),
        'items': items,
        'admin_items': admin_items,
        'create_target': create_target if can_create_project(role) else None,
    }
