"""
Room templates.

Each room type has an ordered list of expected slots (sofa, rug, ...). A
slot is filled by a selection either explicitly through its slot key or
implicitly through its product category; unfilled slots render as
placeholder tiles on the room board.
"""
from collections import namedtuple

Slot = namedtuple('Slot', ['key', 'label', 'category', 'default_size'])

ROOM_TYPES = ('KITCHEN', 'BATH', 'LIVING', 'BEDROOM', 'DINING', 'OFFICE', 'ENTRY')

ROOM_TEMPLATES = {
    'KITCHEN': [
        Slot('countertop', 'Countertop', 'countertops', 'large'),
        Slot('backsplash', 'Backsplash', 'tile-backsplash', 'medium'),
        Slot('sink', 'Sink', 'sinks', 'small'),
        Slot('faucet', 'Faucet', 'faucets', 'small'),
        Slot('appliances', 'Appliances', 'appliances', 'medium'),
        Slot('lighting', 'Lighting', 'lighting', 'small'),
        Slot('island', 'Island', 'cabinetry', 'large'),
    ],
    'BATH': [
        Slot('vanity-top', 'Vanity Top', 'countertops', 'medium'),
        Slot('wall-tile', 'Wall Tile', 'tile-wall', 'medium'),
        Slot('floor-tile', 'Floor Tile', 'tile-floor', 'medium'),
        Slot('sink', 'Sink', 'sinks', 'small'),
        Slot('faucet', 'Faucet', 'faucets', 'small'),
        Slot('shower-system', 'Shower System', 'shower-systems', 'medium'),
        Slot('lighting', 'Lighting', 'lighting', 'small'),
    ],
    'LIVING': [
        Slot('sofa', 'Sofa', 'sofas', 'large'),
        Slot('rug', 'Rug', 'rugs', 'medium'),
        Slot('coffee-table', 'Coffee Table', 'tables-coffee', 'medium'),
        Slot('lighting', 'Lighting', 'lighting', 'small'),
        Slot('art', 'Art', 'art', 'small'),
        Slot('accent-chairs', 'Accent Chairs', 'chairs', 'medium'),
        Slot('storage', 'Storage', 'storage', 'small'),
    ],
    'BEDROOM': [
        Slot('bed', 'Bed', 'beds', 'large'),
        Slot('nightstands', 'Nightstands', 'nightstands', 'small'),
        Slot('dresser', 'Dresser', 'storage', 'medium'),
        Slot('rug', 'Rug', 'rugs', 'medium'),
        Slot('lighting', 'Lighting', 'lighting', 'small'),
        Slot('art', 'Art', 'art', 'small'),
    ],
    'DINING': [
        Slot('table', 'Dining Table', 'tables-dining', 'large'),
        Slot('chairs', 'Chairs', 'chairs-dining', 'medium'),
        Slot('lighting', 'Lighting', 'lighting', 'small'),
        Slot('rug', 'Rug', 'rugs', 'medium'),
        Slot('storage', 'Storage', 'storage', 'small'),
    ],
    'OFFICE': [
        Slot('desk', 'Desk', 'desks', 'large'),
        Slot('chair', 'Chair', 'chairs-office', 'medium'),
        Slot('storage', 'Storage', 'storage', 'small'),
        Slot('lighting', 'Lighting', 'lighting', 'small'),
        Slot('rug', 'Rug', 'rugs', 'medium'),
    ],
    'ENTRY': [
        Slot('console', 'Console', 'tables-console', 'medium'),
        Slot('mirror', 'Mirror', 'mirrors', 'small'),
        Slot('rug', 'Rug', 'rugs', 'medium'),
        Slot('lighting', 'Lighting', 'lighting', 'small'),
        Slot('storage', 'Storage', 'storage', 'small'),
    ],
}

# Category slug -> slot key. Order matters: inference scans it top to bottom.
CATEGORY_TO_SLOT_KEY = {
    # Kitchen
    'countertops': 'countertop',
    'tile-backsplash': 'backsplash',
    'sinks': 'sink',
    'faucets': 'faucet',
    'appliances': 'appliances',
    'lighting': 'lighting',
    'cabinetry': 'island',
    # Living room
    'sofas': 'sofa',
    'rugs': 'rug',
    'tables-coffee': 'coffee-table',
    'art': 'art',
    'chairs': 'accent-chairs',
    'storage': 'storage',
    # Bedroom
    'beds': 'bed',
    'nightstands': 'nightstands',
    'dressers': 'dresser',
    # Bathroom
    'tile-wall': 'wall-tile',
    'tile-floor': 'floor-tile',
    'shower-systems': 'shower-system',
    # Dining
    'tables-dining': 'table',
    'chairs-dining': 'chairs',
    # Office
    'desks': 'desk',
    'chairs-office': 'chair',
    # Entry
    'tables-console': 'console',
    'mirrors': 'mirror',
    # Fallbacks for generic tile/table/chair products
    'tile': 'floor-tile',
    'table': 'coffee-table',
    'chair': 'accent-chairs',
}

# Name fragments checked in order when a room has no explicit type
NAME_MATCHERS = [
    (('kitchen',), 'KITCHEN'),
    (('bath',), 'BATH'),
    (('living',), 'LIVING'),
    (('bedroom', 'master'), 'BEDROOM'),
    (('dining',), 'DINING'),
    (('office',), 'OFFICE'),
    (('entry', 'foyer'), 'ENTRY'),
]


def get_room_template_by_type(room_type):
    """Slots for a room type (KITCHEN, BATH, ...), or None"""
    if not room_type:
        return None
    return ROOM_TEMPLATES.get(str(room_type).strip().upper())


def get_room_template(name):
    """Slots for a room inferred from its name ("Master Suite" -> BEDROOM), or None"""
    if not name:
        return None
    lowered = str(name).lower()
    for fragments, room_type in NAME_MATCHERS:
        if any(fragment in lowered for fragment in fragments):
            return ROOM_TEMPLATES[room_type]
    return None


def template_for_room(room):
    """The room type wins; its name is the fallback for rooms created without one"""
    room_type = getattr(room, 'room_type', None)
    template = get_room_template_by_type(room_type) or get_room_template(room_type)
    if template:
        return template
    return get_room_template(getattr(room, 'name', None))


def template_slot_keys(template):
    return [slot.key for slot in template or []]


def slot_label(template, slot_key):
    if not slot_key or not template:
        return None
    for slot in template:
        if slot.key == slot_key:
            return slot.label
    return None


def infer_slot_key_from_category(category):
    """Trim, lower-case and look the category up; None when unmapped"""
    return CATEGORY_TO_SLOT_KEY.get((category or '').strip().lower())


def _selection_value(selection, field):
    if isinstance(selection, dict):
        return selection.get(field)
    return getattr(selection, field, None)


def infer_slot_key(selection, template):
    """
    Guess a slot for a selection: the first category key found in its tags,
    then in its product name, whose slot exists in the template.
    """
    if not template:
        return None
    keys = set(template_slot_keys(template))

    tags = ' '.join(str(tag) for tag in (_selection_value(selection, 'tags') or [])).lower()
    for category, slot_key in CATEGORY_TO_SLOT_KEY.items():
        if category in tags and slot_key in keys:
            return slot_key

    name = (_selection_value(selection, 'product_name') or '').lower()
    for category, slot_key in CATEGORY_TO_SLOT_KEY.items():
        if category in name and slot_key in keys:
            return slot_key

    return None


def serialize_template(room_type):
    slots = ROOM_TEMPLATES[room_type]
    return {
        'type': room_type,
        'slots': [
            {'key': slot.key, 'label': slot.label, 'category': slot.category, 'default_size': slot.default_size}
            for slot in slots
        ],
    }


def all_category_slugs():
    """Every category slug referenced by a template or the slot-key map, in first-seen order"""
    slugs = []
    for room_type in ROOM_TYPES:
        for slot in ROOM_TEMPLATES[room_type]:
            if slot.category not in slugs:
                slugs.append(slot.category)
    for category in CATEGORY_TO_SLOT_KEY:
        if category not in slugs:
            slugs.append(category)
    return slugs
