"""
Room boards: the ordered tiles for one room.

Real selections always come first, followed by placeholders for the room
template's unfilled slots. A slot counts as filled when a selection names it
explicitly or when a selection's category maps to it.
"""
import logging

from folio.core.mosaic import span_for, size_to_token
from .room_templates import template_for_room, slot_label, infer_slot_key_from_category
from .tile_sizing import compute_tile_size, normalize_size

logger = logging.getLogger(__name__)


def dedupe_selections(selections):
    """Collapse duplicate ids; the last copy wins but keeps the first copy's position"""
    by_id = {}
    for selection in selections:
        by_id[selection.id] = selection
    return list(by_id.values())


def _with_override(selection, size_overrides):
    ui_meta = dict(selection.ui_meta or {})
    override = normalize_size((size_overrides or {}).get(selection.id))
    if override:
        ui_meta['displaySize'] = override
    return {
        'product_name': selection.product_name,
        'tags': selection.tags,
        'ui_meta': ui_meta,
    }


def filled_slot_keys(selections):
    filled = set()
    for selection in selections:
        if selection.slot_key:
            filled.add(selection.slot_key)
        inferred = infer_slot_key_from_category(selection.effective_category)
        if inferred:
            filled.add(inferred)
    return filled


def build_room_board(room, selections, cols=6, size_overrides=None):
    """
    Board payload for a room.

    Args:
        room: Room instance (id, name, room_type)
        selections: iterable of the room's Selection instances
        cols: grid column count, see folio.core.mosaic.estimate_cols
        size_overrides: optional {selection_id: size} applied on top of ui_meta
    """
    template = template_for_room(room)
    unique_selections = dedupe_selections(selections)

    items = []
    for selection in unique_selections:
        size = compute_tile_size(_with_override(selection, size_overrides))
        items.append({
            'kind': 'selection',
            'key': str(selection.id),
            'selection_id': selection.id,
            'size': size,
            'span': span_for(size_to_token(size), cols),
            'slot_key': selection.slot_key,
            'role_label': slot_label(template, selection.slot_key),
        })

    filled = filled_slot_keys(unique_selections)
    placeholders = []
    for slot in template or []:
        if slot.key in filled:
            continue
        placeholders.append({
            'kind': 'placeholder',
            'key': f'{room.id}:{slot.key}',
            'slot_key': slot.key,
            'label': slot.label,
            'category': slot.category,
            'size': slot.default_size,
            'span': span_for(size_to_token(slot.default_size), cols),
        })

    logger.debug(f"Board for room {room.id}: {len(items)} selections, {len(placeholders)} placeholders, filled={sorted(filled)}")

    return {
        'room_id': room.id,
        'room_name': room.name,
        'room_type': room.room_type,
        'cols': cols,
        'has_template': template is not None,
        'items': items + placeholders,
        'selection_count': len(items),
        'placeholder_count': len(placeholders),
        'filled_slots': sorted(filled),
    }


class SlotConflict(Exception):
    """Another selection in the room already holds the slot"""

    def __init__(self, slot_key, holder):
        self.slot_key = slot_key
        self.holder = holder
        name = holder.product_name or 'Untitled Product'
        super().__init__(f'This role is already filled by "{name}"')


class UnknownSlot(ValueError):
    """Slot key is not part of the room's template"""


def find_slot_holder(selection, slot_key):
    """The other selection in the same room holding slot_key, if any"""
    if not slot_key or not selection.room_id:
        return None
    return (selection.__class__.objects
            .filter(room_id=selection.room_id, slot_key=slot_key)
            .exclude(pk=selection.pk)
            .first())


def assign_slot(selection, slot_key, reassign=False):
    """
    Give a selection a template slot (role), or clear it with an empty key.

    The key is mirrored into ui_meta['slotKey']. When another selection in
    the room holds the slot, SlotConflict is raised unless reassign is set,
    in which case the holder's slot is cleared.

    Returns:
        the selection whose slot was cleared, or None
    """
    slot_key = (slot_key or '').strip() or None

    if slot_key and selection.room_id:
        template = template_for_room(selection.room)
        if template is not None and slot_key not in {slot.key for slot in template}:
            raise UnknownSlot(f"Unknown slot '{slot_key}' for room '{selection.room.name}'")

    holder = find_slot_holder(selection, slot_key)
    if holder is not None:
        if not reassign:
            raise SlotConflict(slot_key, holder)
        holder.slot_key = None
        holder_meta = dict(holder.ui_meta or {})
        holder_meta.pop('slotKey', None)
        holder.ui_meta = holder_meta
        holder.save(update_fields=['slot_key', 'ui_meta', 'updated_at'])
        logger.info(f"Slot {slot_key} reassigned from selection {holder.id} to {selection.id}")

    ui_meta = dict(selection.ui_meta or {})
    if slot_key:
        ui_meta['slotKey'] = slot_key
    else:
        ui_meta.pop('slotKey', None)
    selection.slot_key = slot_key
    selection.ui_meta = ui_meta
    selection.save(update_fields=['slot_key', 'ui_meta', 'updated_at'])
    return holder


def set_display_size(selection, size):
    """Store a display-size override; 'auto' (or empty) removes it"""
    ui_meta = dict(selection.ui_meta or {})
    normalized = normalize_size(size)
    if normalized:
        ui_meta['displaySize'] = normalized
    elif size in (None, '', 'auto'):
        ui_meta.pop('displaySize', None)
    else:
        raise ValueError(f"Invalid size '{size}'")
    selection.ui_meta = ui_meta
    selection.save(update_fields=['ui_meta', 'updated_at'])
    return selection
