"""
Camera capture wizard.

A selection captured on site moves through capture -> specify -> assign ->
complete. Each step is an ordinary request; the selection row stores where
the user is. When the room is already known, the assign step is skipped.
"""
import logging

from .board import assign_slot
from .models import Selection
from .room_templates import template_for_room, infer_slot_key, infer_slot_key_from_category

logger = logging.getLogger(__name__)

STEP_CAPTURE = 'capture'
STEP_SPECIFY = 'specify'
STEP_ASSIGN = 'assign'
STEP_COMPLETE = 'complete'

STEPS = [STEP_CAPTURE, STEP_SPECIFY, STEP_ASSIGN, STEP_COMPLETE]

PREVIOUS_STEP = {
    STEP_SPECIFY: STEP_CAPTURE,
    STEP_ASSIGN: STEP_SPECIFY,
}

DEFAULT_PHASE_OF_USE = 'moodboard'

SPECIFY_FIELDS = ('product_name', 'vendor_name', 'vendor', 'unit_price', 'quantity', 'notes',
                  'phase_of_use', 'color_finish', 'category', 'tags', 'product_url', 'product')


class CaptureStepError(Exception):
    """Requested wizard transition is not allowed from the current step"""


def _require_step(selection, *allowed):
    if selection.capture_step not in allowed:
        raise CaptureStepError(
            f"Selection {selection.pk} is at step '{selection.capture_step}', expected {' or '.join(allowed)}"
        )


def start_capture(project, user, photo, gps_location=None, room=None, source='camera'):
    """Create a selection from a photo; the next step is specify"""
    if room is not None and room.project_id != project.id:
        raise CaptureStepError('Room does not belong to this project')
    if source not in ('camera', 'upload'):
        source = 'camera'
    selection = Selection.objects.create(
        project=project,
        room=room,
        created_by=user,
        photo=photo or '',
        gps_location=gps_location or None,
        source=source,
        phase_of_use=DEFAULT_PHASE_OF_USE,
        capture_step=STEP_SPECIFY,
    )
    logger.info(f"Captured selection {selection.id} for project {project.id} (source={source})")
    return selection


def retake(selection, photo, gps_location=None):
    """Replace the photo of a selection sent back to the capture step"""
    _require_step(selection, STEP_CAPTURE)
    selection.photo = photo or ''
    if gps_location is not None:
        selection.gps_location = gps_location
    selection.capture_step = STEP_SPECIFY
    selection.save()
    return selection


def specify(selection, details):
    """
    Record product details. Product name is required; phase of use defaults
    to moodboard. Moves to assign, or straight to complete when the
    selection already has a room.
    """
    _require_step(selection, STEP_SPECIFY)
    product_name = (details.get('product_name') or '').strip()
    if not product_name:
        raise CaptureStepError('Product name is required')

    for field in SPECIFY_FIELDS:
        if field in details and details[field] is not None:
            setattr(selection, field, details[field])
    selection.product_name = product_name
    if not selection.phase_of_use:
        selection.phase_of_use = DEFAULT_PHASE_OF_USE
    if selection.vendor_id and not selection.vendor_name:
        selection.vendor_name = selection.vendor.company_name

    if selection.room_id:
        _auto_slot(selection)
        selection.capture_step = STEP_COMPLETE
    else:
        selection.capture_step = STEP_ASSIGN
    selection.save()
    return selection


def assign(selection, room, slot_key=None, reassign=False):
    """
    Place the selection in a room of its project and finish the wizard.

    An explicit slot key goes through assign_slot, so conflicts raise
    SlotConflict before anything is saved.
    """
    _require_step(selection, STEP_ASSIGN)
    if room.project_id != selection.project_id:
        raise CaptureStepError('Room does not belong to this project')

    selection.room = room
    if slot_key:
        assign_slot(selection, slot_key, reassign=reassign)
    else:
        _auto_slot(selection)
    selection.capture_step = STEP_COMPLETE
    selection.save()
    return selection


def go_back(selection):
    previous = PREVIOUS_STEP.get(selection.capture_step)
    if previous is None:
        raise CaptureStepError(f"Cannot go back from step '{selection.capture_step}'")
    selection.capture_step = previous
    selection.save(update_fields=['capture_step', 'updated_at'])
    return selection


def _auto_slot(selection):
    """Infer a free slot from tags, name or category when none is set"""
    if selection.slot_key or selection.room is None:
        return
    template = template_for_room(selection.room)
    if template is None:
        return
    slot_key = infer_slot_key(selection, template)
    if slot_key is None:
        candidate = infer_slot_key_from_category(selection.effective_category)
        if candidate in {slot.key for slot in template}:
            slot_key = candidate
    if slot_key is None:
        return
    taken = Selection.objects.filter(room=selection.room, slot_key=slot_key).exclude(pk=selection.pk).exists()
    if not taken:
        selection.slot_key = slot_key
        selection.ui_meta = {**(selection.ui_meta or {}), 'slotKey': slot_key}
