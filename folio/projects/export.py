"""Spec-sheet CSV export for a project"""
import csv
import logging

from django.http import HttpResponse
from django.utils.text import slugify

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ['Project', 'Room', 'Selection ID', 'Photo URL', 'Notes', 'Vendor ID', 'Created Date']


def export_rows(project, selections_by_room):
    """
    Rows for the spec sheet, room by room.

    Args:
        project: Project instance
        selections_by_room: list of (room, [selections]) pairs; room may be None
            for selections not yet placed

    A room without selections still gets one row with empty selection columns.
    """
    rows = []
    for room, selections in selections_by_room:
        room_name = room.name if room is not None else 'Unassigned'
        if not selections:
            rows.append([project.title, room_name, '', '', '', '', ''])
            continue
        for selection in selections:
            rows.append([
                project.title,
                room_name,
                selection.id,
                selection.photo or '',
                selection.notes or '',
                selection.vendor_id or '',
                selection.created_at.date().isoformat() if selection.created_at else '',
            ])
    return rows


def export_filename(project):
    return f"{slugify(project.title) or 'project'}-spec-sheet.csv"


def build_export_response(project, selections_by_room):
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{export_filename(project)}"'

    writer = csv.writer(response)
    writer.writerow(EXPORT_COLUMNS)
    rows = export_rows(project, selections_by_room)
    writer.writerows(rows)

    logger.info(f"Exported {len(rows)} rows for project {project.id}")
    return response
