"""
Tests for projects: tile sizing, room templates, boards, slot/size changes,
capture wizard, payload normalisation, sorting, access, export and quotes
"""
import shutil
import tempfile

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, SimpleTestCase, override_settings
from rest_framework import status
from rest_framework.serializers import ValidationError
from folio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .board import build_room_board, dedupe_selections
from .models import Project, Selection, Quote
from .payloads import normalize_create_payload
from .room_templates import (
    get_room_template, get_room_template_by_type, template_for_room, infer_slot_key,
    infer_slot_key_from_category, all_category_slugs, ROOM_TEMPLATES
)
from .sorting import normalize_sort, sort_to_order_by
from .tile_sizing import compute_tile_size, size_from_dimensions, normalize_size


class TileSizingTests(SimpleTestCase):
    """Priority: override, featured, dimensions, keywords"""

    def test_override_wins(self):
        selection = {'product_name': 'Sectional Sofa', 'ui_meta': {'displaySize': 'S', 'featured': True}}
        self.assertEqual(compute_tile_size(selection), 'small')

    def test_unknown_override_falls_through(self):
        selection = {'product_name': 'Lamp', 'ui_meta': {'displaySize': 'huge', 'featured': True}}
        self.assertEqual(compute_tile_size(selection), 'large')

    def test_featured_is_large(self):
        self.assertEqual(compute_tile_size({'product_name': 'Vase', 'ui_meta': {'featured': True}}), 'large')

    def test_dimension_thresholds(self):
        self.assertEqual(size_from_dimensions({'widthIn': 80, 'depthIn': 50}), 'large')  # area 4000
        self.assertEqual(size_from_dimensions({'widthIn': 84, 'depthIn': 1}), 'large')
        self.assertEqual(size_from_dimensions({'widthIn': 40, 'depthIn': 30}), 'medium')  # area 1200
        self.assertEqual(size_from_dimensions({'heightIn': 48}), 'medium')
        self.assertEqual(size_from_dimensions({'widthIn': 20, 'depthIn': 20, 'heightIn': 30}), 'small')
        self.assertIsNone(size_from_dimensions(None))

    def test_dimensions_beat_keywords(self):
        selection = {'product_name': 'Sofa', 'ui_meta': {'dimensions': {'widthIn': 10, 'depthIn': 10}}}
        self.assertEqual(compute_tile_size(selection), 'small')

    def test_empty_dimensions_are_zero_not_missing(self):
        self.assertEqual(size_from_dimensions({}), 'small')
        self.assertEqual(compute_tile_size({'product_name': 'Sofa', 'ui_meta': {'dimensions': {}}}), 'small')
        self.assertEqual(compute_tile_size({'product_name': 'Sofa', 'ui_meta': {'dimensions': None}}), 'large')

    def test_keywords(self):
        self.assertEqual(compute_tile_size({'product_name': 'Oak Dining Table', 'tags': []}), 'large')
        self.assertEqual(compute_tile_size({'product_name': 'Lounge', 'tags': ['Accent Chair']}), 'medium')
        self.assertEqual(compute_tile_size({'product_name': 'Candle'}), 'small')

    def test_normalize_size(self):
        self.assertEqual(normalize_size('L'), 'large')
        self.assertEqual(normalize_size('Medium'), 'medium')
        self.assertIsNone(normalize_size('auto'))
        self.assertIsNone(normalize_size(None))


class RoomTemplateTests(SimpleTestCase):

    def test_lookup_by_type_and_name(self):
        self.assertEqual(get_room_template_by_type('kitchen'), ROOM_TEMPLATES['KITCHEN'])
        self.assertEqual(get_room_template('Master Suite'), ROOM_TEMPLATES['BEDROOM'])
        self.assertIsNone(get_room_template('Garage'))

    def test_template_for_room_falls_back_to_name(self):
        class RoomStub:
            room_type = None
            name = 'Upstairs Bath'
        self.assertEqual(template_for_room(RoomStub()), ROOM_TEMPLATES['BATH'])

    def test_category_inference(self):
        self.assertEqual(infer_slot_key_from_category('  Rugs '), 'rug')
        self.assertEqual(infer_slot_key_from_category('tile-backsplash'), 'backsplash')
        self.assertIsNone(infer_slot_key_from_category('widgets'))
        self.assertIsNone(infer_slot_key_from_category(None))

    def test_infer_slot_key_only_uses_template_slots(self):
        living = ROOM_TEMPLATES['LIVING']
        self.assertEqual(infer_slot_key({'tags': ['sofas'], 'product_name': ''}, living), 'sofa')
        # 'desks' maps to desk, which a living room does not have
        self.assertIsNone(infer_slot_key({'tags': ['desks'], 'product_name': ''}, living))

    def test_all_category_slugs_unique(self):
        slugs = all_category_slugs()
        self.assertEqual(len(slugs), len(set(slugs)))
        self.assertIn('sofas', slugs)
        self.assertIn('tile', slugs)


class PayloadTests(SimpleTestCase):

    def test_canonical_defaults(self):
        fields = normalize_create_payload({'title': 'Loft'})
        self.assertEqual(fields['stage'], 'concept')
        self.assertEqual(fields['client_type'], 'RESIDENTIAL')
        self.assertEqual(fields['project_type'], 'UNSPECIFIED')
        self.assertEqual(fields['budget_band'], 'UNSPECIFIED')

    def test_legacy_labels_map(self):
        fields = normalize_create_payload({'name': 'Smith Residence', 'client': 'commercial', 'category': 'Hospitality'})
        self.assertEqual(fields['title'], 'Smith Residence')
        self.assertEqual(fields['client_type'], 'COMMERCIAL')
        self.assertEqual(fields['project_type'], 'HOSPITALITY')

    def test_legacy_unknown_labels_use_defaults(self):
        fields = normalize_create_payload({'name': 'Cabin', 'client': 'someone', 'category': 'whatever'})
        self.assertEqual(fields['client_type'], 'RESIDENTIAL')
        self.assertEqual(fields['project_type'], 'UNSPECIFIED')

    def test_invalid_payload(self):
        with self.assertRaises(ValidationError):
            normalize_create_payload({})
        with self.assertRaises(ValidationError):
            normalize_create_payload({'title': 'X', 'stage': 'bogus'})


class SortingTests(SimpleTestCase):

    def test_unknown_sort_falls_back_to_phase(self):
        self.assertEqual(normalize_sort('nope'), 'phase')
        self.assertEqual(sort_to_order_by(None), ['stage', '-updated_at'])
        self.assertEqual(sort_to_order_by('title'), ['title'])


class RoomBoardTests(TestCase):

    def setUp(self):
        self.project = TestDataFactory.create_project()
        self.room = TestDataFactory.create_room(self.project, name='Living Room', room_type='LIVING')

    def test_selections_first_then_unfilled_placeholders(self):
        sofa = TestDataFactory.create_selection(self.project, self.room, 'Cloud Sofa', slot_key='sofa')
        rug = TestDataFactory.create_selection(self.project, self.room, 'Wool Rug', category='rugs')

        board = build_room_board(self.room, [sofa, rug])

        kinds = [item['kind'] for item in board['items']]
        self.assertEqual(kinds[:2], ['selection', 'selection'])
        self.assertEqual(board['selection_count'], 2)
        placeholder_slots = [item['slot_key'] for item in board['items'] if item['kind'] == 'placeholder']
        self.assertEqual(placeholder_slots, ['coffee-table', 'lighting', 'art', 'accent-chairs', 'storage'])
        self.assertEqual(board['items'][2]['key'], f'{self.room.id}:coffee-table')

    def test_duplicates_collapse(self):
        selection = TestDataFactory.create_selection(self.project, self.room, 'Lamp')
        other = TestDataFactory.create_selection(self.project, self.room, 'Vase')
        self.assertEqual(len(dedupe_selections([selection, other, selection])), 2)
        board = build_room_board(self.room, [selection, other, selection])
        self.assertEqual(board['selection_count'], 2)

    def test_spans_follow_columns(self):
        sofa = TestDataFactory.create_selection(self.project, self.room, 'Sectional Sofa')
        board = build_room_board(self.room, [sofa], cols=2)
        self.assertEqual(board['items'][0]['span'], {'col_span': 2, 'row_span': 30})

    def test_room_without_template_has_no_placeholders(self):
        garage = TestDataFactory.create_room(self.project, name='Garage', room_type=None)
        board = build_room_board(garage, [])
        self.assertFalse(board['has_template'])
        self.assertEqual(board['items'], [])


class ProjectAPITests(TestCase):

    def setUp(self):
        self.designer = TestDataFactory.create_designer()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.designer)

    def test_create_canonical(self):
        response = self.client.post('/api/v1/projects/', {'title': 'Loft', 'budgetBand': 'HIGH'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['budget_band'], 'HIGH')
        self.assertEqual(response.data['designer'], self.designer.id)

    def test_create_legacy(self):
        response = self.client.post('/api/v1/projects/', {
            'name': 'Hotel Lobby', 'client': 'Commercial', 'category': 'hospitality'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        project = Project.objects.get(pk=response.data['id'])
        self.assertEqual(project.client_type, 'COMMERCIAL')
        self.assertEqual(project.project_type, 'HOSPITALITY')

    def test_create_invalid(self):
        response = self.client.post('/api/v1/projects/', {'description': 'no title'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_homeowner_cannot_create(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.post('/api/v1/projects/', {'title': 'Mine'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_sorted_by_phase(self):
        TestDataFactory.create_project(self.designer, title='Late', stage='install')
        TestDataFactory.create_project(self.designer, title='Early', stage='concept')
        TestDataFactory.create_project(self.designer, title='Middle', stage='design_development')
        response = self.client.get('/api/v1/projects/?sort=phase')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['title'] for p in response.data['results']], ['Early', 'Middle', 'Late'])
        self.assertEqual(response.data['sort'], 'phase')

    def test_list_only_accessible(self):
        TestDataFactory.create_project(self.designer, title='Mine')
        TestDataFactory.create_project(title='Theirs')
        response = self.client.get('/api/v1/projects/')
        self.assertEqual([p['title'] for p in response.data['results']], ['Mine'])

    def test_limit_is_clamped(self):
        TestDataFactory.create_project(self.designer, title='One')
        TestDataFactory.create_project(self.designer, title='Two')
        for limit in ('0', '-5'):
            response = self.client.get(f'/api/v1/projects/?limit={limit}')
            self.assertEqual(response.status_code, status.HTTP_200_OK)
            self.assertEqual(response.data['page_size'], 1)
            self.assertEqual(len(response.data['results']), 1)
            self.assertEqual(response.data['total_pages'], 2)


class ProjectAccessTests(TestCase):

    def setUp(self):
        self.designer = TestDataFactory.create_designer()
        self.project = TestDataFactory.create_project(self.designer)
        self.room = TestDataFactory.create_room(self.project)
        self.client = AuthenticatedAPIClient()

    def test_stranger_denied(self):
        self.client.authenticate_user(TestDataFactory.create_designer())
        response = self.client.get(f'/api/v1/projects/{self.project.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_viewer_can_read_not_edit(self):
        viewer = TestDataFactory.create_user()
        TestDataFactory.add_participant(self.project, viewer, role='VIEWER')
        self.client.authenticate_user(viewer)
        self.assertEqual(self.client.get(f'/api/v1/projects/{self.project.id}/').status_code, status.HTTP_200_OK)
        response = self.client.patch(f'/api/v1/projects/{self.project.id}/', {'title': 'Hijack'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_only_owner_transfers_ownership(self):
        editor = TestDataFactory.create_user()
        TestDataFactory.add_participant(self.project, editor, role='EDITOR')
        self.client.authenticate_user(editor)
        url = f'/api/v1/projects/{self.project.id}/'
        response = self.client.patch(url, {'owner': editor.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.project.refresh_from_db()
        self.assertIsNone(self.project.owner_id)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Project.objects.filter(pk=self.project.id).exists())

        self.client.authenticate_user(self.designer)
        response = self.client.patch(url, {'owner': editor.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['owner'], editor.id)

    def test_owner_adds_participants(self):
        editor = TestDataFactory.create_user()
        self.client.authenticate_user(self.designer)
        url = f'/api/v1/projects/{self.project.id}/participants/'
        response = self.client.post(url, {'user': editor.id, 'role': 'EDITOR'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['side'], 'DESIGNER')

        response = self.client.post(url, {'user': editor.id, 'role': 'VIEWER'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        vendor_user = TestDataFactory.create_vendor()
        response = self.client.post(url, {'user': vendor_user.id, 'side': 'VENDOR'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        self.client.authenticate_user(editor)
        self.assertEqual(len(self.client.get(url).data), 1)
        response = self.client.post(url, {'user': vendor_user.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_has_owner_access(self):
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get(f'/api/v1/projects/{self.project.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['access']['role'], 'OWNER')

    def test_vendor_side_sees_only_own_selections(self):
        vendor_user = TestDataFactory.create_vendor()
        vendor = vendor_user.vendor_profile
        TestDataFactory.add_participant(self.project, vendor_user, role='VIEWER', side='VENDOR', vendor=vendor)
        mine = TestDataFactory.create_selection(self.project, self.room, 'Our Chair', vendor=vendor)
        other = TestDataFactory.create_selection(self.project, self.room, 'Their Lamp')

        self.client.authenticate_user(vendor_user)
        response = self.client.get(f'/api/v1/projects/{self.project.id}/selections/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s['id'] for s in response.data], [mine.id])
        self.assertEqual(self.client.get(f'/api/v1/selections/{other.id}/').status_code,
                         status.HTTP_403_FORBIDDEN)


class SelectionAPITests(TestCase):

    def setUp(self):
        self.designer = TestDataFactory.create_designer()
        self.project = TestDataFactory.create_project(self.designer)
        self.room = TestDataFactory.create_room(self.project, name='Living Room', room_type='LIVING')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.designer)

    def test_slot_conflict_and_reassign(self):
        holder = TestDataFactory.create_selection(self.project, self.room, 'Cloud Sofa', slot_key='sofa',
                                                  ui_meta={'slotKey': 'sofa'})
        challenger = TestDataFactory.create_selection(self.project, self.room, 'Velvet Sofa')

        response = self.client.patch(f'/api/v1/selections/{challenger.id}/slot/', {'slot_key': 'sofa'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['conflict']['id'], holder.id)

        response = self.client.patch(f'/api/v1/selections/{challenger.id}/slot/',
                                     {'slot_key': 'sofa', 'reassign': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['slot_key'], 'sofa')
        self.assertEqual(response.data['ui_meta']['slotKey'], 'sofa')
        holder.refresh_from_db()
        self.assertIsNone(holder.slot_key)
        self.assertNotIn('slotKey', holder.ui_meta)

    def test_unknown_slot_rejected(self):
        selection = TestDataFactory.create_selection(self.project, self.room, 'Thing')
        response = self.client.patch(f'/api/v1/selections/{selection.id}/slot/', {'slot_key': 'island'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_empty_slot_clears(self):
        selection = TestDataFactory.create_selection(self.project, self.room, 'Rug', slot_key='rug',
                                                     ui_meta={'slotKey': 'rug'})
        response = self.client.patch(f'/api/v1/selections/{selection.id}/slot/', {'slot_key': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['slot_key'])

    def test_ui_meta_cannot_claim_a_slot(self):
        holder = TestDataFactory.create_selection(self.project, self.room, 'Cloud Sofa', slot_key='sofa',
                                                  ui_meta={'slotKey': 'sofa'})
        loose = TestDataFactory.create_selection(self.project, self.room, 'Jute Rug')

        response = self.client.patch(f'/api/v1/selections/{loose.id}/',
                                     {'ui_meta': {'slotKey': 'sofa', 'featured': True}},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn('slotKey', response.data['ui_meta'])
        self.assertTrue(response.data['ui_meta']['featured'])
        self.assertIsNone(response.data['slot_key'])

        response = self.client.patch(f'/api/v1/selections/{holder.id}/', {'ui_meta': {'slotKey': 'rug'}},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['ui_meta']['slotKey'], 'sofa')
        holder.refresh_from_db()
        self.assertEqual(holder.slot_key, 'sofa')

    def test_size_override_and_auto(self):
        selection = TestDataFactory.create_selection(self.project, self.room, 'Candle')
        response = self.client.patch(f'/api/v1/selections/{selection.id}/size/', {'size': 'L'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['ui_meta']['displaySize'], 'large')
        self.assertEqual(response.data['tile_size'], 'large')

        response = self.client.patch(f'/api/v1/selections/{selection.id}/size/', {'size': 'auto'}, format='json')
        self.assertNotIn('displaySize', response.data['ui_meta'])
        self.assertEqual(response.data['tile_size'], 'small')

        response = self.client.patch(f'/api/v1/selections/{selection.id}/size/', {'size': 'XXL'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_board_endpoint(self):
        TestDataFactory.create_selection(self.project, self.room, 'Cloud Sofa', slot_key='sofa')
        response = self.client.get(f'/api/v1/projects/{self.project.id}/rooms/{self.room.id}/board/?width=700')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['cols'], 2)
        self.assertEqual(response.data['items'][0]['selection']['product_name'], 'Cloud Sofa')
        self.assertNotIn('sofa', [i['slot_key'] for i in response.data['items'] if i['kind'] == 'placeholder'])

    def test_create_selection_in_room(self):
        response = self.client.post(f'/api/v1/projects/{self.project.id}/rooms/{self.room.id}/selections/',
                                    {'product_name': 'Wool Rug', 'category': 'rugs', 'slot_key': 'rug'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['room'], self.room.id)
        self.assertEqual(response.data['slot_key'], 'rug')

    def test_room_templates(self):
        response = self.client.get('/api/v1/room-templates/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 7)
        response = self.client.get('/api/v1/room-templates/?type=kitchen')
        self.assertEqual(response.data['slots'][0]['key'], 'countertop')


class CaptureWizardTests(TestCase):

    def setUp(self):
        self.designer = TestDataFactory.create_designer()
        self.project = TestDataFactory.create_project(self.designer)
        self.room = TestDataFactory.create_room(self.project, name='Living Room', room_type='LIVING')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.designer)

    def capture(self, **extra):
        data = {'project': self.project.id, 'photo': 'https://cdn.example.com/shot.jpg'}
        data.update(extra)
        return self.client.post('/api/v1/selections/capture/', data, format='json')

    def test_full_flow(self):
        response = self.capture(gps_location={'lat': 30.2, 'lng': -97.7})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['capture_step'], 'specify')
        self.assertEqual(response.data['source'], 'camera')
        selection_id = response.data['id']

        response = self.client.patch(f'/api/v1/selections/{selection_id}/specify/',
                                     {'product_name': 'Velvet Sofa', 'category': 'sofas', 'unit_price': '1200.00'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['capture_step'], 'assign')
        self.assertEqual(response.data['phase_of_use'], 'moodboard')

        response = self.client.post(f'/api/v1/selections/{selection_id}/assign/', {'room': self.room.id},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['capture_step'], 'complete')
        self.assertEqual(response.data['slot_key'], 'sofa')

    def test_room_known_skips_assign(self):
        response = self.capture(room=self.room.id)
        selection_id = response.data['id']
        response = self.client.patch(f'/api/v1/selections/{selection_id}/specify/', {'product_name': 'Lamp'},
                                     format='json')
        self.assertEqual(response.data['capture_step'], 'complete')

    def test_back_transitions(self):
        selection_id = self.capture().data['id']
        self.client.patch(f'/api/v1/selections/{selection_id}/specify/', {'product_name': 'Lamp'}, format='json')

        response = self.client.post(f'/api/v1/selections/{selection_id}/back/')
        self.assertEqual(response.data['capture_step'], 'specify')
        response = self.client.post(f'/api/v1/selections/{selection_id}/back/')
        self.assertEqual(response.data['capture_step'], 'capture')
        response = self.client.post(f'/api/v1/selections/{selection_id}/back/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_illegal_transition(self):
        selection_id = self.capture().data['id']
        response = self.client.post(f'/api/v1/selections/{selection_id}/assign/', {'room': self.room.id},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Selection.objects.get(pk=selection_id).capture_step, 'specify')

    def test_assign_room_from_other_project(self):
        selection_id = self.capture().data['id']
        self.client.patch(f'/api/v1/selections/{selection_id}/specify/', {'product_name': 'Lamp'}, format='json')
        other_room = TestDataFactory.create_room(TestDataFactory.create_project(self.designer))
        response = self.client.post(f'/api/v1/selections/{selection_id}/assign/', {'room': other_room.id},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_photo_required(self):
        response = self.client.post('/api/v1/selections/capture/', {'project': self.project.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ExportAndImageTests(TestCase):

    def setUp(self):
        self.designer = TestDataFactory.create_designer()
        self.project = TestDataFactory.create_project(self.designer, title='Loft Remodel')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.designer)

    def test_export_csv(self):
        living = TestDataFactory.create_room(self.project, name='Living Room')
        TestDataFactory.create_room(self.project, name='Empty Den', room_type=None)
        selection = TestDataFactory.create_selection(self.project, living, 'Sofa', notes='Navy velvet')

        response = self.client.get(f'/api/v1/projects/{self.project.id}/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertIn('loft-remodel-spec-sheet.csv', response['Content-Disposition'])

        lines = response.content.decode().strip().splitlines()
        self.assertEqual(lines[0], 'Project,Room,Selection ID,Photo URL,Notes,Vendor ID,Created Date')
        self.assertTrue(lines[1].startswith(f'Loft Remodel,Living Room,{selection.id},'))
        self.assertIn('Navy velvet', lines[1])
        self.assertEqual(lines[2], 'Loft Remodel,Empty Den,,,,,')

    def test_image_tag_bounds(self):
        image = TestDataFactory.create_project_image(self.project)
        product = TestDataFactory.create_product()
        url = f'/api/v1/projects/{self.project.id}/images/{image.id}/tags/'

        response = self.client.post(url, {'product': product.id, 'x': '150', 'y': '20'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {'product': product.id, 'x': '42.5', 'y': '20'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(self.client.get(url).data), 1)

    def test_add_image_by_url(self):
        response = self.client.post(f'/api/v1/projects/{self.project.id}/images/',
                                    {'url': 'https://cdn.example.com/room.jpg', 'room_label': 'Kitchen'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['room_label'], 'Kitchen')


class QuoteTests(TestCase):
    """Vendor quotes: versions, visibility and status changes"""

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.designer = TestDataFactory.create_designer()
        self.project = TestDataFactory.create_project(self.designer)
        self.vendor_user = TestDataFactory.create_vendor(company_name='Oak & Iron')
        self.vendor = self.vendor_user.vendor_profile
        TestDataFactory.add_participant(self.project, self.vendor_user, role='VIEWER', side='VENDOR',
                                        vendor=self.vendor)
        self.url = f'/api/v1/projects/{self.project.id}/quotes/'
        self.client = AuthenticatedAPIClient()

    def tearDown(self):
        shutil.rmtree(self.media_root, ignore_errors=True)

    def status_url(self, quote_id):
        return f'{self.url}{quote_id}/status/'

    def test_vendor_attaches_and_revises(self):
        self.client.authenticate_user(self.vendor_user)
        response = self.client.post(self.url, {'total_cents': 125000, 'currency': 'usd', 'lead_time_days': 21,
                                               'terms_short': '50% deposit'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['version'], 1)
        self.assertEqual(response.data['status'], 'DRAFT')
        self.assertEqual(response.data['currency'], 'USD')
        self.assertEqual(response.data['vendor'], self.vendor.id)
        self.assertEqual(response.data['vendor_name'], 'Oak & Iron')
        first_id = response.data['id']

        response = self.client.post(self.url, {'total_cents': 118000, 'supersedes': first_id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['version'], 2)

        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['quotes']), 1)
        self.assertEqual([q['version'] for q in response.data['quotes'][0]], [2, 1])

    def test_only_vendor_side_attaches(self):
        self.client.authenticate_user(self.designer)
        response = self.client.post(self.url, {'total_cents': 5000}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(TestDataFactory.create_vendor())
        response = self.client.post(self.url, {'total_cents': 5000}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Quote.objects.exists())

    def test_cannot_revise_another_vendors_quote(self):
        rival_user = TestDataFactory.create_vendor()
        TestDataFactory.add_participant(self.project, rival_user, side='VENDOR', vendor=rival_user.vendor_profile)
        theirs = TestDataFactory.create_quote(self.project, rival_user.vendor_profile)

        self.client.authenticate_user(self.vendor_user)
        response = self.client.post(self.url, {'supersedes': theirs.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.client.get(self.url).data['quotes'], [])

    def test_designer_does_not_see_drafts(self):
        TestDataFactory.create_quote(self.project, self.vendor, status='DRAFT')
        sent = TestDataFactory.create_quote(self.project, self.vendor, status='SENT')
        self.client.authenticate_user(self.designer)
        response = self.client.get(self.url)
        self.assertEqual([chain[0]['id'] for chain in response.data['quotes']], [sent.id])

    def test_status_flow(self):
        quote = TestDataFactory.create_quote(self.project, self.vendor, status='DRAFT')

        self.client.authenticate_user(self.designer)
        response = self.client.patch(self.status_url(quote.id), {'status': 'accepted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.client.authenticate_user(self.vendor_user)
        response = self.client.patch(self.status_url(quote.id), {'status': 'sent'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'SENT')
        response = self.client.patch(self.status_url(quote.id), {'status': 'ACCEPTED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.patch(self.status_url(quote.id), {'status': 'PAID'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        viewer = TestDataFactory.create_user()
        TestDataFactory.add_participant(self.project, viewer, role='VIEWER')
        self.client.authenticate_user(viewer)
        response = self.client.patch(self.status_url(quote.id), {'status': 'ACCEPTED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.designer)
        response = self.client.patch(self.status_url(quote.id), {'status': 'ACCEPTED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        quote.refresh_from_db()
        self.assertEqual(quote.status, 'ACCEPTED')
        response = self.client.patch(self.status_url(quote.id), {'status': 'REJECTED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_upload_quote_file(self):
        self.client.authenticate_user(self.vendor_user)
        document = SimpleUploadedFile('quote.pdf', b'%PDF-1.4 quote', content_type='application/pdf')
        with override_settings(MEDIA_ROOT=self.media_root, AZURE_STORAGE_CONNECTION_STRING=''):
            response = self.client.post(self.url, {
                'file': document,
                'total_cents': '99000',
                'payload': '{"lines": [{"sku": "OAK-1", "qty": 2}]}',
            }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('quotes/', response.data['file_url'])
        self.assertEqual(response.data['file_name'], 'quote.pdf')
        self.assertEqual(response.data['payload']['lines'][0]['qty'], 2)
