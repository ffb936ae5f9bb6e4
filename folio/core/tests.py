"""
Tests for core: roles, navigation, mosaic spans, auth, search, uploads and commands
"""
import io
import shutil
import tempfile

from django.contrib.auth.models import Group
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase, SimpleTestCase, override_settings
from PIL import Image
from rest_framework import status
from folio.catalog.models import Category
from folio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from folio.projects.room_templates import all_category_slugs
from . import cache_utils
from .models import AuditLog
from .mosaic import span_for, estimate_cols, size_to_token
from .navigation import build_navigation, is_active
from .roles import get_user_role, normalize_role, role_capabilities


class RoleTests(TestCase):

    def test_normalize(self):
        self.assertEqual(normalize_role(' Designer '), 'designer')
        self.assertEqual(normalize_role('wizard'), 'guest')
        self.assertEqual(normalize_role(None), 'guest')

    def test_admin_group_wins(self):
        admin = TestDataFactory.create_admin()
        admin.role = 'homeowner'
        admin.save()
        self.assertEqual(get_user_role(admin), 'admin')

    def test_staff_without_role_is_admin(self):
        staff = TestDataFactory.create_user(is_staff=True)
        self.assertEqual(get_user_role(staff), 'admin')

    def test_capabilities(self):
        self.assertTrue(role_capabilities('vendor')['can_create_event'])
        self.assertFalse(role_capabilities('designer')['can_create_event'])
        self.assertTrue(role_capabilities('designer')['can_tag_images'])
        self.assertFalse(role_capabilities('homeowner')['can_create_project'])


class CacheUtilsTests(SimpleTestCase):

    def setUp(self):
        cache.clear()
        cache_utils._known_keys.clear()

    def test_invalidation_forgets_keys(self):
        calls = []

        @cache_utils.cached_query(cache_ttl=60, key_prefix='test_feed')
        def load(page):
            calls.append(page)
            return [page]

        load(1)
        load(1)
        load(2)
        self.assertEqual(calls, [1, 2])
        self.assertEqual(len(cache_utils._known_keys['test_feed']), 2)

        cache_utils.invalidate_cache_pattern('test_feed')
        self.assertNotIn('test_feed', cache_utils._known_keys)
        load(1)
        self.assertEqual(calls, [1, 2, 1])

    @override_settings(CACHES={'default': {'BACKEND': 'django_redis.cache.RedisCache',
                                           'LOCATION': 'redis://127.0.0.1:6379/1'}})
    def test_redis_backend_keeps_no_local_keys(self):
        key = cache_utils.make_cache_key('test_feed', 1)
        self.assertTrue(key.startswith('test_feed:'))
        self.assertEqual(cache_utils._known_keys, {})


class NavigationTests(SimpleTestCase):

    def test_designer_navigation(self):
        nav = build_navigation('designer', '/projects/12')
        labels = [item['label'] for item in nav['items']]
        self.assertEqual(labels[:5], ['Home', 'Inspire', 'Events', 'Shop', 'Community'])
        self.assertIn('Projects', labels)
        self.assertEqual(labels[-1], 'Profile')
        self.assertEqual(nav['layout'], 'simple')
        self.assertEqual(nav['admin_items'], [])
        self.assertEqual(nav['create_target']['href'], '/designer/create-project')
        active = [item['label'] for item in nav['items'] if item['active']]
        self.assertEqual(active, ['Projects'])

    def test_admin_navigation(self):
        nav = build_navigation('admin', '/admin/events/approvals')
        self.assertEqual(nav['layout'], 'main')
        self.assertEqual(len(nav['admin_items']), 6)
        self.assertEqual(nav['create_target']['label'], 'New Event')

    def test_guest_navigation(self):
        nav = build_navigation(None)
        self.assertEqual(nav['role'], 'guest')
        self.assertIsNone(nav['create_target'])
        self.assertFalse(any(item['active'] for item in nav['items']))

    def test_home_matches_only_itself(self):
        self.assertTrue(is_active('/', '/'))
        self.assertFalse(is_active('/', '/events'))
        self.assertTrue(is_active('/events', '/events/42'))


class MosaicTests(SimpleTestCase):

    def test_spans_never_exceed_columns(self):
        self.assertEqual(span_for('L', 6), {'col_span': 4, 'row_span': 34})
        self.assertEqual(span_for('L', 4), {'col_span': 3, 'row_span': 32})
        self.assertEqual(span_for('L', 1), {'col_span': 1, 'row_span': 30})
        self.assertEqual(span_for('M', 1), {'col_span': 1, 'row_span': 24})
        self.assertEqual(span_for('S', 6), {'col_span': 1, 'row_span': 18})

    def test_size_tokens(self):
        self.assertEqual(size_to_token('large'), 'L')
        self.assertEqual(size_to_token('xl'), 'S')
        self.assertEqual(size_to_token(None), 'S')

    def test_estimate_cols(self):
        self.assertEqual(estimate_cols(1440), 6)
        self.assertEqual(estimate_cols(1100), 4)
        self.assertEqual(estimate_cols('700'), 2)
        self.assertEqual(estimate_cols('narrow'), 1)


class AuthTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def register(self, **extra):
        data = {
            'username': 'newdesigner',
            'email': 'new@test.com',
            'password': 'Str0ng-Passw0rd!',
            'password_confirm': 'Str0ng-Passw0rd!',
            'role': 'designer',
        }
        data.update(extra)
        return self.client.post('/api/v1/auth/register/', data, format='json')

    def test_register(self):
        response = self.register()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['user']['effective_role'], 'designer')
        self.assertTrue(response.data['user']['can_create_project'])

    def test_register_cannot_choose_admin(self):
        response = self.register(role='admin')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_register_password_mismatch(self):
        response = self.register(password_confirm='something-else-1')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login(self):
        TestDataFactory.create_user(username='alice', password='testpass123')
        response = self.client.post('/api/v1/auth/login/', {'username': 'alice', 'password': 'testpass123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('refresh', response.data)

    def test_me_requires_auth(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me(self):
        vendor = TestDataFactory.create_vendor()
        self.client.authenticate_user(vendor)
        response = self.client.get('/api/v1/auth/me/?path=/vendor/dashboard')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['effective_role'], 'vendor')
        self.assertEqual(response.data['navigation']['layout'], 'main')

    def test_switch_role(self):
        user = TestDataFactory.create_user()
        self.client.authenticate_user(user)
        response = self.client.post('/api/v1/auth/role/', {'role': 'student'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['effective_role'], 'student')
        self.assertTrue(AuditLog.objects.filter(action='role_switch', object_id=str(user.id)).exists())

    def test_switch_to_admin_denied(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.post('/api/v1/auth/role/', {'role': 'admin'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class UserAdminTests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()

    def test_user_list_admin_only(self):
        self.client.authenticate_user(TestDataFactory.create_designer())
        self.assertEqual(self.client.get('/api/v1/users/').status_code, status.HTTP_403_FORBIDDEN)
        self.client.authenticate_user(self.admin)
        self.assertEqual(self.client.get('/api/v1/users/').status_code, status.HTTP_200_OK)

    def test_cannot_delete_self(self):
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_settings_admin_only(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/settings/', {'key': 'feed_page_size', 'value': '24'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.patch(f"/api/v1/settings/{response.data['id']}/", {'value': '48'}, format='json')
        self.assertEqual(response.data['value'], '48')

        self.client.authenticate_user(TestDataFactory.create_vendor())
        self.assertEqual(self.client.get('/api/v1/settings/').status_code, status.HTTP_403_FORBIDDEN)

    def test_audit_logs_scoped_to_user(self):
        designer = TestDataFactory.create_designer()
        self.client.authenticate_user(designer)
        self.client.post('/api/v1/projects/', {'title': 'Audited'}, format='json')
        TestDataFactory.create_project(title='Other')

        response = self.client.get('/api/v1/audit-logs/?model=Project')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([log['object_name'] for log in response.data], ['Audited'])


class SearchAndNavigationAPITests(TestCase):

    def setUp(self):
        self.designer = TestDataFactory.create_designer()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.designer)

    def test_empty_query(self):
        response = self.client.get('/api/v1/search/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['projects'], [])
        self.assertEqual(response.data['videos'], [])

    def test_search_across_types(self):
        TestDataFactory.create_project(self.designer, title='Walnut House')
        TestDataFactory.create_project(title='Walnut Loft')
        TestDataFactory.create_product(name='Walnut Console')
        TestDataFactory.create_product(name='Walnut Bench', status='pending')
        TestDataFactory.create_event(title='Walnut Week')

        response = self.client.get('/api/v1/search/?q=walnut')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['title'] for p in response.data['projects']], ['Walnut House'])
        self.assertEqual([p['name'] for p in response.data['products']], ['Walnut Console'])
        self.assertEqual([e['title'] for e in response.data['events']], ['Walnut Week'])

    def test_guest_navigation(self):
        self.client.logout()
        response = self.client.get('/api/v1/navigation/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], 'guest')


class UploadTests(TestCase):

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_designer())

    def tearDown(self):
        shutil.rmtree(self.media_root, ignore_errors=True)

    def image_file(self):
        buffer = io.BytesIO()
        Image.new('RGB', (4, 3), color='white').save(buffer, format='PNG')
        return SimpleUploadedFile('room.png', buffer.getvalue(), content_type='image/png')

    def test_missing_file(self):
        response = self.client.post('/api/v1/uploads/', {}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_image_upload(self):
        with override_settings(MEDIA_ROOT=self.media_root, AZURE_STORAGE_CONNECTION_STRING=''):
            response = self.client.post('/api/v1/uploads/', {'file': self.image_file(), 'folder': 'projects'},
                                        format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['blob_name'].startswith('projects/'))
        self.assertTrue(response.data['blob_name'].endswith('.png'))
        self.assertEqual(response.data['width'], 4)
        self.assertEqual(response.data['height'], 3)
        self.assertEqual(response.data['name'], 'room.png')


class AddCategoriesCommandTests(TestCase):

    def test_seeds_every_template_category_once(self):
        out = io.StringIO()
        call_command('add_categories', stdout=out)
        self.assertEqual(Category.objects.count(), len(all_category_slugs()))
        self.assertEqual(Category.objects.get(slug='tile-backsplash').name, 'Tile Backsplash')

        call_command('add_categories', stdout=out)
        self.assertEqual(Category.objects.count(), len(all_category_slugs()))
        self.assertIn('Categories Skipped (already exist)', out.getvalue())


class CreateRoleGroupsCommandTests(TestCase):

    def test_creates_groups_with_permissions(self):
        out = io.StringIO()
        call_command('create_role_groups', stdout=out)
        self.assertEqual(sorted(Group.objects.values_list('name', flat=True)),
                         ['Admin', 'Designer', 'Homeowner', 'Student', 'Vendor'])
        vendor = Group.objects.get(name='Vendor')
        self.assertTrue(vendor.permissions.filter(codename='add_product').exists())
        self.assertFalse(vendor.permissions.filter(codename='delete_product').exists())

        call_command('create_role_groups', stdout=out)
        self.assertIn('0 groups created, 5 groups already existed', out.getvalue())
