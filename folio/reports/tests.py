"""
Tests for the admin dashboard and vendor analytics
"""
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from folio.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class DashboardTests(TestCase):
    """Test the admin dashboard summary"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_admin_only(self):
        self.client.authenticate_user(TestDataFactory.create_vendor())
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_bad_date(self):
        response = self.client.get('/api/v1/reports/dashboard/?date_from=01/02/2026')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_summary(self):
        vendor = TestDataFactory.create_vendor().vendor_profile
        TestDataFactory.create_product(vendor=vendor)
        TestDataFactory.create_product(vendor=vendor, status='pending')
        project = TestDataFactory.create_project()
        TestDataFactory.create_selection(project)
        TestDataFactory.create_event(is_approved=False)

        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        for key in ('period', 'users', 'designers', 'vendors', 'products', 'projects', 'selections',
                    'events', 'videos', 'recent_activity'):
            self.assertIn(key, response.data)
        self.assertEqual(response.data['products']['total'], 2)
        self.assertEqual(response.data['products']['pending'], 1)
        self.assertEqual(response.data['projects']['total'], 1)
        self.assertEqual(response.data['selections']['unassigned'], 1)
        self.assertEqual(response.data['events']['pending_approval'], 1)
        self.assertEqual(response.data['designers'], 1)
        self.assertEqual(response.data['users']['by_role']['vendor'], 1)

    def test_period(self):
        response = self.client.get('/api/v1/reports/dashboard/?date_from=2026-01-01&date_to=2026-01-31')
        self.assertEqual(response.data['period'], {'from': '2026-01-01', 'to': '2026-01-31'})
        self.assertEqual(response.data['projects']['new'], 0)


class VendorAnalyticsTests(TestCase):
    """Test vendor engagement analytics"""

    def setUp(self):
        cache.clear()
        self.vendor_user = TestDataFactory.create_vendor()
        self.vendor = self.vendor_user.vendor_profile
        self.client = AuthenticatedAPIClient()

    def test_vendor_sees_own_products(self):
        popular = TestDataFactory.create_product(name='Popular Lamp', vendor=self.vendor, view_count=10,
                                                 like_count=3)
        TestDataFactory.create_product(name='Draft Lamp', vendor=self.vendor, status='pending')
        TestDataFactory.create_product(name='Someone Else', view_count=99)
        project = TestDataFactory.create_project()
        TestDataFactory.create_selection(project, product=popular)

        self.client.authenticate_user(self.vendor_user)
        response = self.client.get('/api/v1/reports/vendor-analytics/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['vendor_id'], self.vendor.id)
        self.assertEqual(response.data['products']['total'], 2)
        self.assertEqual(response.data['engagement']['views'], 10)
        self.assertEqual(response.data['engagement']['likes'], 3)
        self.assertEqual(response.data['selections'], 1)
        self.assertEqual(response.data['projects_reached'], 1)
        self.assertEqual([p['name'] for p in response.data['top_products']], ['Popular Lamp'])

    def test_vendor_events(self):
        event = TestDataFactory.create_event(created_by=self.vendor_user)
        TestDataFactory.create_rsvp(event, TestDataFactory.create_user())
        TestDataFactory.create_event()

        self.client.authenticate_user(self.vendor_user)
        response = self.client.get('/api/v1/reports/vendor-analytics/')
        self.assertEqual(response.data['events'], {'total': 1, 'rsvps': 1})

    def test_vendor_without_profile(self):
        self.client.authenticate_user(TestDataFactory.create_user(role='vendor'))
        response = self.client.get('/api/v1/reports/vendor-analytics/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_other_roles_denied(self):
        self.client.authenticate_user(TestDataFactory.create_designer())
        response = self.client.get('/api/v1/reports/vendor-analytics/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_picks_vendor(self):
        TestDataFactory.create_product(vendor=self.vendor)
        TestDataFactory.create_product()
        self.client.authenticate_user(TestDataFactory.create_admin())

        response = self.client.get(f'/api/v1/reports/vendor-analytics/?vendor={self.vendor.id}')
        self.assertEqual(response.data['products']['total'], 1)

        response = self.client.get('/api/v1/reports/vendor-analytics/')
        self.assertIsNone(response.data['vendor_id'])
        self.assertEqual(response.data['products']['total'], 2)

        response = self.client.get('/api/v1/reports/vendor-analytics/?vendor=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
