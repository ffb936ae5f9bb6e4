"""
Tests for designer and vendor profiles
"""
from django.test import TestCase
from rest_framework import status
from folio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import DesignerProfile, VendorProfile


class DesignerProfileTests(TestCase):
    """Test designer profile endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.designer = TestDataFactory.create_designer(display_name='Studio North')
        self.profile = self.designer.designer_profile
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.designer)

    def test_list_and_search(self):
        TestDataFactory.create_designer(display_name='Coastal Rooms')
        response = self.client.get('/api/v1/designers/?search=north')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([d['display_name'] for d in response.data], ['Studio North'])

    def test_admin_creates_unclaimed_profile(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/designers/', {'display_name': 'Unclaimed Studio'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['user'])

    def test_non_admin_cannot_create(self):
        response = self.client.post('/api/v1/designers/', {'display_name': 'Me Again'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_detail_counts_views(self):
        response = self.client.get(f'/api/v1/designers/{self.profile.id}/')
        self.assertEqual(response.data['views'], 1)
        self.profile.refresh_from_db()
        self.assertEqual(self.profile.views, 1)

    def test_owner_updates_profile(self):
        response = self.client.patch(f'/api/v1/designers/{self.profile.id}/', {'bio': 'Warm minimalism'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['bio'], 'Warm minimalism')

    def test_other_designer_cannot_update(self):
        self.client.authenticate_user(TestDataFactory.create_designer())
        response = self.client.patch(f'/api/v1/designers/{self.profile.id}/', {'bio': 'Hijacked'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_only_admin_deletes(self):
        response = self.client.delete(f'/api/v1/designers/{self.profile.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/designers/{self.profile.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(DesignerProfile.objects.filter(pk=self.profile.id).exists())

    def test_onboarding(self):
        project = TestDataFactory.create_project(self.designer, title='Portfolio Piece')
        TestDataFactory.create_project_image(project)

        response = self.client.get(f'/api/v1/designers/{self.profile.id}/onboarding/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['projects'][0]['title'], 'Portfolio Piece')
        self.assertEqual(len(response.data['projects'][0]['images']), 1)

        response = self.client.patch(f'/api/v1/designers/{self.profile.id}/onboarding/',
                                     {'onboarding_step': 'done'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['onboarding_complete'])


class VendorProfileTests(TestCase):
    """Test vendor profile endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.vendor_user = TestDataFactory.create_vendor(company_name='Stone Supply')
        self.vendor = self.vendor_user.vendor_profile
        self.client = AuthenticatedAPIClient()

    def test_vendor_cannot_verify_itself(self):
        self.client.authenticate_user(self.vendor_user)
        response = self.client.patch(f'/api/v1/vendors/{self.vendor.id}/',
                                     {'is_verified': True, 'description': 'Quarried marble'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_verified'])
        self.assertEqual(response.data['description'], 'Quarried marble')

    def test_admin_verifies_and_filters(self):
        TestDataFactory.create_vendor(company_name='Unverified Goods')
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/v1/vendors/{self.vendor.id}/', {'is_verified': True}, format='json')
        self.assertTrue(response.data['is_verified'])

        response = self.client.get('/api/v1/vendors/?is_verified=true')
        self.assertEqual([v['company_name'] for v in response.data], ['Stone Supply'])

    def test_product_count(self):
        TestDataFactory.create_product(vendor=self.vendor)
        TestDataFactory.create_product(vendor=self.vendor, status='pending')
        self.client.authenticate_user(self.vendor_user)
        response = self.client.get(f'/api/v1/vendors/{self.vendor.id}/')
        self.assertEqual(response.data['product_count'], 2)
        self.assertEqual(VendorProfile.objects.get(pk=self.vendor.id).views, 1)
