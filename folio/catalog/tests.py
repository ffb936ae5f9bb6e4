"""
Tests for catalog: categories, product approval workflow, filters, engagement and trending
"""
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from folio.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class CategoryTests(TestCase):
    """Test category endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_category_slugifies_name(self):
        response = self.client.post('/api/v1/categories/', {'name': 'Accent Chairs'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['slug'], 'accent-chairs')

    def test_duplicate_slug(self):
        TestDataFactory.create_category(name='Rugs', slug='rugs')
        response = self.client.post('/api/v1/categories/', {'name': 'Rugs', 'slug': 'rugs'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_non_admin_cannot_create(self):
        self.client.authenticate_user(TestDataFactory.create_vendor())
        response = self.client.post('/api/v1/categories/', {'name': 'Sofas'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get('/api/v1/categories/').status_code, status.HTTP_200_OK)


class ProductWorkflowTests(TestCase):
    """Products enter as pending (vendors, designers) and go live on approval"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.vendor_user = TestDataFactory.create_vendor(company_name='Loom & Co')
        self.designer = TestDataFactory.create_designer()
        self.client = AuthenticatedAPIClient()

    def test_vendor_product_is_pending(self):
        self.client.authenticate_user(self.vendor_user)
        response = self.client.post('/api/v1/products/', {'name': 'Wool Rug', 'price': '899.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['vendor_name'], 'Loom & Co')

    def test_designer_tags_product(self):
        self.client.authenticate_user(self.designer)
        response = self.client.post('/api/v1/products/', {'name': 'Found Lamp', 'brand': 'Flos'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['tagged_by'], self.designer.id)

    def test_admin_product_is_approved(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/products/', {'name': 'House Sofa'}, format='json')
        self.assertEqual(response.data['status'], 'approved')

    def test_homeowner_cannot_create(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.post('/api/v1/products/', {'name': 'Nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_negative_price_rejected(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/products/', {'name': 'Bad', 'price': '-1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_pending_hidden_from_others(self):
        pending = TestDataFactory.create_product(name='Secret', vendor=self.vendor_user.vendor_profile,
                                                 status='pending')
        TestDataFactory.create_product(name='Public')

        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/products/')
        self.assertEqual([p['name'] for p in response.data['results']], ['Public'])
        self.assertEqual(self.client.get(f'/api/v1/products/{pending.id}/').status_code,
                         status.HTTP_404_NOT_FOUND)

        self.client.authenticate_user(self.vendor_user)
        response = self.client.get('/api/v1/products/?mine=true')
        self.assertEqual([p['name'] for p in response.data['results']], ['Secret'])

    def test_approve_and_reject(self):
        first = TestDataFactory.create_product(name='First', status='pending')
        second = TestDataFactory.create_product(name='Second', status='pending')

        self.client.authenticate_user(self.vendor_user)
        self.assertEqual(self.client.post(f'/api/v1/products/{first.id}/approve/').status_code,
                         status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/products/pending/')
        self.assertEqual(response.data['total_pending'], 2)

        response = self.client.post(f'/api/v1/products/{first.id}/approve/')
        self.assertEqual(response.data['status'], 'approved')
        response = self.client.post(f'/api/v1/products/{second.id}/reject/', {'reason': 'Blurry photo'},
                                    format='json')
        self.assertEqual(response.data['status'], 'rejected')
        self.assertEqual(response.data['rejection_reason'], 'Blurry photo')
        self.assertEqual(self.client.get('/api/v1/products/pending/').data['total_pending'], 0)

    def test_vendor_edits_only_own(self):
        own = TestDataFactory.create_product(name='Own', vendor=self.vendor_user.vendor_profile)
        other = TestDataFactory.create_product(name='Other', vendor=TestDataFactory.create_vendor().vendor_profile)
        self.client.authenticate_user(self.vendor_user)
        response = self.client.patch(f'/api/v1/products/{own.id}/', {'price': '10.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.patch(f'/api/v1/products/{other.id}/', {'price': '10.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ProductFilterTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())
        rugs = TestDataFactory.create_category(name='Rugs', slug='rugs')
        TestDataFactory.create_product(name='Blue Wool Rug', category=rugs, price=Decimal('300.00'))
        TestDataFactory.create_product(name='Red Wool Rug', category=rugs, price=Decimal('900.00'))
        TestDataFactory.create_product(name='Oak Table', price=Decimal('1200.00'), tags=['walnut', 'dining'])

    def names(self, query):
        response = self.client.get(f'/api/v1/products/{query}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return sorted(p['name'] for p in response.data['results'])

    def test_category_slug(self):
        self.assertEqual(self.names('?category=rugs'), ['Blue Wool Rug', 'Red Wool Rug'])

    def test_multi_word_search(self):
        self.assertEqual(self.names('?search=rug+blue'), ['Blue Wool Rug'])

    def test_price_range(self):
        self.assertEqual(self.names('?min_price=500&max_price=1000'), ['Red Wool Rug'])

    def test_tag(self):
        self.assertEqual(self.names('?tag=dining'), ['Oak Table'])


class EngagementTests(TestCase):

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_engage_counts(self):
        product = TestDataFactory.create_product()
        response = self.client.post(f'/api/v1/products/{product.id}/engage/', {'action': 'like'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['like_count'], 1)

        response = self.client.post(f'/api/v1/products/{product.id}/engage/', {'action': 'poke'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_engage_pending_product(self):
        product = TestDataFactory.create_product(status='pending')
        response = self.client.post(f'/api/v1/products/{product.id}/engage/', {'action': 'view'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_trending_ranks_engagement(self):
        quiet = TestDataFactory.create_product(name='Quiet')
        loved = TestDataFactory.create_product(name='Loved', like_count=10, save_count=4)
        TestDataFactory.create_product(name='Hidden', status='rejected', like_count=50)

        response = self.client.get('/api/v1/products/trending/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['id'] for p in response.data], [loved.id, quiet.id])
        self.assertGreater(response.data[0]['trending_score'], response.data[1]['trending_score'])
