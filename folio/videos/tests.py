"""
Tests for the Watch page videos
"""
import shutil
import tempfile

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework import status
from folio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import Video


class VideoAPITests(TestCase):
    """Test video list, create and detail endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.designer = TestDataFactory.create_designer()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.designer)

    def test_list_hides_others_drafts(self):
        TestDataFactory.create_video(title='Public Tour')
        TestDataFactory.create_video(title='My Draft', uploaded_by=self.designer, is_published=False)
        TestDataFactory.create_video(title='Their Draft', uploaded_by=self.admin, is_published=False)

        response = self.client.get('/api/v1/videos/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(v['title'] for v in response.data), ['My Draft', 'Public Tour'])

        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/videos/')
        self.assertEqual(len(response.data), 3)

    def test_search(self):
        TestDataFactory.create_video(title='Kitchen Walkthrough')
        TestDataFactory.create_video(title='Lighting Basics')
        response = self.client.get('/api/v1/videos/?search=kitchen')
        self.assertEqual([v['title'] for v in response.data], ['Kitchen Walkthrough'])

    def test_create_by_url(self):
        response = self.client.post('/api/v1/videos/', {
            'title': 'Loft Reveal',
            'video_url': 'https://cdn.example.com/loft.mp4',
            'tags': ['loft', ' ', 'reveal'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['uploaded_by'], self.designer.id)
        self.assertEqual(response.data['tags'], ['loft', 'reveal'])

    def test_homeowner_cannot_create(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.post('/api/v1/videos/', {
            'title': 'Nope',
            'video_url': 'https://cdn.example.com/nope.mp4',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_detail_counts_views(self):
        video = TestDataFactory.create_video()
        response = self.client.get(f'/api/v1/videos/{video.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['views'], 1)
        video.refresh_from_db()
        self.assertEqual(video.views, 1)

    def test_unpublished_detail(self):
        video = TestDataFactory.create_video(uploaded_by=self.admin, is_published=False)
        response = self.client.get(f'/api/v1/videos/{video.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_only_uploader_or_admin_edits(self):
        video = TestDataFactory.create_video(uploaded_by=self.admin)
        response = self.client.patch(f'/api/v1/videos/{video.id}/', {'title': 'Mine now'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        own = TestDataFactory.create_video(uploaded_by=self.designer)
        response = self.client.patch(f'/api/v1/videos/{own.id}/', {'is_published': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_published'])

        response = self.client.delete(f'/api/v1/videos/{own.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Video.objects.filter(pk=own.id).exists())


class VideoUploadTests(TestCase):
    """Test multipart video upload"""

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.vendor = TestDataFactory.create_vendor()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.vendor)

    def tearDown(self):
        shutil.rmtree(self.media_root, ignore_errors=True)

    def test_missing_file(self):
        response = self.client.post('/api/v1/videos/upload/', {'title': 'Empty'}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_upload_with_thumbnail(self):
        video_file = SimpleUploadedFile('demo.mp4', b'\x00\x00\x00\x18ftypmp42', content_type='video/mp4')
        thumbnail = SimpleUploadedFile('demo.jpg', b'not really a jpeg', content_type='application/octet-stream')
        with override_settings(MEDIA_ROOT=self.media_root, AZURE_STORAGE_CONNECTION_STRING=''):
            response = self.client.post('/api/v1/videos/upload/', {
                'file': video_file,
                'thumbnail': thumbnail,
                'title': 'Sofa Demo',
                'duration': '42',
            }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['title'], 'Sofa Demo')
        self.assertEqual(response.data['duration'], 42)
        self.assertIn('videos/', response.data['video_url'])
        self.assertTrue(response.data['video_url'].endswith('.mp4'))
        self.assertTrue(response.data['thumbnail_url'].endswith('.jpg'))
        self.assertEqual(response.data['uploaded_by'], self.vendor.id)

    def test_homeowner_cannot_upload(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        video_file = SimpleUploadedFile('demo.mp4', b'data', content_type='video/mp4')
        response = self.client.post('/api/v1/videos/upload/', {'file': video_file}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
