"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from folio.core.roles import ROLE_GROUPS, ROLE_HOMEOWNER
from folio.catalog.models import Category, Product
from folio.parties.models import DesignerProfile, VendorProfile
from folio.projects.models import Project, ProjectParticipant, Room, Selection, ProjectImage, Quote
from folio.events.models import Event, EventRSVP
from folio.videos.models import Video
from datetime import timedelta
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role=ROLE_HOMEOWNER,
                    is_staff=False, is_superuser=False):
        """Create a test user with a marketplace role"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            is_staff=is_staff,
            is_superuser=is_superuser
        )
        return user

    @staticmethod
    def create_admin(username=None):
        """Create a user in the Admin group"""
        user = TestDataFactory.create_user(username=username, role='admin')
        group, _ = Group.objects.get_or_create(name=ROLE_GROUPS['admin'])
        user.groups.add(group)
        return user

    @staticmethod
    def create_designer(username=None, display_name=None):
        """Create a designer user with a designer profile"""
        user = TestDataFactory.create_user(username=username, role='designer')
        DesignerProfile.objects.create(
            user=user,
            display_name=display_name or f'Studio {TestDataFactory.random_string(4)}',
            city='Austin'
        )
        return user

    @staticmethod
    def create_vendor(username=None, company_name=None):
        """Create a vendor user with a vendor profile"""
        user = TestDataFactory.create_user(username=username, role='vendor')
        VendorProfile.objects.create(
            user=user,
            company_name=company_name or f'Vendor {TestDataFactory.random_string(6)}'
        )
        return user

    @staticmethod
    def create_category(name=None, slug=None):
        """Create a test category"""
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        if not slug:
            slug = name.lower().replace(' ', '-')
        return Category.objects.create(name=name, slug=slug)

    @staticmethod
    def create_product(name=None, vendor=None, category=None, status='approved', price=None, **kwargs):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        return Product.objects.create(
            name=name,
            vendor=vendor,
            category=category,
            status=status,
            price=price if price is not None else Decimal('499.00'),
            **kwargs
        )

    @staticmethod
    def create_project(designer=None, title=None, **kwargs):
        """Create a test project owned by a designer"""
        if designer is None:
            designer = TestDataFactory.create_designer()
        return Project.objects.create(
            title=title or f'Project {TestDataFactory.random_string(6)}',
            designer=designer,
            **kwargs
        )

    @staticmethod
    def add_participant(project, user, role='VIEWER', side='DESIGNER', vendor=None):
        return ProjectParticipant.objects.create(project=project, user=user, role=role, side=side, vendor=vendor)

    @staticmethod
    def create_room(project, name='Living Room', room_type='LIVING'):
        """Create a test room"""
        return Room.objects.create(project=project, name=name, room_type=room_type)

    @staticmethod
    def create_selection(project, room=None, product_name=None, **kwargs):
        """Create a test selection"""
        return Selection.objects.create(
            project=project,
            room=room,
            product_name=product_name or f'Item {TestDataFactory.random_string(6)}',
            **kwargs
        )

    @staticmethod
    def create_project_image(project, url='https://cdn.example.com/photo.jpg'):
        return ProjectImage.objects.create(project=project, url=url, name='photo.jpg')

    @staticmethod
    def create_quote(project, vendor, status='SENT', version=1, supersedes=None, total_cents=100000):
        return Quote.objects.create(project=project, vendor=vendor, status=status, version=version,
                                    supersedes=supersedes, total_cents=total_cents)

    @staticmethod
    def create_event(created_by=None, title=None, start_in_days=7, **kwargs):
        """Create a published, approved, public event starting in a few days"""
        title = title or f'Event {TestDataFactory.random_string(6)}'
        start = timezone.now() + timedelta(days=start_in_days)
        defaults = {
            'is_approved': True,
            'is_public': True,
            'status': 'published',
        }
        defaults.update(kwargs)
        return Event.objects.create(
            title=title,
            slug=f'{title.lower().replace(" ", "-")}-{TestDataFactory.random_string(4).lower()}',
            start_date=start,
            end_date=start + timedelta(hours=3),
            created_by=created_by,
            **defaults
        )

    @staticmethod
    def create_rsvp(event, user, status='ATTENDING'):
        return EventRSVP.objects.create(event=event, user=user, status=status)

    @staticmethod
    def create_video(uploaded_by=None, title=None, is_published=True):
        return Video.objects.create(
            title=title or f'Video {TestDataFactory.random_string(6)}',
            video_url='https://cdn.example.com/video.mp4',
            uploaded_by=uploaded_by,
            is_published=is_published
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
