from django.db import models
from folio.core.models import User


class Event(models.Model):
    """Industry event (launch, panel, party...) shown in the events feed"""
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('published', 'Published'),
        ('cancelled', 'Cancelled'),
    ]
    WEIGHT_CHOICES = [
        ('ANCHOR', 'Anchor'),
        ('FLEX', 'Flex'),
        ('BACKFILL', 'Backfill'),
    ]
    SPONSORSHIP_CHOICES = [
        ('FREE', 'Free'),
        ('SPONSORED', 'Sponsored'),
        ('PREMIUM', 'Premium'),
    ]
    HOST_TYPE_CHOICES = [
        ('VENDOR', 'Vendor'),
        ('DESIGNER', 'Designer'),
        ('ORGANIZATION', 'Organization'),
        ('PLATFORM', 'Platform'),
    ]
    EVENT_TYPES = ['PANEL', 'PRODUCT_REVEAL', 'HAPPY_HOUR', 'LUNCH_AND_LEARN', 'INSTALLATION', 'BOOTH', 'PARTY',
                   'MEAL', 'TOUR', 'AWARDS', 'WORKSHOP', 'KEYNOTE', 'EXHIBITION', 'OTHER']

    title = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True)
    description = models.TextField(blank=True)
    start_date = models.DateTimeField(db_index=True)
    end_date = models.DateTimeField(null=True, blank=True)
    location = models.CharField(max_length=255, blank=True)
    cover_image = models.URLField(max_length=500, blank=True)
    host_type = models.CharField(max_length=20, choices=HOST_TYPE_CHOICES, default='VENDOR')
    host_name = models.CharField(max_length=200, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_events')
    featured_designer = models.ForeignKey('parties.DesignerProfile', on_delete=models.SET_NULL, null=True, blank=True, related_name='featured_events')
    max_attendees = models.PositiveIntegerField(null=True, blank=True)
    is_public = models.BooleanField(default=True)
    is_approved = models.BooleanField(default=False, db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='published')
    event_types = models.JSONField(default=list, blank=True)
    weight = models.CharField(max_length=20, choices=WEIGHT_CHOICES, default='FLEX')
    sponsorship_tier = models.CharField(max_length=20, choices=SPONSORSHIP_CHOICES, default='FREE')
    base_score = models.FloatField(default=0)
    is_featured = models.BooleanField(default=False)
    is_boosted = models.BooleanField(default=False)
    is_virtual = models.BooleanField(default=False)
    includes_food = models.BooleanField(default=False)
    view_count = models.PositiveIntegerField(default=0)
    impression_count = models.PositiveIntegerField(default=0)
    click_count = models.PositiveIntegerField(default=0)
    save_count = models.PositiveIntegerField(default=0)
    booking_count = models.PositiveIntegerField(default=0)
    products = models.ManyToManyField('catalog.Product', through='EventProduct', related_name='events', blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    @property
    def is_sponsored(self):
        return self.sponsorship_tier != 'FREE'

    class Meta:
        db_table = 'events'
        ordering = ['start_date']
        indexes = [
            models.Index(fields=['status', 'start_date'], name='event_status_start_idx'),
        ]


class EventProduct(models.Model):
    """Product featured at an event"""
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name='event_products')
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='event_products')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'event_products'
        unique_together = [['event', 'product']]


class EventRSVP(models.Model):
    STATUS_CHOICES = [
        ('ATTENDING', 'Attending'),
        ('INTERESTED', 'Interested'),
        ('SEND_TO_TEAM', 'Send to Team'),
    ]

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name='rsvps')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='event_rsvps')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='INTERESTED')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user} -> {self.event} ({self.status})"

    class Meta:
        db_table = 'event_rsvps'
        unique_together = [['event', 'user']]
