from django.db import models
from folio.core.models import User


class Project(models.Model):
    """Design project owned by a designer (and optionally a homeowner client)"""
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('active', 'Active'),
        ('archived', 'Archived'),
    ]
    STAGE_CHOICES = [
        ('concept', 'Concept'),
        ('schematic', 'Schematic'),
        ('design_development', 'Design Development'),
        ('cd_pre_spec', 'CD / Pre-Spec'),
        ('spec_locked', 'Spec Locked'),
        ('in_procurement', 'In Procurement'),
        ('install', 'Install'),
    ]
    PROJECT_TYPE_CHOICES = [
        ('UNSPECIFIED', 'Unspecified'),
        ('RESIDENTIAL', 'Residential'),
        ('COMMERCIAL', 'Commercial'),
        ('HOSPITALITY', 'Hospitality'),
        ('HEALTHCARE', 'Healthcare'),
        ('EDUCATION', 'Education'),
        ('OFFICE', 'Office'),
        ('RETAIL', 'Retail'),
        ('INDUSTRIAL', 'Industrial'),
        ('OTHER', 'Other'),
    ]
    CLIENT_TYPE_CHOICES = [
        ('RESIDENTIAL', 'Residential'),
        ('COMMERCIAL', 'Commercial'),
    ]
    BUDGET_BAND_CHOICES = [
        ('UNSPECIFIED', 'Unspecified'),
        ('LOW', 'Low'),
        ('MID', 'Mid'),
        ('HIGH', 'High'),
        ('LUXURY', 'Luxury'),
    ]

    title = models.CharField(max_length=200, db_index=True)
    description = models.TextField(blank=True)
    designer = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='designed_projects')
    owner = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='owned_projects')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    stage = models.CharField(max_length=30, choices=STAGE_CHOICES, default='concept')
    project_type = models.CharField(max_length=20, choices=PROJECT_TYPE_CHOICES, default='UNSPECIFIED')
    client_type = models.CharField(max_length=20, choices=CLIENT_TYPE_CHOICES, default='RESIDENTIAL')
    budget_band = models.CharField(max_length=20, choices=BUDGET_BAND_CHOICES, default='UNSPECIFIED')
    client_name = models.CharField(max_length=200, blank=True)
    city = models.CharField(max_length=100, blank=True, null=True)
    region_state = models.CharField(max_length=100, blank=True, null=True)
    cover_image = models.URLField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'projects'
        indexes = [
            models.Index(fields=['stage', '-updated_at'], name='project_stage_idx'),
        ]


class ProjectParticipant(models.Model):
    """Someone other than the owner/designer with access to a project"""
    SIDE_CHOICES = [
        ('DESIGNER', 'Designer'),
        ('VENDOR', 'Vendor'),
    ]
    ROLE_CHOICES = [
        ('OWNER', 'Owner'),
        ('EDITOR', 'Editor'),
        ('VIEWER', 'Viewer'),
    ]

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='participants')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='project_participations')
    vendor = models.ForeignKey('parties.VendorProfile', on_delete=models.SET_NULL, null=True, blank=True, related_name='project_participations')
    side = models.CharField(max_length=20, choices=SIDE_CHOICES, default='DESIGNER')
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='VIEWER')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user} - {self.project} ({self.side}/{self.role})"

    class Meta:
        db_table = 'project_participants'
        unique_together = [['project', 'user']]


class Room(models.Model):
    TYPE_CHOICES = [
        ('KITCHEN', 'Kitchen'),
        ('BATH', 'Bath'),
        ('LIVING', 'Living'),
        ('BEDROOM', 'Bedroom'),
        ('DINING', 'Dining'),
        ('OFFICE', 'Office'),
        ('ENTRY', 'Entry'),
    ]

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='rooms')
    name = models.CharField(max_length=200)
    room_type = models.CharField(max_length=20, choices=TYPE_CHOICES, blank=True, null=True)
    paint_color_name = models.CharField(max_length=100, blank=True)
    paint_color_hex = models.CharField(max_length=7, blank=True)
    sort_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.project} / {self.name}"

    class Meta:
        db_table = 'rooms'
        ordering = ['sort_order', 'created_at']


class Selection(models.Model):
    """A product or material chosen for a project, optionally placed in a room slot"""
    SOURCE_CHOICES = [
        ('camera', 'Camera'),
        ('upload', 'Upload'),
        ('vendor', 'Vendor'),
        ('manual', 'Manual'),
    ]
    CAPTURE_STEP_CHOICES = [
        ('capture', 'Capture'),
        ('specify', 'Specify'),
        ('assign', 'Assign'),
        ('complete', 'Complete'),
    ]

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='selections')
    room = models.ForeignKey(Room, on_delete=models.SET_NULL, null=True, blank=True, related_name='selections')
    product = models.ForeignKey('catalog.Product', on_delete=models.SET_NULL, null=True, blank=True, related_name='selections')
    vendor = models.ForeignKey('parties.VendorProfile', on_delete=models.SET_NULL, null=True, blank=True, related_name='selections')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='selections')
    photo = models.URLField(max_length=500, blank=True)
    product_name = models.CharField(max_length=200, blank=True)
    vendor_name = models.CharField(max_length=200, blank=True)
    color_finish = models.CharField(max_length=200, blank=True)
    notes = models.TextField(blank=True)
    phase_of_use = models.CharField(max_length=50, default='moodboard')
    gps_location = models.JSONField(null=True, blank=True)
    source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default='manual')
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    product_url = models.URLField(max_length=500, blank=True)
    spec_sheet_url = models.URLField(max_length=500, blank=True)
    spec_sheet_name = models.CharField(max_length=255, blank=True)
    category = models.CharField(max_length=100, blank=True)
    tags = models.JSONField(default=list, blank=True)
    slot_key = models.CharField(max_length=50, blank=True, null=True)
    ui_meta = models.JSONField(default=dict, blank=True)
    capture_step = models.CharField(max_length=20, choices=CAPTURE_STEP_CHOICES, default='complete')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.product_name or f"Selection {self.pk}"

    @property
    def effective_category(self):
        """Own category, falling back to the linked product's category slug"""
        if self.category:
            return self.category
        if self.product_id and self.product.category_id:
            return self.product.category.slug
        return ''

    class Meta:
        db_table = 'selections'
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['room', 'slot_key'], name='selection_room_slot_idx'),
        ]


class ProjectImage(models.Model):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='images')
    url = models.URLField(max_length=500)
    name = models.CharField(max_length=255, blank=True)
    room_label = models.CharField(max_length=100, blank=True)
    width = models.PositiveIntegerField(null=True, blank=True)
    height = models.PositiveIntegerField(null=True, blank=True)
    uploaded_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='project_images')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name or self.url

    class Meta:
        db_table = 'project_images'
        ordering = ['created_at', 'id']


class ImageTag(models.Model):
    """Product pinned on a project image at a percentage position"""
    image = models.ForeignKey(ProjectImage, on_delete=models.CASCADE, related_name='tags')
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='image_tags')
    x = models.DecimalField(max_digits=5, decimal_places=2)
    y = models.DecimalField(max_digits=5, decimal_places=2)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='image_tags')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.product} @ ({self.x}, {self.y})"

    class Meta:
        db_table = 'image_tags'


class Quote(models.Model):
    """Versioned vendor quote attached to a project, room or selection"""
    STATUS_CHOICES = [
        ('DRAFT', 'Draft'),
        ('SENT', 'Sent'),
        ('ACCEPTED', 'Accepted'),
        ('REJECTED', 'Rejected'),
        ('EXPIRED', 'Expired'),
    ]

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='quotes')
    vendor = models.ForeignKey('parties.VendorProfile', on_delete=models.CASCADE, related_name='quotes')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='quotes')
    room = models.ForeignKey(Room, on_delete=models.SET_NULL, null=True, blank=True, related_name='quotes')
    selection = models.ForeignKey(Selection, on_delete=models.SET_NULL, null=True, blank=True, related_name='quotes')
    file_url = models.CharField(max_length=500, blank=True)
    file_name = models.CharField(max_length=255, blank=True)
    total_cents = models.PositiveIntegerField(null=True, blank=True)
    currency = models.CharField(max_length=3, default='USD')
    lead_time_days = models.PositiveIntegerField(null=True, blank=True)
    terms_short = models.CharField(max_length=500, blank=True)
    version = models.PositiveIntegerField(default=1)
    supersedes = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='superseded_by')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='DRAFT')
    expires_at = models.DateTimeField(null=True, blank=True)
    payload = models.JSONField(null=True, blank=True, help_text="Structured line items from the vendor")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Quote v{self.version} for {self.project} ({self.status})"

    @property
    def chain_id(self):
        """Id of the first quote in this version chain"""
        quote = self
        while quote.supersedes_id is not None:
            quote = quote.supersedes
        return quote.id

    class Meta:
        db_table = 'project_quotes'
        ordering = ['-version', '-created_at']
