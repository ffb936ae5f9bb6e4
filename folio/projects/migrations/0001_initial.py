# Generated manually

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('parties', '0001_initial'),
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Project',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(db_index=True, max_length=200)),
                ('description', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('active', 'Active'), ('archived', 'Archived')], default='active', max_length=20)),
                ('stage', models.CharField(choices=[('concept', 'Concept'), ('schematic', 'Schematic'), ('design_development', 'Design Development'), ('cd_pre_spec', 'CD / Pre-Spec'), ('spec_locked', 'Spec Locked'), ('in_procurement', 'In Procurement'), ('install', 'Install')], default='concept', max_length=30)),
                ('project_type', models.CharField(choices=[('UNSPECIFIED', 'Unspecified'), ('RESIDENTIAL', 'Residential'), ('COMMERCIAL', 'Commercial'), ('HOSPITALITY', 'Hospitality'), ('HEALTHCARE', 'Healthcare'), ('EDUCATION', 'Education'), ('OFFICE', 'Office'), ('RETAIL', 'Retail'), ('INDUSTRIAL', 'Industrial'), ('OTHER', 'Other')], default='UNSPECIFIED', max_length=20)),
                ('client_type', models.CharField(choices=[('RESIDENTIAL', 'Residential'), ('COMMERCIAL', 'Commercial')], default='RESIDENTIAL', max_length=20)),
                ('budget_band', models.CharField(choices=[('UNSPECIFIED', 'Unspecified'), ('LOW', 'Low'), ('MID', 'Mid'), ('HIGH', 'High'), ('LUXURY', 'Luxury')], default='UNSPECIFIED', max_length=20)),
                ('client_name', models.CharField(blank=True, max_length=200)),
                ('city', models.CharField(blank=True, max_length=100, null=True)),
                ('region_state', models.CharField(blank=True, max_length=100, null=True)),
                ('cover_image', models.URLField(blank=True, max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('designer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='designed_projects', to=settings.AUTH_USER_MODEL)),
                ('owner', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='owned_projects', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'projects',
                'indexes': [models.Index(fields=['stage', '-updated_at'], name='project_stage_idx')],
            },
        ),
        migrations.CreateModel(
            name='ProjectParticipant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('side', models.CharField(choices=[('DESIGNER', 'Designer'), ('VENDOR', 'Vendor')], default='DESIGNER', max_length=20)),
                ('role', models.CharField(choices=[('OWNER', 'Owner'), ('EDITOR', 'Editor'), ('VIEWER', 'Viewer')], default='VIEWER', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='participants', to='projects.project')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='project_participations', to=settings.AUTH_USER_MODEL)),
                ('vendor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='project_participations', to='parties.vendorprofile')),
            ],
            options={
                'db_table': 'project_participants',
                'unique_together': {('project', 'user')},
            },
        ),
        migrations.CreateModel(
            name='Room',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('room_type', models.CharField(blank=True, choices=[('KITCHEN', 'Kitchen'), ('BATH', 'Bath'), ('LIVING', 'Living'), ('BEDROOM', 'Bedroom'), ('DINING', 'Dining'), ('OFFICE', 'Office'), ('ENTRY', 'Entry')], max_length=20, null=True)),
                ('paint_color_name', models.CharField(blank=True, max_length=100)),
                ('paint_color_hex', models.CharField(blank=True, max_length=7)),
                ('sort_order', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rooms', to='projects.project')),
            ],
            options={
                'db_table': 'rooms',
                'ordering': ['sort_order', 'created_at'],
            },
        ),
        migrations.CreateModel(
            name='Selection',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('photo', models.URLField(blank=True, max_length=500)),
                ('product_name', models.CharField(blank=True, max_length=200)),
                ('vendor_name', models.CharField(blank=True, max_length=200)),
                ('color_finish', models.CharField(blank=True, max_length=200)),
                ('notes', models.TextField(blank=True)),
                ('phase_of_use', models.CharField(default='moodboard', max_length=50)),
                ('gps_location', models.JSONField(blank=True, null=True)),
                ('source', models.CharField(choices=[('camera', 'Camera'), ('upload', 'Upload'), ('vendor', 'Vendor'), ('manual', 'Manual')], default='manual', max_length=20)),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('unit_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('product_url', models.URLField(blank=True, max_length=500)),
                ('spec_sheet_url', models.URLField(blank=True, max_length=500)),
                ('spec_sheet_name', models.CharField(blank=True, max_length=255)),
                ('category', models.CharField(blank=True, max_length=100)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('slot_key', models.CharField(blank=True, max_length=50, null=True)),
                ('ui_meta', models.JSONField(blank=True, default=dict)),
                ('capture_step', models.CharField(choices=[('capture', 'Capture'), ('specify', 'Specify'), ('assign', 'Assign'), ('complete', 'Complete')], default='complete', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='selections', to=settings.AUTH_USER_MODEL)),
                ('product', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='selections', to='catalog.product')),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='selections', to='projects.project')),
                ('room', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='selections', to='projects.room')),
                ('vendor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='selections', to='parties.vendorprofile')),
            ],
            options={
                'db_table': 'selections',
                'ordering': ['created_at', 'id'],
                'indexes': [models.Index(fields=['room', 'slot_key'], name='selection_room_slot_idx')],
            },
        ),
        migrations.CreateModel(
            name='ProjectImage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('url', models.URLField(max_length=500)),
                ('name', models.CharField(blank=True, max_length=255)),
                ('room_label', models.CharField(blank=True, max_length=100)),
                ('width', models.PositiveIntegerField(blank=True, null=True)),
                ('height', models.PositiveIntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='images', to='projects.project')),
                ('uploaded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='project_images', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'project_images',
                'ordering': ['created_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='ImageTag',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('x', models.DecimalField(decimal_places=2, max_digits=5)),
                ('y', models.DecimalField(decimal_places=2, max_digits=5)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='image_tags', to=settings.AUTH_USER_MODEL)),
                ('image', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tags', to='projects.projectimage')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='image_tags', to='catalog.product')),
            ],
            options={
                'db_table': 'image_tags',
            },
        ),
    ]
