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
            name='Event',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('slug', models.SlugField(max_length=220, unique=True)),
                ('description', models.TextField(blank=True)),
                ('start_date', models.DateTimeField(db_index=True)),
                ('end_date', models.DateTimeField(blank=True, null=True)),
                ('location', models.CharField(blank=True, max_length=255)),
                ('cover_image', models.URLField(blank=True, max_length=500)),
                ('host_type', models.CharField(choices=[('VENDOR', 'Vendor'), ('DESIGNER', 'Designer'), ('ORGANIZATION', 'Organization'), ('PLATFORM', 'Platform')], default='VENDOR', max_length=20)),
                ('host_name', models.CharField(blank=True, max_length=200)),
                ('max_attendees', models.PositiveIntegerField(blank=True, null=True)),
                ('is_public', models.BooleanField(default=True)),
                ('is_approved', models.BooleanField(db_index=True, default=False)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('published', 'Published'), ('cancelled', 'Cancelled')], default='published', max_length=20)),
                ('event_types', models.JSONField(blank=True, default=list)),
                ('weight', models.CharField(choices=[('ANCHOR', 'Anchor'), ('FLEX', 'Flex'), ('BACKFILL', 'Backfill')], default='FLEX', max_length=20)),
                ('sponsorship_tier', models.CharField(choices=[('FREE', 'Free'), ('SPONSORED', 'Sponsored'), ('PREMIUM', 'Premium')], default='FREE', max_length=20)),
                ('base_score', models.FloatField(default=0)),
                ('is_featured', models.BooleanField(default=False)),
                ('is_boosted', models.BooleanField(default=False)),
                ('is_virtual', models.BooleanField(default=False)),
                ('includes_food', models.BooleanField(default=False)),
                ('view_count', models.PositiveIntegerField(default=0)),
                ('impression_count', models.PositiveIntegerField(default=0)),
                ('click_count', models.PositiveIntegerField(default=0)),
                ('save_count', models.PositiveIntegerField(default=0)),
                ('booking_count', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_events', to=settings.AUTH_USER_MODEL)),
                ('featured_designer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='featured_events', to='parties.designerprofile')),
            ],
            options={
                'db_table': 'events',
                'ordering': ['start_date'],
                'indexes': [models.Index(fields=['status', 'start_date'], name='event_status_start_idx')],
            },
        ),
        migrations.CreateModel(
            name='EventProduct',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='event_products', to='events.event')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='event_products', to='catalog.product')),
            ],
            options={
                'db_table': 'event_products',
                'unique_together': {('event', 'product')},
            },
        ),
        migrations.AddField(
            model_name='event',
            name='products',
            field=models.ManyToManyField(blank=True, related_name='events', through='events.EventProduct', to='catalog.product'),
        ),
        migrations.CreateModel(
            name='EventRSVP',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('ATTENDING', 'Attending'), ('INTERESTED', 'Interested'), ('SEND_TO_TEAM', 'Send to Team')], default='INTERESTED', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rsvps', to='events.event')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='event_rsvps', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'event_rsvps',
                'unique_together': {('event', 'user')},
            },
        ),
    ]
