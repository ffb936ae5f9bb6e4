"""
Management command to seed product categories for every room-template slot
"""
from django.core.management.base import BaseCommand
from folio.catalog.models import Category
from folio.core.cache_signals import suspend_cache_signals
from folio.projects.room_templates import all_category_slugs


def category_name(slug):
    """'tile-backsplash' -> 'Tile Backsplash'"""
    return slug.replace('-', ' ').replace('_', ' ').title()


class Command(BaseCommand):
    help = "Adds the product categories used by the room templates"

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear all existing categories before adding new ones',
        )

    def handle(self, *args, **options):
        clear = options['clear']

        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(self.style.SUCCESS("ADDING PRODUCT CATEGORIES"))
        self.stdout.write(self.style.SUCCESS("=" * 80))

        if clear:
            self.stdout.write(self.style.WARNING("Clearing all existing categories..."))
            Category.objects.all().delete()
            self.stdout.write(self.style.SUCCESS("All categories cleared."))

        created_count = 0
        skipped_count = 0

        with suspend_cache_signals():
            for slug in all_category_slugs():
                category, created = Category.objects.get_or_create(
                    slug=slug,
                    defaults={
                        'name': category_name(slug),
                        'is_active': True,
                    }
                )

                if created:
                    created_count += 1
                    self.stdout.write(self.style.SUCCESS(f"  Created: {category.name} ({slug})"))
                else:
                    skipped_count += 1
                    self.stdout.write(self.style.WARNING(f"  Skipped (already exists): {slug}"))

        self.stdout.write(self.style.SUCCESS("\n" + "=" * 80))
        self.stdout.write(self.style.SUCCESS("SUMMARY"))
        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(f"Categories Created: {created_count}")
        self.stdout.write(f"Categories Skipped (already exist): {skipped_count}")
        self.stdout.write(f"Total Categories in Database: {Category.objects.count()}")
