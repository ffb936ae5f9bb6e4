from django.core.management.base import BaseCommand
from django.contrib.auth.models import Group, Permission

from folio.core.roles import ROLE_GROUPS


class Command(BaseCommand):
    help = 'Create Django user groups for the marketplace roles: Admin, Designer, Vendor, Homeowner, Student'

    # (app_label, codename) pairs; a codename ending in '_' is a prefix, None is the
    # whole app and '*' is every permission
    groups_config = [
        {
            'role': 'admin',
            'description': 'Platform administrators - full access including approvals and analytics',
            'permissions': '*',
        },
        {
            'role': 'designer',
            'description': 'Designers - projects, rooms, selections and image tagging',
            'permissions': [
                ('projects', None),
                ('videos', 'add_'),
                ('videos', 'change_'),
                ('videos', 'view_'),
                ('catalog', 'view_'),
                ('events', 'view_'),
                ('parties', 'change_designerprofile'),
                ('parties', 'view_'),
            ],
        },
        {
            'role': 'vendor',
            'description': 'Vendors - own products and events, vendor analytics',
            'permissions': [
                ('catalog', 'add_product'),
                ('catalog', 'change_product'),
                ('catalog', 'view_'),
                ('events', None),
                ('parties', 'change_vendorprofile'),
                ('parties', 'view_'),
                ('projects', 'view_'),
            ],
        },
        {
            'role': 'homeowner',
            'description': 'Homeowners - browse, RSVP and follow their projects',
            'permissions': [
                ('catalog', 'view_'),
                ('events', 'view_'),
                ('events', 'add_eventrsvp'),
                ('events', 'change_eventrsvp'),
                ('projects', 'view_'),
            ],
        },
        {
            'role': 'student',
            'description': 'Students - browse and RSVP',
            'permissions': [
                ('catalog', 'view_'),
                ('events', 'view_'),
                ('events', 'add_eventrsvp'),
                ('videos', 'view_'),
            ],
        },
    ]

    def add_arguments(self, parser):
        parser.add_argument(
            '--reset-permissions',
            action='store_true',
            help='Replace existing group permissions instead of adding to them',
        )

    def handle(self, *args, **options):
        created_count = 0
        updated_count = 0

        for group_config in self.groups_config:
            name = ROLE_GROUPS[group_config['role']]
            group, created = Group.objects.get_or_create(name=name)

            if created:
                self.stdout.write(self.style.SUCCESS(f'✓ Created group: {name}'))
                created_count += 1
            else:
                self.stdout.write(f'  Group already exists: {name}')
                updated_count += 1

            permissions = self.resolve_permissions(group_config['permissions'])
            if options['reset_permissions']:
                group.permissions.set(permissions)
            else:
                group.permissions.add(*permissions)
            self.stdout.write(f'  {len(permissions)} permissions assigned to {name} group')

        self.stdout.write(self.style.SUCCESS(
            f'\nCompleted: {created_count} groups created, {updated_count} groups already existed'
        ))

    def resolve_permissions(self, spec):
        if spec == '*':
            return list(Permission.objects.all())

        permissions = []
        for app_label, codename in spec:
            queryset = Permission.objects.filter(content_type__app_label=app_label)
            if codename and codename.endswith('_'):
                queryset = queryset.filter(codename__startswith=codename)
            elif codename:
                queryset = queryset.filter(codename=codename)
            permissions.extend(queryset)
        return permissions
