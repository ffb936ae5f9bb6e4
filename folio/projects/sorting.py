"""Project list sort keys and their ORM ordering"""
from django.db.models import Case, When, IntegerField

DEFAULT_SORT = 'phase'

SORT_ORDERING = {
    'phase': ['stage', '-updated_at'],
    'updated_at': ['-updated_at', 'title'],
    'created_at': ['-created_at', 'title'],
    'budget_band': ['budget_band', '-updated_at'],
    'project_type': ['project_type', '-updated_at'],
    'client_type': ['client_type', '-updated_at'],
    'region_state': ['region_state', 'city', '-updated_at'],
    'city': ['city', '-updated_at'],
    'title': ['title'],
}

SORT_OPTIONS = [
    {'key': 'phase', 'label': 'Project Phase'},
    {'key': 'updated_at', 'label': 'Last Updated'},
    {'key': 'created_at', 'label': 'Date Created'},
    {'key': 'title', 'label': 'Project Name'},
    {'key': 'budget_band', 'label': 'Budget Range'},
    {'key': 'project_type', 'label': 'Project Type'},
    {'key': 'client_type', 'label': 'Client Type'},
    {'key': 'region_state', 'label': 'Region/State'},
    {'key': 'city', 'label': 'City'},
]

# Workflow order of stages, used by the phase sort
STAGE_ORDER = ['concept', 'schematic', 'design_development', 'cd_pre_spec', 'spec_locked', 'in_procurement', 'install']


def normalize_sort(value):
    return value if value in SORT_ORDERING else DEFAULT_SORT


def sort_to_order_by(value):
    return list(SORT_ORDERING[normalize_sort(value)])


def sort_projects(queryset, value):
    """Apply a sort key; phase follows workflow order rather than the alphabet"""
    key = normalize_sort(value)
    if key == 'phase':
        stage_rank = Case(
            *[When(stage=stage, then=index) for index, stage in enumerate(STAGE_ORDER)],
            output_field=IntegerField(),
        )
        return queryset.annotate(stage_rank=stage_rank).order_by('stage_rank', '-updated_at')
    return queryset.order_by(*sort_to_order_by(key))
