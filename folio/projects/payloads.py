"""
Project create payloads.

The create endpoint accepts the canonical shape
    {title, stage, projectType, clientType, budgetBand, city, regionState, description}
as well as the legacy form shape
    {name, description, client, category}
and returns canonical snake_case values ready for the Project model.
"""
from rest_framework import serializers

from .models import Project

DEFAULT_STAGE = 'concept'
DEFAULT_CLIENT_TYPE = 'RESIDENTIAL'
DEFAULT_PROJECT_TYPE = 'UNSPECIFIED'
DEFAULT_BUDGET_BAND = 'UNSPECIFIED'


def _label_map(choices):
    """Case-insensitive label -> value, plus the values themselves"""
    mapping = {}
    for value, label in choices:
        mapping[label.lower()] = value
        mapping[value.lower()] = value
    return mapping


CLIENT_BY_LABEL = _label_map(Project.CLIENT_TYPE_CHOICES)
PROJECT_TYPE_BY_LABEL = _label_map(Project.PROJECT_TYPE_CHOICES)
STAGE_BY_LABEL = _label_map(Project.STAGE_CHOICES)
BUDGET_BY_LABEL = _label_map(Project.BUDGET_BAND_CHOICES)


class CanonicalProjectSerializer(serializers.Serializer):
    title = serializers.CharField(min_length=1, max_length=200)
    stage = serializers.ChoiceField(choices=Project.STAGE_CHOICES, default=DEFAULT_STAGE)
    projectType = serializers.ChoiceField(choices=Project.PROJECT_TYPE_CHOICES, default=DEFAULT_PROJECT_TYPE)
    clientType = serializers.ChoiceField(choices=Project.CLIENT_TYPE_CHOICES, default=DEFAULT_CLIENT_TYPE)
    budgetBand = serializers.ChoiceField(choices=Project.BUDGET_BAND_CHOICES, default=DEFAULT_BUDGET_BAND)
    city = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)
    regionState = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)


class LegacyProjectSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=1, max_length=200)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)
    client = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)
    category = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)


def _to_model_fields(canonical):
    return {
        'title': canonical['title'].strip(),
        'description': canonical.get('description') or '',
        'stage': canonical['stage'],
        'project_type': canonical['projectType'],
        'client_type': canonical['clientType'],
        'budget_band': canonical['budgetBand'],
        'city': canonical.get('city') or None,
        'region_state': canonical.get('regionState') or None,
    }


def normalize_create_payload(raw):
    """
    Canonical project fields from either payload shape.

    Raises:
        serializers.ValidationError: neither shape matched (errors are the canonical ones)
    """
    if not isinstance(raw, dict):
        raise serializers.ValidationError({'non_field_errors': ['Expected a JSON object']})

    canonical = CanonicalProjectSerializer(data=raw)
    if canonical.is_valid():
        return _to_model_fields(canonical.validated_data)

    legacy = LegacyProjectSerializer(data=raw)
    if legacy.is_valid():
        data = legacy.validated_data
        client = (data.get('client') or '').strip().lower()
        category = (data.get('category') or '').strip().lower()
        candidate = {
            'title': data['name'],
            'description': data.get('description'),
            'clientType': CLIENT_BY_LABEL.get(client, DEFAULT_CLIENT_TYPE),
            'projectType': PROJECT_TYPE_BY_LABEL.get(category, DEFAULT_PROJECT_TYPE),
            'budgetBand': DEFAULT_BUDGET_BAND,
            'stage': DEFAULT_STAGE,
            'city': None,
            'regionState': None,
        }
        validated = CanonicalProjectSerializer(data=candidate)
        validated.is_valid(raise_exception=True)
        return _to_model_fields(validated.validated_data)

    raise serializers.ValidationError(canonical.errors)
