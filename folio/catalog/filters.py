import django_filters
from django.db.models import Q
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Filter for Product model using django-filter"""

    # Basic search - name, brand, description, category, vendor and tags
    search = django_filters.CharFilter(method='filter_search', label='Search')

    category = django_filters.CharFilter(method='filter_category', label='Category ID or slug')
    vendor = django_filters.NumberFilter(field_name='vendor_id', lookup_expr='exact')
    status = django_filters.ChoiceFilter(choices=Product.STATUS_CHOICES)
    active = django_filters.CharFilter(method='filter_active', label='Active')
    tag = django_filters.CharFilter(method='filter_tag', label='Tag')
    min_price = django_filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price', lookup_expr='lte')
    tagged_by = django_filters.NumberFilter(field_name='tagged_by_id', lookup_expr='exact')

    class Meta:
        model = Product
        fields = ['search', 'category', 'vendor', 'status', 'active', 'tag', 'min_price', 'max_price', 'tagged_by']

    def filter_search(self, queryset, name, value):
        """
        Multi-word search: every word must appear in at least one of the
        searchable fields (in any order, as part of larger words).
        """
        if not value:
            return queryset

        words = [w for w in value.strip().split() if w]
        if not words:
            return queryset

        for word in words:
            queryset = queryset.filter(
                Q(name__icontains=word) |
                Q(brand__icontains=word) |
                Q(description__icontains=word) |
                Q(category__name__icontains=word) |
                Q(category__slug__icontains=word) |
                Q(vendor__company_name__icontains=word) |
                Q(tags__icontains=word)
            )
        return queryset.distinct()

    def filter_category(self, queryset, name, value):
        if not value:
            return queryset
        value = value.strip()
        if value.isdigit():
            return queryset.filter(category_id=int(value))
        return queryset.filter(category__slug=value.lower())

    def filter_active(self, queryset, name, value):
        if value is None or value == '':
            return queryset
        return queryset.filter(is_active=str(value).lower() in ('true', '1', 'yes'))

    def filter_tag(self, queryset, name, value):
        if not value:
            return queryset
        # Tags are a JSON list; a text match keeps this portable across SQLite and Postgres
        return queryset.filter(tags__icontains=f'"{value.strip()}')
