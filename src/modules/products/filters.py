import django_filters
from django.db.models import Q

from modules.products.models import Product, ProductCategory


class ProductFilter(django_filters.FilterSet):
    category = django_filters.ChoiceFilter(
        field_name="category", choices=ProductCategory.choices
    )
    isActive = django_filters.BooleanFilter(field_name="is_active")
    minPrice = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    maxPrice = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Product
        fields = ["category", "isActive", "minPrice", "maxPrice", "search"]

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(name__icontains=value) | Q(description__icontains=value)
        )
