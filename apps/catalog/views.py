from django.db.models import Q

from apps.catalog.models import Product
from apps.catalog.serializers import ProductSerializer
from apps.common.views import AccountScopedViewSet


class ProductViewSet(AccountScopedViewSet):
    model = Product
    serializer_class = ProductSerializer
    audit_entity = "product"
    audit_fields = ("name", "description", "price", "image_url")

    def get_queryset(self):
        queryset = super().get_queryset()
        query = self.request.query_params.get("q")
        if query:
            query = query.strip()
            queryset = queryset.filter(Q(name__icontains=query) | Q(description__icontains=query))
        return queryset
