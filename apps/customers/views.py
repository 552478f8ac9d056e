from django.db.models import Q

from apps.common.views import AccountScopedViewSet
from apps.customers.models import Customer
from apps.customers.serializers import CustomerSerializer


class CustomerViewSet(AccountScopedViewSet):
    model = Customer
    serializer_class = CustomerSerializer
    audit_entity = "customer"
    audit_fields = ("name", "email", "phone", "cpf")

    def get_queryset(self):
        queryset = super().get_queryset()
        query = self.request.query_params.get("q")
        if query:
            query = query.strip()
            queryset = queryset.filter(Q(name__icontains=query) | Q(cpf__startswith=query) | Q(email__icontains=query))
        return queryset
