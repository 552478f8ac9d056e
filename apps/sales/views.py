from django.http import HttpResponse
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.catalog.models import Product
from apps.common import money
from apps.common.exceptions import NotFoundError, ValidationError
from apps.common.permissions import IsAccountOwner
from apps.sales.cart import Cart
from apps.sales.models import PaymentMethod
from apps.sales.receipts import receipt_filename, render_receipt
from apps.sales.serializers import QuoteSerializer, SaleCreateSerializer, SaleDetailSerializer, SaleSummarySerializer
from apps.sales.services import get_sale_detail, list_sales, resolve_customer


class SaleViewSet(viewsets.GenericViewSet):
    permission_classes = [IsAccountOwner]
    serializer_class = SaleSummarySerializer

    def get_serializer_class(self):
        if self.action == "create":
            return SaleCreateSerializer
        if self.action == "retrieve":
            return SaleDetailSerializer
        if self.action == "quote":
            return QuoteSerializer
        return SaleSummarySerializer

    def list(self, request):
        sales = list_sales(request.user)
        page = self.paginate_queryset(sales)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def create(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data, status=201)

    def retrieve(self, request, pk=None):
        sale = get_sale_detail(request.user, pk)
        return Response(self.get_serializer(sale).data)

    @action(detail=True, methods=["get"])
    def receipt(self, request, pk=None):
        sale = get_sale_detail(request.user, pk)
        document = render_receipt(sale, resolve_customer(sale), list(sale.items.all()))
        response = HttpResponse(document, content_type="application/pdf")
        response["Content-Disposition"] = f'attachment; filename="{receipt_filename(sale.id)}"'
        return response

    @action(detail=False, methods=["post"])
    def quote(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        product_ids = {item["product_id"] for item in data["items"]}
        products = {p.id: p for p in Product.objects.filter(account=request.user, id__in=product_ids)}
        missing = product_ids - set(products)
        if missing:
            raise NotFoundError({"product_id": f"Produto(s) nao encontrado(s): {sorted(missing)}."})

        cart = Cart()
        for item in data["items"]:
            line = cart.add_item(products[item["product_id"]])
            cart.set_quantity(line.product_id, line.quantity + item["quantity"] - 1)

        method = data["payment_method"]
        installments = data["installments"] if method == PaymentMethod.CARD else 1
        total = cart.total()
        amount_received = data.get("amount_received")
        change = None
        if method == PaymentMethod.CASH and amount_received is not None:
            change = cart.change_for(amount_received)
            if change < 0:
                raise ValidationError({"amount_received": "O valor recebido e menor que o total da venda."})

        return Response(
            {
                "items": [
                    {
                        "product_id": line.product_id,
                        "name": line.name,
                        "quantity": line.quantity,
                        "unit_price": line.unit_price,
                        "total_price": line.total_price,
                    }
                    for line in cart
                ],
                "total_amount": total,
                "total_display": money.to_major(total),
                "payment_method": method,
                "installments": installments,
                "installment_amount": money.per_installment(total, installments),
                "amount_received": amount_received if method == PaymentMethod.CASH else None,
                "change": change,
            }
        )
