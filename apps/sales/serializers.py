from rest_framework import serializers

from apps.common.fields import BoundedIntegerField, MinorUnitsField
from apps.common.money import per_installment
from apps.sales.models import PaymentMethod, Sale, SaleItem
from apps.sales.services import record_sale, resolve_customer


class SaleItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = BoundedIntegerField(min_value=1)
    unit_price = MinorUnitsField()
    total_price = MinorUnitsField(required=False)


class SaleCreateSerializer(serializers.Serializer):
    customer_id = serializers.IntegerField(min_value=1)
    total_amount = MinorUnitsField(required=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    installments = BoundedIntegerField(min_value=1, default=1)
    amount_received = MinorUnitsField(required=False, allow_null=True)
    change = MinorUnitsField(required=False, allow_null=True)
    items = SaleItemInputSerializer(many=True, allow_empty=False)

    def create(self, validated_data):
        return record_sale(
            account=self.context["request"].user,
            customer_id=validated_data["customer_id"],
            items=validated_data["items"],
            payment_method=validated_data["payment_method"],
            installments=validated_data.get("installments", 1),
            amount_tendered=validated_data.get("amount_received"),
            total_amount=validated_data.get("total_amount"),
            change=validated_data.get("change"),
        )

    def to_representation(self, instance):
        data = SaleSummarySerializer(instance, context=self.context).data
        return {"sale_id": instance.id, **data}


class CustomerFieldsMixin(serializers.Serializer):
    customer_name = serializers.SerializerMethodField()
    customer_email = serializers.SerializerMethodField()
    customer_phone = serializers.SerializerMethodField()
    customer_cpf = serializers.SerializerMethodField()

    def _customer_value(self, obj, field):
        customer = resolve_customer(obj)
        return getattr(customer, field) if customer else None

    def get_customer_name(self, obj):
        return self._customer_value(obj, "name")

    def get_customer_email(self, obj):
        return self._customer_value(obj, "email")

    def get_customer_phone(self, obj):
        return self._customer_value(obj, "phone")

    def get_customer_cpf(self, obj):
        return self._customer_value(obj, "cpf")


SALE_FIELDS = [
    "id",
    "customer_id",
    "customer_name",
    "customer_email",
    "customer_phone",
    "customer_cpf",
    "total_amount",
    "payment_method",
    "installments",
    "amount_received",
    "change",
    "status",
    "created_at",
    "updated_at",
]


class SaleSummarySerializer(CustomerFieldsMixin, serializers.ModelSerializer):
    class Meta:
        model = Sale
        fields = SALE_FIELDS
        read_only_fields = fields


class SaleItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = SaleItem
        fields = ["id", "product_id", "product_name", "quantity", "unit_price", "total_price", "created_at"]
        read_only_fields = fields


class SaleDetailSerializer(CustomerFieldsMixin, serializers.ModelSerializer):
    items = SaleItemSerializer(many=True, read_only=True)
    installment_amount = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = SALE_FIELDS + ["installment_amount", "items"]
        read_only_fields = fields

    def get_installment_amount(self, obj):
        return per_installment(obj.total_amount, obj.installments)


class QuoteItemSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = BoundedIntegerField(min_value=1, default=1)


class QuoteSerializer(serializers.Serializer):
    items = QuoteItemSerializer(many=True)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.PIX)
    installments = BoundedIntegerField(min_value=1, default=1)
    amount_received = MinorUnitsField(required=False, allow_null=True)
