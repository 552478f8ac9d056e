from rest_framework import serializers

from apps.catalog.models import Product
from apps.common.fields import MinorUnitsField
from apps.common.money import to_major


class ProductSerializer(serializers.ModelSerializer):
    price = MinorUnitsField()
    price_display = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "price_display",
            "image_url",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "price_display", "created_at", "updated_at"]

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("O nome e obrigatorio.")
        return value

    def validate_description(self, value):
        return (value or "").strip()

    def get_price_display(self, obj):
        return to_major(obj.price)
