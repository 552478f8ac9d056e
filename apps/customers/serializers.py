from rest_framework import serializers

from apps.customers.models import Customer, normalize_cpf


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = ["id", "name", "email", "phone", "cpf", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {
            "cpf": {"error_messages": {"unique": "Ja existe um cliente com este CPF."}},
        }

    def to_internal_value(self, data):
        if hasattr(data, "copy") and "cpf" in data:
            data = data.copy()
            data["cpf"] = normalize_cpf(data["cpf"])
        return super().to_internal_value(data)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("O nome e obrigatorio.")
        return value

    def validate_phone(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("O telefone e obrigatorio.")
        return value
