from rest_framework import serializers

from apps.common.money import MAX_STORED_INT


class BoundedIntegerField(serializers.IntegerField):
    """Integer input capped at what the integer columns can store."""

    def __init__(self, **kwargs):
        kwargs.setdefault("max_value", MAX_STORED_INT)
        super().__init__(**kwargs)


class MinorUnitsField(BoundedIntegerField):
    """Money on the wire: a JSON integer of centavos, never a float."""

    default_error_messages = {
        "not_minor_units": "Informe o valor como inteiro em centavos.",
    }

    def __init__(self, **kwargs):
        kwargs.setdefault("min_value", 0)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if isinstance(data, (bool, float)):
            self.fail("not_minor_units")
        if isinstance(data, str) and "." in data.strip():
            self.fail("not_minor_units")
        return super().to_internal_value(data)
