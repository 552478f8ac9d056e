from django.utils import timezone
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from apps.accounts.models import User


class CurrentUserSerializer(serializers.ModelSerializer):
    name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "username", "name", "email", "role", "last_signed_in", "date_joined"]
        read_only_fields = fields

    def get_name(self, obj):
        return obj.get_full_name() or obj.username


class SignInTokenSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        self.user.last_signed_in = timezone.now()
        self.user.save(update_fields=["last_signed_in"])
        return data
