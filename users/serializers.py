from rest_framework import serializers

from core.permissions import user_is_hackathon_admin
from .models import User


class UserSerializer(serializers.ModelSerializer):
    is_hackathon_admin = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'email',
            'first_name',
            'last_name',
            'date_joined',
            'is_hackathon_admin',
        ]

    def get_is_hackathon_admin(self, obj):
        return user_is_hackathon_admin(obj)
