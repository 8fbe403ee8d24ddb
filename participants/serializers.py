from rest_framework import serializers

from .models import Participant


class ParticipantSerializer(serializers.ModelSerializer):
    user_id = serializers.CharField(read_only=True)

    class Meta:
        model = Participant
        fields = ['email', 'user_id', 'name', 'gender', 'fields', 'created_at', 'updated_at']
