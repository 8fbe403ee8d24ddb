# teams/serializers.py
from rest_framework import serializers

from .models import ConnectionRequest, JoinRequest, Team, TeamMember
from .rules import MAX_TEAM_SIZE


class TeamMemberSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source='participant.email', read_only=True)
    name = serializers.CharField(source='participant.name', read_only=True)
    gender = serializers.CharField(source='participant.gender', read_only=True)

    class Meta:
        model = TeamMember
        fields = ['email', 'name', 'gender', 'role', 'joined_at']


class TeamSerializer(serializers.ModelSerializer):
    """Full team view for its own members (includes the invite code)."""
    leader_user_id = serializers.CharField(read_only=True)
    member_user_ids = serializers.ListField(child=serializers.CharField(), read_only=True)
    member_count = serializers.IntegerField(read_only=True)
    available_spots = serializers.IntegerField(read_only=True)
    is_full = serializers.BooleanField(read_only=True)
    members = TeamMemberSerializer(many=True, read_only=True)

    class Meta:
        model = Team
        fields = [
            'id', 'name', 'invite_code', 'leader_user_id', 'member_user_ids',
            'member_count', 'available_spots', 'is_full',
            'description', 'skills_needed', 'problem_statement', 'is_public',
            'members', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class DiscoveryTeamSerializer(serializers.ModelSerializer):
    """Public listing; no invite code, joining goes through a join request."""
    leader_user_id = serializers.CharField(read_only=True)
    leader_name = serializers.CharField(source='leader.name', read_only=True)
    member_count = serializers.SerializerMethodField()
    available_spots = serializers.SerializerMethodField()

    class Meta:
        model = Team
        fields = [
            'id', 'name', 'leader_user_id', 'leader_name',
            'member_count', 'available_spots',
            'description', 'skills_needed', 'problem_statement', 'created_at',
        ]

    def get_member_count(self, obj):
        count = getattr(obj, 'num_members', None)
        return obj.member_count if count is None else count

    def get_available_spots(self, obj):
        return max(0, MAX_TEAM_SIZE - self.get_member_count(obj))


class AvailableMemberSerializer(serializers.Serializer):
    """Participant without a team, with the profile bits teammates look for."""

    def to_representation(self, obj):
        data = obj.fields or {}
        return {
            'email': obj.email,
            'name': obj.name,
            'fields': {
                'phone': data.get('phone') or None,
                'department': data.get('department') or None,
                'year': data.get('year') or None,
                'skills': obj.snapshot()['skills'],
                'bio': data.get('bio') or None,
            },
        }


class JoinRequestSerializer(serializers.ModelSerializer):
    team_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = JoinRequest
        fields = [
            'id', 'team_id', 'team_name', 'user_email', 'user_name',
            'user_details', 'status', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ConnectionRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = ConnectionRequest
        fields = [
            'id', 'from_email', 'from_name', 'to_email', 'to_name',
            'from_user_details', 'status', 'created_at',
        ]
        read_only_fields = fields


# ---------- input ----------

class TeamCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, trim_whitespace=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    skills_needed = serializers.ListField(child=serializers.CharField(), required=False)
    problem_statement = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    is_public = serializers.BooleanField(required=False)


class TeamDetailsSerializer(serializers.Serializer):
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    skills_needed = serializers.ListField(child=serializers.CharField(), required=False)
    problem_statement = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    is_public = serializers.BooleanField(required=False)


class JoinByCodeSerializer(serializers.Serializer):
    invite_code = serializers.CharField(max_length=16)


class JoinRequestCreateSerializer(serializers.Serializer):
    team_id = serializers.IntegerField()


class ResolveRequestSerializer(serializers.Serializer):
    # validated by the engine so an unknown action gets its own message
    action = serializers.CharField()


class ConnectSerializer(serializers.Serializer):
    to_email = serializers.EmailField()
