# teams/views.py - Team formation API

import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import HasParticipantIdentity
from . import services
from .emails import send_connection_request_email, send_join_request_email
from .serializers import (
    AvailableMemberSerializer,
    ConnectSerializer,
    ConnectionRequestSerializer,
    DiscoveryTeamSerializer,
    JoinByCodeSerializer,
    JoinRequestCreateSerializer,
    JoinRequestSerializer,
    ResolveRequestSerializer,
    TeamCreateSerializer,
    TeamDetailsSerializer,
    TeamMemberSerializer,
    TeamSerializer,
)

logger = logging.getLogger("hackreg.teams")


class TeamViewSet(viewsets.ViewSet):
    """
    Team lifecycle for the signed-in participant.

    POST   /api/teams/                     create (caller becomes leader)
    GET    /api/teams/status/              caller's team + members
    DELETE /api/teams/status/              dissolve (leader only)
    POST   /api/teams/join/                join with an invite code
    POST   /api/teams/leave/               leave (members only)
    PATCH  /api/teams/details/             edit discovery metadata (leader only)
    GET    /api/teams/discovery/teams/     public teams with open spots
    GET    /api/teams/discovery/members/   participants without a team
    POST   /api/teams/connect/             ask another participant to team up
    """
    permission_classes = [IsAuthenticated, HasParticipantIdentity]
    throttle_scope = None

    def create(self, request):
        serializer = TeamCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        name = data.pop('name')

        team = services.create_team(request.user.email, name, **data)
        return Response(
            {'ok': True, 'team': TeamSerializer(team).data},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=['get', 'delete'], url_path='status')
    def team_status(self, request):
        if request.method == 'DELETE':
            name = services.dissolve_team(request.user.email)
            return Response({'ok': True, 'forfeited': True, 'team_name': name})

        team, members = services.team_status(request.user.email)
        if team is None:
            return Response({'team': None, 'members': []})
        return Response({'team': TeamSerializer(team).data, 'members': members})

    @action(detail=False, methods=['post'], url_path='join', throttle_scope='team-join')
    def join(self, request):
        serializer = JoinByCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        team = services.join_by_code(request.user.email, serializer.validated_data['invite_code'])
        return Response({'ok': True, 'team': TeamSerializer(team).data})

    @action(detail=False, methods=['post'], url_path='leave')
    def leave(self, request):
        services.leave_team(request.user.email)
        return Response({'ok': True})

    @action(detail=False, methods=['patch'], url_path='details')
    def details(self, request):
        serializer = TeamDetailsSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        team = services.update_team_details(request.user.email, **serializer.validated_data)
        return Response({'ok': True, 'team': TeamSerializer(team).data})

    @action(detail=False, methods=['get'], url_path='discovery/teams')
    def discover_teams(self, request):
        teams = services.discoverable_teams()
        return Response({
            'success': True,
            'teams': DiscoveryTeamSerializer(teams, many=True).data,
        })

    @action(detail=False, methods=['get'], url_path='discovery/members')
    def discover_members(self, request):
        members = services.available_members()
        return Response({
            'success': True,
            'members': AvailableMemberSerializer(members, many=True).data,
        })

    @action(detail=False, methods=['post'], url_path='connect', throttle_scope='connect-request')
    def connect(self, request):
        serializer = ConnectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        connection = services.send_connection_request(
            request.user.email, serializer.validated_data['to_email']
        )

        # Notification is best effort; the request is already stored
        try:
            send_connection_request_email(connection)
        except Exception as e:
            logger.warning(f"Failed to send connection email to {connection.to_email}: {e}")

        return Response(
            {
                'success': True,
                'message': 'Connection request sent successfully. They will be notified via email.',
                'connection': ConnectionRequestSerializer(connection).data,
            },
            status=status.HTTP_201_CREATED,
        )


class JoinRequestViewSet(viewsets.ViewSet):
    """
    GET  /api/teams/join-requests/               pending requests for the caller's team (leader)
    POST /api/teams/join-requests/               {"team_id"} ask to join a team
    GET  /api/teams/join-requests/mine/          team ids the caller has pending requests for
    POST /api/teams/join-requests/<id>/resolve/  {"action": "accept" | "reject"} (leader)
    """
    permission_classes = [IsAuthenticated, HasParticipantIdentity]
    lookup_value_regex = r"\d+"
    throttle_scope = None

    def get_throttles(self):
        if self.action == 'create':
            self.throttle_scope = 'join-request'
        return super().get_throttles()

    def list(self, request):
        requests = services.pending_requests_for_leader(request.user.email)
        return Response({'requests': JoinRequestSerializer(requests, many=True).data})

    def create(self, request):
        serializer = JoinRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        join_request = services.request_to_join(serializer.validated_data['team_id'], request.user.email)

        try:
            send_join_request_email(join_request, join_request.team.leader)
        except Exception as e:
            logger.warning(f"Failed to notify leader of join request #{join_request.pk}: {e}")

        return Response(
            {
                'success': True,
                'message': 'Join request sent successfully.',
                'request': JoinRequestSerializer(join_request).data,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=['get'], url_path='mine')
    def mine(self, request):
        return Response({'team_ids': services.pending_team_ids_for_user(request.user.email)})

    @action(detail=True, methods=['post'], url_path='resolve')
    def resolve(self, request, pk=None):
        serializer = ResolveRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = services.resolve_request(request.user.email, pk, serializer.validated_data['action'])
        return Response({
            'success': True,
            'outcome': result.outcome,
            'message': result.message,
            'request': JoinRequestSerializer(result.join_request).data if result.join_request else None,
            'members': TeamMemberSerializer(result.team.members.select_related('participant'), many=True).data,
        })
