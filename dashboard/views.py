# dashboard/views.py - Organizer endpoints

import logging

from django.http import HttpResponse
from django.utils import timezone
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsHackathonAdmin
from participants.models import Participant
from participants.serializers import ParticipantSerializer
from teams import directory
from teams.models import Team
from teams.serializers import TeamSerializer
from .exports import participant_rows, team_rows, write_csv
from .tasks import broadcast_recipients, send_broadcast_email_task

logger = logging.getLogger("hackreg.dashboard")


class BroadcastSerializer(serializers.Serializer):
    subject = serializers.CharField(max_length=200)
    message = serializers.CharField()


class ParticipantListView(APIView):
    """
    GET /api/dashboard/participants/
    Every participant with their current team membership.
    """
    permission_classes = [IsAuthenticated, IsHackathonAdmin]

    def get(self, request):
        participants = Participant.objects.order_by("created_at")
        memberships = directory.index()

        data = []
        for p in participants:
            item = ParticipantSerializer(p).data
            item["team_status"] = memberships.get(p.email, directory.NO_TEAM).as_dict()
            data.append(item)

        return Response({"count": len(data), "participants": data})


class TeamListView(APIView):
    """
    GET /api/dashboard/teams/
    """
    permission_classes = [IsAuthenticated, IsHackathonAdmin]

    def get(self, request):
        teams = (
            Team.objects
            .select_related("leader")
            .prefetch_related("members__participant")
            .order_by("created_at")
        )
        data = TeamSerializer(teams, many=True).data
        return Response({"count": len(data), "teams": data})


class BroadcastView(APIView):
    """
    POST /api/dashboard/broadcast/
    Body: {"subject": "...", "message": "..."}

    Queues one BCC email to every participant.
    """
    permission_classes = [IsAuthenticated, IsHackathonAdmin]
    throttle_scope = "broadcast"

    def post(self, request):
        serializer = BroadcastSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        subject = serializer.validated_data["subject"]
        message = serializer.validated_data["message"]

        count = len(broadcast_recipients())
        if count == 0:
            return Response({"ok": True, "count": 0, "info": "No recipients"})

        send_broadcast_email_task.delay(subject, message)
        logger.info(f"Broadcast '{subject}' queued by {request.user.email} for {count} participants")

        return Response({"ok": True, "count": count, "queued": True}, status=status.HTTP_202_ACCEPTED)


class CSVExportView(APIView):
    permission_classes = [IsAuthenticated, IsHackathonAdmin]
    export_name = None

    def rows(self):
        raise NotImplementedError

    def get(self, request):
        stamp = timezone.now().strftime("%Y%m%d-%H%M")
        response = HttpResponse(
            content_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{self.export_name}_{stamp}.csv"'},
        )
        write_csv(response, self.rows())
        return response


class ParticipantExportView(CSVExportView):
    """GET /api/dashboard/export/participants/"""
    export_name = "participants"

    def rows(self):
        return participant_rows()


class TeamExportView(CSVExportView):
    """GET /api/dashboard/export/teams/"""
    export_name = "teams"

    def rows(self):
        return team_rows()
