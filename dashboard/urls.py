from django.urls import path

from .views import (
    BroadcastView,
    ParticipantExportView,
    ParticipantListView,
    TeamExportView,
    TeamListView,
)

urlpatterns = [
    path("participants/", ParticipantListView.as_view(), name="dashboard-participants"),
    path("teams/", TeamListView.as_view(), name="dashboard-teams"),
    path("broadcast/", BroadcastView.as_view(), name="dashboard-broadcast"),
    path("export/participants/", ParticipantExportView.as_view(), name="dashboard-export-participants"),
    path("export/teams/", TeamExportView.as_view(), name="dashboard-export-teams"),
]
