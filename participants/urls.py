from django.urls import path

from .views import ParticipantMeView, RegistrationSchemaView

urlpatterns = [
    path("me/", ParticipantMeView.as_view(), name="participant-me"),
    path("schema/", RegistrationSchemaView.as_view(), name="registration-schema"),
]
