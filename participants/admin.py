from django.contrib import admin
from .models import Participant

@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'gender', 'created_at')
    list_filter = ('gender', 'created_at')
    search_fields = ('name', 'email')
