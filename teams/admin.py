from django.contrib import admin
from .models import ConnectionRequest, JoinRequest, Team, TeamMember


class TeamMemberInline(admin.TabularInline):
    model = TeamMember
    extra = 0
    raw_id_fields = ('participant',)


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ('name', 'invite_code', 'leader', 'is_public', 'created_at')
    list_filter = ('is_public', 'created_at')
    search_fields = ('name', 'invite_code', 'leader__email')
    raw_id_fields = ('leader',)
    inlines = [TeamMemberInline]


@admin.register(JoinRequest)
class JoinRequestAdmin(admin.ModelAdmin):
    list_display = ('user_email', 'team_name', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('user_email', 'team_name')


@admin.register(ConnectionRequest)
class ConnectionRequestAdmin(admin.ModelAdmin):
    list_display = ('from_email', 'to_email', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('from_email', 'to_email')
