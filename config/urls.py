from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/users/', include('users.urls')),
    path('api/participants/', include('participants.urls')),
    path('api/teams/', include('teams.urls')),
    path('api/dashboard/', include('dashboard.urls')),
]
