# teams/urls.py

from rest_framework.routers import SimpleRouter
from .views import JoinRequestViewSet, TeamViewSet

# SimpleRouter: the team viewset sits on the empty prefix, where
# DefaultRouter would put its API root view.
router = SimpleRouter()
router.register(r'join-requests', JoinRequestViewSet, basename='join-request')
router.register(r'', TeamViewSet, basename='team')

urlpatterns = router.urls
