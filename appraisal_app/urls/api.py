# appraisal_app/urls/api.py
from rest_framework.routers import DefaultRouter
from django.urls import path
from rest_framework_simplejwt.views import (
    TokenObtainPairView,   # POST /api/auth/login/
    TokenRefreshView,      # POST /api/auth/refresh/
)

from appraisal_app.views.scoringViewSet import ScoringViewSet

router = DefaultRouter()
# GET /api/scoring/months/ , POST /api/scoring/{recalculate,export,import}/
router.register("scoring", ScoringViewSet, basename="scoring")

urlpatterns = [
    # JWT
    path("auth/login/",   TokenObtainPairView.as_view(), name="jwt-login"),
    path("auth/refresh/", TokenRefreshView.as_view(),    name="jwt-refresh"),
    *router.urls
]
