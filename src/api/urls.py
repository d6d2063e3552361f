"""Main API URL router for /api/v1/."""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from api.v1 import views as v1_views
from targets import views as target_views

router = DefaultRouter()
router.register(r'targets/zones', target_views.ZoneTargetViewSet, basename='zone-target')
router.register(r'targets/users', target_views.UserTargetViewSet, basename='user-target')


app_name = 'api'
urlpatterns = [
    # Targets
    path('targets/dashboard/', target_views.TargetDashboardAPIView.as_view(), name='target-dashboard'),

    # Forecast
    path('forecast/summary/', target_views.ForecastSummaryAPIView.as_view(), name='forecast-summary'),
    path('forecast/po-expected/', target_views.ForecastPoExpectedAPIView.as_view(), name='forecast-po-expected'),
    path('forecast/highlights/', target_views.ForecastHighlightsAPIView.as_view(), name='forecast-highlights'),

    path('', include(router.urls)),

    # Auth endpoints
    path('auth/token/', v1_views.TokenObtainView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', v1_views.MeView.as_view(), name='auth-me'),
]
