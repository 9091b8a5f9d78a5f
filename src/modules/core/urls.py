from django.urls import path

from modules.core.views import api_info, health_check

urlpatterns = [
    path("", api_info, name="api_info"),
    path("health", health_check, name="health_check"),
]
