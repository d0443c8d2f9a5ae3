from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .api import MedicineViewSet

app_name = "medicines_api"

router = DefaultRouter()
router.register(r"medicines", MedicineViewSet, basename="medicine")

urlpatterns = [path("", include(router.urls))]
