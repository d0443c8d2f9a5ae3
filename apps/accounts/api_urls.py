from django.urls import path
from .api import PatientDirectoryView, WhoAmIView

app_name = "accounts_api"

urlpatterns = [
    path("accounts/whoami/", WhoAmIView.as_view(), name="whoami"),
    path("users/patients/", PatientDirectoryView.as_view(), name="patients"),
]
