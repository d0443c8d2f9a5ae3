import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from apps.medicines.models import Medicine
from apps.prescriptions import workflow

PASSWORD = "pass12345!"


@pytest.fixture
def make_user(db):
    User = get_user_model()

    def _make(username, role, **extra):
        extra.setdefault("email", f"{username}@example.com")
        return User.objects.create_user(username=username, password=PASSWORD, role=role, **extra)

    return _make


@pytest.fixture
def doctor(make_user):
    return make_user("dr_house", "doctor", display_name="Dr. House")


@pytest.fixture
def patient(make_user):
    return make_user("alice", "patient", display_name="Alice Martin")


@pytest.fixture
def other_patient(make_user):
    return make_user("bob", "patient")


@pytest.fixture
def pharmacist(make_user):
    return make_user("pharma", "pharmacist")


@pytest.fixture
def make_medicine(db):
    def _make(name="Amoxicillin", stock=5, **extra):
        defaults = {
            "description": f"{name} tablets",
            "dosage_form": "tablet",
            "strength": "500 mg",
            "manufacturer": "Acme Pharma",
        }
        defaults.update(extra)
        return Medicine.objects.create(name=name, stock_quantity=stock, **defaults)

    return _make


@pytest.fixture
def make_prescription(doctor, patient):
    def _make(*medicines, notes="", for_patient=None):
        lines = [
            {"medicine": m.pk, "dosage": "1 tablet", "frequency": "twice daily", "duration": "5 days"}
            for m in medicines
        ]
        return workflow.create_prescription(doctor, (for_patient or patient).pk, lines, notes=notes)

    return _make


@pytest.fixture
def client_for():
    def _client(user=None):
        client = APIClient()
        if user is not None:
            client.force_authenticate(user=user)
        return client

    return _client
