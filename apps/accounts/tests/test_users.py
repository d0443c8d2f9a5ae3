import pytest
from django.core.exceptions import ValidationError
from django.urls import reverse

from apps.accounts.models import User


@pytest.mark.django_db
def test_role_is_fixed_after_creation(patient):
    user = User.objects.get(pk=patient.pk)
    user.role = User.Role.DOCTOR

    with pytest.raises(ValidationError):
        user.save()
    assert User.objects.get(pk=patient.pk).role == User.Role.PATIENT


@pytest.mark.django_db
def test_other_fields_stay_editable(patient):
    user = User.objects.get(pk=patient.pk)
    user.display_name = "Alice M."
    user.save()

    assert User.objects.get(pk=patient.pk).name == "Alice M."


@pytest.mark.django_db
def test_fresh_instance_cannot_change_role_either(patient):
    patient.role = User.Role.PHARMACIST
    with pytest.raises(ValidationError):
        patient.save()


@pytest.mark.django_db
def test_patient_directory_is_for_doctors(client_for, doctor, patient, other_patient, pharmacist):
    url = reverse("accounts_api:patients")

    res = client_for(doctor).get(url)
    assert res.status_code == 200
    assert {u["id"] for u in res.json()["results"]} == {patient.pk, other_patient.pk}

    res = client_for(doctor).get(url, {"q": "alice"})
    assert [u["id"] for u in res.json()["results"]] == [patient.pk]

    assert client_for(pharmacist).get(url).status_code == 403
    assert client_for(patient).get(url).status_code == 403


@pytest.mark.django_db
@pytest.mark.parametrize("role", ["", "nurse"])
def test_user_needs_a_known_role(role):
    with pytest.raises(ValidationError):
        User.objects.create_user(username="norole", password="pass12345!", role=role)
    assert not User.objects.filter(username="norole").exists()


@pytest.mark.django_db
def test_user_without_role_argument_is_rejected():
    with pytest.raises(ValidationError):
        User.objects.create_user(username="norole", password="pass12345!")


@pytest.mark.django_db
def test_stored_role_cannot_be_cleared(patient):
    user = User.objects.get(pk=patient.pk)
    user.role = ""

    with pytest.raises(ValidationError):
        user.save()
    assert User.objects.get(pk=patient.pk).role == User.Role.PATIENT
