import pytest
from django.urls import reverse

from apps.audit.models import AuditEvent
from apps.medicines.models import Medicine


def _detail_url(name, rx):
    return reverse(f"prescriptions_api:prescription-{name}", args=[rx.pk])


@pytest.mark.django_db
def test_doctor_creates_prescription(client_for, doctor, patient, make_medicine):
    med = make_medicine("Amoxicillin")
    payload = {
        "patient": patient.pk,
        "medicines": [{"medicine": med.pk, "dosage": "500 mg", "frequency": "3x daily", "duration": "7 days"}],
        "notes": "Take after meals.",
    }

    res = client_for(doctor).post(reverse("prescriptions_api:prescription-list"), payload, format="json")

    assert res.status_code == 201, res.content
    body = res.json()
    assert body["status"] == "created"
    assert body["doctor"]["id"] == doctor.pk
    assert body["patient"] == {"id": patient.pk, "name": "Alice Martin", "email": "alice@example.com"}
    assert body["medicines"][0]["medicine"]["name"] == "Amoxicillin"
    assert body["medicines"][0]["dosage"] == "500 mg"
    assert set(body) == {"id", "patient", "doctor", "medicines", "notes", "status", "created_at", "updated_at"}
    assert AuditEvent.objects.filter(action="rx.create", object_id=str(body["id"]), actor=doctor).exists()


@pytest.mark.django_db
def test_create_with_no_medicines_is_400(client_for, doctor, patient):
    res = client_for(doctor).post(
        reverse("prescriptions_api:prescription-list"),
        {"patient": patient.pk, "medicines": []},
        format="json",
    )
    assert res.status_code == 400
    assert res.json()["kind"] == "validation_error"


@pytest.mark.django_db
def test_create_with_malformed_body_is_400_with_field_errors(client_for, doctor):
    res = client_for(doctor).post(
        reverse("prescriptions_api:prescription-list"),
        {"patient": "not-a-number", "medicines": []},
        format="json",
    )
    assert res.status_code == 400
    body = res.json()
    assert body["kind"] == "validation_error"
    assert "patient" in body["errors"]


@pytest.mark.django_db
def test_create_by_patient_is_403(client_for, patient, make_medicine):
    med = make_medicine()
    res = client_for(patient).post(
        reverse("prescriptions_api:prescription-list"),
        {"patient": patient.pk, "medicines": [{"medicine": med.pk, "dosage": "1", "frequency": "1", "duration": "1"}]},
        format="json",
    )
    assert res.status_code == 403
    assert res.json()["kind"] == "forbidden"


@pytest.mark.django_db
def test_create_with_unknown_medicine_is_404(client_for, doctor, patient):
    res = client_for(doctor).post(
        reverse("prescriptions_api:prescription-list"),
        {"patient": patient.pk, "medicines": [{"medicine": 999, "dosage": "1", "frequency": "1", "duration": "1"}]},
        format="json",
    )
    assert res.status_code == 404
    assert res.json()["kind"] == "not_found"


@pytest.mark.django_db
def test_full_lifecycle_over_http(client_for, pharmacist, patient, make_medicine, make_prescription):
    med = make_medicine(stock=5)
    rx = make_prescription(med)

    res = client_for(pharmacist).put(_detail_url("dispense", rx))
    assert res.status_code == 200, res.content
    assert res.json()["status"] == "dispensed"
    assert Medicine.objects.get(pk=med.pk).stock_quantity == 4

    res = client_for(patient).put(_detail_url("complete", rx))
    assert res.status_code == 200, res.content
    assert res.json()["status"] == "completed"

    actions = set(AuditEvent.objects.filter(object_id=str(rx.pk)).values_list("action", flat=True))
    assert {"rx.dispense", "rx.complete"} <= actions


@pytest.mark.django_db
def test_dispense_twice_is_400_invalid_state(client_for, pharmacist, make_medicine, make_prescription):
    rx = make_prescription(make_medicine())
    client = client_for(pharmacist)
    assert client.put(_detail_url("dispense", rx)).status_code == 200

    res = client.put(_detail_url("dispense", rx))

    assert res.status_code == 400
    assert res.json() == {"kind": "invalid_state", "detail": "Prescription already dispensed or completed."}


@pytest.mark.django_db
def test_dispense_by_doctor_is_403(client_for, doctor, make_medicine, make_prescription):
    rx = make_prescription(make_medicine())
    res = client_for(doctor).put(_detail_url("dispense", rx))
    assert res.status_code == 403


@pytest.mark.django_db
def test_dispense_missing_is_404(client_for, pharmacist):
    res = client_for(pharmacist).put(
        reverse("prescriptions_api:prescription-dispense", args=[4242])
    )
    assert res.status_code == 404
    assert res.json()["kind"] == "not_found"


@pytest.mark.django_db
def test_complete_by_other_patient_is_403(client_for, pharmacist, other_patient, make_medicine, make_prescription):
    rx = make_prescription(make_medicine())
    client_for(pharmacist).put(_detail_url("dispense", rx))

    res = client_for(other_patient).put(_detail_url("complete", rx))

    assert res.status_code == 403
    assert res.json()["kind"] == "forbidden"


@pytest.mark.django_db
def test_complete_before_dispense_is_400(client_for, patient, make_medicine, make_prescription):
    rx = make_prescription(make_medicine())
    res = client_for(patient).put(_detail_url("complete", rx))
    assert res.status_code == 400
    assert res.json()["kind"] == "invalid_state"


@pytest.mark.django_db
def test_retrieve_access(client_for, make_user, patient, other_patient, pharmacist, make_medicine, make_prescription):
    rx = make_prescription(make_medicine("Ibuprofen"))

    res = client_for(pharmacist).get(_detail_url("detail", rx))
    assert res.status_code == 200
    line = res.json()["medicines"][0]
    assert line["medicine"] == {
        "id": rx.items.get().medicine_id,
        "name": "Ibuprofen",
        "description": "Ibuprofen tablets",
        "dosage_form": "tablet",
        "strength": "500 mg",
    }
    assert AuditEvent.objects.filter(action="rx.view", actor=pharmacist).exists()

    assert client_for(patient).get(_detail_url("detail", rx)).status_code == 200
    assert client_for(other_patient).get(_detail_url("detail", rx)).status_code == 403
    assert client_for(make_user("dr_who", "doctor")).get(_detail_url("detail", rx)).status_code == 403


@pytest.mark.django_db
def test_anonymous_is_401(client_for, make_medicine, make_prescription):
    rx = make_prescription(make_medicine())
    res = client_for().get(_detail_url("detail", rx))
    assert res.status_code == 401
    assert res.json()["kind"] == "not_authenticated"


@pytest.mark.django_db
def test_list_scoped_and_filtered(client_for, patient, other_patient, pharmacist, make_medicine, make_prescription):
    med = make_medicine()
    mine = make_prescription(med)
    make_prescription(med, for_patient=other_patient)
    client_for(pharmacist).put(_detail_url("dispense", mine))

    res = client_for(patient).get(reverse("prescriptions_api:prescription-list"))
    assert res.status_code == 200
    assert [r["id"] for r in res.json()["results"]] == [mine.pk]

    res = client_for(pharmacist).get(reverse("prescriptions_api:prescription-list"), {"status": "created"})
    assert res.json()["count"] == 1


@pytest.mark.django_db
def test_pending_endpoint(client_for, pharmacist, doctor, make_medicine, make_prescription):
    rx = make_prescription(make_medicine())

    res = client_for(pharmacist).get(reverse("prescriptions_api:prescription-pending"))
    assert res.status_code == 200
    assert [r["id"] for r in res.json()["results"]] == [rx.pk]

    assert client_for(doctor).get(reverse("prescriptions_api:prescription-pending")).status_code == 403
