import pytest

from apps.prescriptions import workflow
from apps.prescriptions.exceptions import ForbiddenError
from apps.prescriptions.tasks import send_prescription_email


@pytest.mark.django_db
def test_dispense_emails_patient_after_commit(
    django_capture_on_commit_callbacks, mailoutbox, pharmacist, patient, make_medicine, make_prescription
):
    rx = make_prescription(make_medicine("Amoxicillin"))

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        workflow.dispense_prescription(pharmacist, rx.pk)

    assert len(callbacks) == 1
    assert len(mailoutbox) == 1
    msg = mailoutbox[0]
    assert msg.to == [patient.email]
    assert msg.subject == f"Prescription #{rx.pk} is ready"
    assert "Amoxicillin" in msg.body
    assert "Dr. House" in msg.body


@pytest.mark.django_db
def test_failed_dispense_sends_nothing(django_capture_on_commit_callbacks, mailoutbox, doctor, make_medicine, make_prescription):
    rx = make_prescription(make_medicine())

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        with pytest.raises(ForbiddenError):
            workflow.dispense_prescription(doctor, rx.pk)

    assert callbacks == []
    assert mailoutbox == []


@pytest.mark.django_db
def test_patient_without_email_is_skipped(mailoutbox, make_user, make_medicine, make_prescription):
    silent = make_user("carol", "patient", email="")
    rx = make_prescription(make_medicine(), for_patient=silent)

    result = send_prescription_email(rx.pk)

    assert result["skipped"] is True
    assert mailoutbox == []


@pytest.mark.django_db
def test_notifications_can_be_disabled(settings, mailoutbox, make_medicine, make_prescription):
    settings.NOTIFY_PRESCRIPTIONS = False
    rx = make_prescription(make_medicine())

    assert send_prescription_email(rx.pk) == {"skipped": True, "reason": "notifications disabled"}
    assert mailoutbox == []


@pytest.mark.django_db
def test_failed_send_is_retried_then_raised(monkeypatch, make_medicine, make_prescription):
    rx = make_prescription(make_medicine())
    attempts = []

    def refuse(self, fail_silently=False):
        attempts.append(self.to)
        raise ConnectionRefusedError("smtp down")

    monkeypatch.setattr("apps.prescriptions.tasks.EmailMessage.send", refuse)

    with pytest.raises(ConnectionRefusedError):
        send_prescription_email.apply(args=[rx.pk])
    assert len(attempts) == 1 + send_prescription_email.max_retries
