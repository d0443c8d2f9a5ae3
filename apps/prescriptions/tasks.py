# apps/prescriptions/tasks.py
from __future__ import annotations

import logging
from email.utils import formatdate

from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMessage
from django.template import TemplateDoesNotExist
from django.template.loader import render_to_string

from .models import Prescription

logger = logging.getLogger(__name__)

_FALLBACK = {
    "dispensed": ("Your prescription is ready", "Your prescription has been dispensed and is ready for pickup."),
}


def _render_subject_and_body(template_name: str, ctx: dict) -> tuple[str, str]:
    """Render 'Subject: ...' on line 1, rest is body; fallback if template missing."""
    default_subject, default_body = _FALLBACK.get(template_name, ("Prescription update", "Your prescription was updated."))
    try:
        raw = render_to_string(f"emails/prescriptions/{template_name}.txt", ctx)
    except TemplateDoesNotExist:
        return default_subject, default_body
    lines = raw.splitlines()
    subject_line = lines[0].replace("Subject:", "").strip() if lines else ""
    body = "\n".join(lines[1:]).strip()
    return subject_line or default_subject, body or default_body


@shared_task(bind=True, max_retries=2)
def send_prescription_email(self, prescription_id: int, kind: str = "dispensed"):
    """Tell the patient about a status change of their prescription."""
    if not getattr(settings, "NOTIFY_PRESCRIPTIONS", True):
        return {"skipped": True, "reason": "notifications disabled"}

    rx = (
        Prescription.objects.select_related("patient", "doctor")
        .prefetch_related("items__medicine")
        .get(pk=prescription_id)
    )
    if not rx.patient.email:
        return {"skipped": True, "reason": "no recipient email", "prescription": rx.pk}

    ctx = {
        "patient_name": rx.patient.name,
        "doctor_name": rx.doctor.name,
        "prescription_id": rx.pk,
        "medicines": [item.medicine.name for item in rx.items.all()],
        "status": rx.status,
        "kind": kind,
    }
    subject, body = _render_subject_and_body(kind, ctx)

    msg = EmailMessage(
        subject=subject,
        body=body,
        from_email=getattr(settings, "DEFAULT_FROM_EMAIL", "no-reply@carerx.local"),
        to=[rx.patient.email],
    )
    msg.extra_headers = {
        "Date": formatdate(localtime=True),
        "X-Entity-Ref-ID": f"rx-{rx.pk}",
    }
    try:
        msg.send(fail_silently=False)
    except OSError as exc:
        # SMTP errors are OSErrors too
        logger.warning("prescription %s: %s email failed, retrying", rx.pk, kind)
        raise self.retry(exc=exc, countdown=60)
    logger.info("prescription %s: %s email sent", rx.pk, kind)
    return {"sent": True, "to": [rx.patient.email], "kind": kind, "prescription": rx.pk}
