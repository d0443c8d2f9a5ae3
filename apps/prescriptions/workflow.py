# apps/prescriptions/workflow.py
"""
Prescription lifecycle:

    created --[pharmacist dispenses]--> dispensed --[owning patient completes]--> completed

Every operation takes the acting principal explicitly (the request user) and
checks it against CAPABILITIES before touching anything. Transitions are
compare-and-set updates on the status column inside one transaction, so two
concurrent calls for the same prescription cannot both succeed, and a failed
dispense leaves neither the status nor any stock changed.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from apps.medicines.models import Medicine
from apps.medicines.services import take_one_unit
from apps.rbac.utils import has_role

from .exceptions import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from .models import Prescription, PrescriptionItem, PrescriptionStatus
from .tasks import send_prescription_email

logger = logging.getLogger(__name__)

LINE_TEXT_FIELDS = ("dosage", "frequency", "duration")

# operation -> {role: ownership field on Prescription, or None for "any"}
CAPABILITIES: Dict[str, Dict[str, Optional[str]]] = {
    "create": {"doctor": None},
    "dispense": {"pharmacist": None},
    "complete": {"patient": "patient"},
    "view": {"doctor": "doctor", "patient": "patient", "pharmacist": None},
    "pending": {"pharmacist": None},
}


# ---- access control ---------------------------------------------------------

def authorize(operation: str, principal, prescription: Optional[Prescription] = None) -> None:
    """
    Raise ForbiddenError unless `principal` may run `operation`.

    Without a prescription only the role is checked; with one, the ownership
    rule for the principal's role is applied as well.
    """
    rules = CAPABILITIES[operation]
    for role, owner_field in rules.items():
        if not has_role(principal, role):
            continue
        if prescription is None or owner_field is None:
            return
        if getattr(prescription, f"{owner_field}_id") == principal.pk:
            return
        raise ForbiddenError("You are not allowed to access this prescription.")
    raise ForbiddenError(f"Your role may not {operation} prescriptions.")


# ---- helpers ----------------------------------------------------------------

def _coerce_id(value: Any, what: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise NotFoundError(f"{what} not found.")


def _normalize_lines(lines: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    lines = list(lines or [])
    if not lines:
        raise ValidationError("A prescription needs at least one medicine.")

    out: List[Dict[str, Any]] = []
    for n, line in enumerate(lines, start=1):
        missing = []
        medicine = line.get("medicine")
        if medicine in (None, ""):
            missing.append("medicine")
        values = {}
        for field in LINE_TEXT_FIELDS:
            raw = line.get(field)
            text = raw.strip() if isinstance(raw, str) else ""
            if not text:
                missing.append(field)
            values[field] = text
        if missing:
            raise ValidationError(f"Medicine line {n} is incomplete: {', '.join(missing)} required.")

        if isinstance(medicine, Medicine):
            medicine = medicine.pk
        try:
            medicine_id = int(medicine)
        except (TypeError, ValueError):
            raise ValidationError(f"Medicine line {n} has an invalid medicine id.")
        out.append({"medicine_id": medicine_id, "position": n - 1, **values})
    return out


def _reload(prescription_id: int) -> Prescription:
    return Prescription.objects.with_related().get(pk=prescription_id)


def _lock(prescription_id: Any) -> Prescription:
    pk = _coerce_id(prescription_id, "Prescription")
    try:
        return Prescription.objects.select_for_update().get(pk=pk)
    except Prescription.DoesNotExist:
        raise NotFoundError("Prescription not found.")


def claim_transition(prescription_id: int, from_status: str, to_status: str) -> bool:
    """
    Compare-and-set the status column. Only one caller can move a given
    prescription out of `from_status`; everyone else gets False.
    """
    updated = (
        Prescription.objects
        .filter(pk=prescription_id, status=from_status)
        .update(status=to_status, updated_at=timezone.now())
    )
    return updated == 1


# ---- operations -------------------------------------------------------------

def create_prescription(doctor, patient_id: Any, lines: Iterable[Mapping[str, Any]], notes: str = "") -> Prescription:
    """Write a new prescription (status=created) on behalf of `doctor`."""
    authorize("create", doctor)
    normalized = _normalize_lines(lines)

    User = get_user_model()
    patient = (
        User.objects
        .filter(pk=_coerce_id(patient_id, "Patient"), role=User.Role.PATIENT)
        .first()
    )
    if patient is None:
        raise NotFoundError("Patient not found.")

    wanted = {line["medicine_id"] for line in normalized}
    found = Medicine.objects.in_bulk(wanted)
    missing = sorted(wanted - set(found))
    if missing:
        raise NotFoundError(f"Medicine not found: {', '.join(str(m) for m in missing)}.")

    with transaction.atomic():
        rx = Prescription.objects.create(
            patient=patient,
            doctor=doctor,
            notes=(notes or "").strip(),
            status=PrescriptionStatus.CREATED,
        )
        PrescriptionItem.objects.bulk_create(
            [PrescriptionItem(prescription=rx, **line) for line in normalized]
        )

    logger.info("prescription %s created by doctor %s for patient %s", rx.pk, doctor.pk, patient.pk)
    return _reload(rx.pk)


def dispense_prescription(pharmacist, prescription_id: Any) -> Prescription:
    """
    Mark a created prescription as dispensed and take one unit of stock per
    medicine line. A line whose medicine is out of stock is skipped.
    """
    authorize("dispense", pharmacist)

    with transaction.atomic():
        rx = _lock(prescription_id)
        if rx.status != PrescriptionStatus.CREATED:
            raise InvalidStateError("Prescription already dispensed or completed.")
        if not claim_transition(rx.pk, PrescriptionStatus.CREATED, PrescriptionStatus.DISPENSED):
            raise InvalidStateError("Prescription already dispensed or completed.")

        # one unit per line, whatever the prescribed dosage
        for item in rx.items.all():
            if not take_one_unit(item.medicine_id):
                logger.info(
                    "prescription %s: medicine %s out of stock, nothing taken",
                    rx.pk, item.medicine_id,
                )

    logger.info("prescription %s dispensed by pharmacist %s", rx.pk, pharmacist.pk)

    if getattr(settings, "NOTIFY_PRESCRIPTIONS", True):
        transaction.on_commit(lambda: send_prescription_email.delay(rx.pk, "dispensed"))

    return _reload(rx.pk)


def complete_prescription(patient, prescription_id: Any) -> Prescription:
    """The owning patient confirms receipt of a dispensed prescription."""
    authorize("complete", patient)

    with transaction.atomic():
        rx = _lock(prescription_id)
        authorize("complete", patient, rx)
        if rx.status != PrescriptionStatus.DISPENSED:
            raise InvalidStateError("Prescription cannot be marked as completed yet.")
        if not claim_transition(rx.pk, PrescriptionStatus.DISPENSED, PrescriptionStatus.COMPLETED):
            raise InvalidStateError("Prescription cannot be marked as completed yet.")

    logger.info("prescription %s completed by patient %s", rx.pk, patient.pk)
    return _reload(rx.pk)


# ---- reads ------------------------------------------------------------------

def get_prescription(principal, prescription_id: Any) -> Prescription:
    authorize("view", principal)
    pk = _coerce_id(prescription_id, "Prescription")
    try:
        rx = _reload(pk)
    except Prescription.DoesNotExist:
        raise NotFoundError("Prescription not found.")
    authorize("view", principal, rx)
    return rx


def prescriptions_visible_to(principal):
    """Doctors see what they wrote, patients what they received, pharmacists everything."""
    qs = Prescription.objects.with_related()
    if has_role(principal, "pharmacist"):
        return qs
    if has_role(principal, "doctor"):
        return qs.filter(doctor=principal)
    if has_role(principal, "patient"):
        return qs.filter(patient=principal)
    return qs.none()


def pending_prescriptions(principal):
    authorize("pending", principal)
    return Prescription.objects.with_related().pending()
