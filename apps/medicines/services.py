# apps/medicines/services.py
from __future__ import annotations

from django.db.models import F
from django.utils import timezone

from .models import Medicine


def take_one_unit(medicine_id: int) -> bool:
    """
    Atomically remove one unit from stock, never going below zero.

    Single conditional UPDATE, so concurrent callers cannot lose a decrement.
    Returns False (and changes nothing) when the medicine is already at zero.
    """
    updated = (
        Medicine.objects
        .filter(pk=medicine_id, stock_quantity__gt=0)
        .update(
            stock_quantity=F("stock_quantity") - 1,
            # update() skips auto_now
            updated_at=timezone.now(),
        )
    )
    return updated == 1
