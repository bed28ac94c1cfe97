from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, List

from .models import ImageRole, ImageSlot

logger = logging.getLogger(__name__)

MAX_PER_ROLE = 2


def select_slots(slots: Iterable[ImageSlot], max_images: int) -> List[ImageSlot]:
    """Pick at most *max_images* slots, no more than two per role, keeping input order."""

    selected: List[ImageSlot] = []
    if max_images <= 0:
        return selected

    per_role: Counter[ImageRole] = Counter()
    for slot in slots:
        if len(selected) >= max_images:
            break
        if per_role[slot.role] >= MAX_PER_ROLE:
            logger.debug("Skipping %s: role %s already has %s slots", slot.id, slot.role.value, MAX_PER_ROLE)
            continue
        selected.append(slot)
        per_role[slot.role] += 1
    return selected
