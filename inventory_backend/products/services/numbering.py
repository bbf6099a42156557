# products/services/numbering.py

"""
Sequential document numbers: INV-00001, PO-00001, ...

Must run inside the order's Transaction Boundary: the row holding the
current highest number is locked (SELECT ... FOR UPDATE) until commit, so a
concurrent create waits and then reads the new highest number.

An empty table has no row to lock. Two first-ever creates can still race;
the unique constraint on the number column rejects the loser and the API
answers 400.
"""

from __future__ import annotations

import re

from django.db.models.functions import Length


def next_document_number(model, field: str, prefix: str, width: int = 5) -> str:
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")

    last = (
        model._default_manager.select_for_update()
        .filter(**{f"{field}__regex": pattern.pattern})
        .order_by(Length(field).desc(), f"-{field}")
        .values_list(field, flat=True)
        .first()
    )

    last_number = 0
    if last:
        match = pattern.match(last)
        if match:
            last_number = int(match.group(1))

    return f"{prefix}{last_number + 1:0{width}d}"
