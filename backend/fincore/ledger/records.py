"""Normalization of raw ledger records into Movement objects.

Records that cannot be interpreted (bad date, non-numeric or negative
amount, missing or unknown category) are not defaulted to anything. They
are set aside as RejectedRecord entries so the caller can surface them,
and aggregation carries on with the valid rows.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from fincore.models.ledger import CategoryRegistry, Movement, RejectedRecord

logger = logging.getLogger(__name__)


def _describe(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "record"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def parse_movement(record: Movement | Mapping[str, Any]) -> Movement:
    """Build a Movement from a mapping (or pass one through).

    Raises:
        pydantic.ValidationError: If a field cannot be interpreted
        TypeError: If the record is neither a Movement nor a mapping
    """
    if isinstance(record, Movement):
        return record
    if isinstance(record, Mapping):
        return Movement.model_validate(dict(record))
    raise TypeError(f"Unsupported record type: {type(record).__name__}")


def parse_movements(
    records: Iterable[Movement | Mapping[str, Any]],
    registry: CategoryRegistry | None = None,
) -> tuple[list[Movement], list[RejectedRecord]]:
    """
    Split raw records into valid movements and rejected records.

    Args:
        records: Movement instances or mappings with date, amount,
            category and optional name
        registry: Known categories; when given, other categories are rejected

    Returns:
        Tuple of (movements, rejected), both in input order
    """
    movements: list[Movement] = []
    rejected: list[RejectedRecord] = []

    for index, record in enumerate(records):
        try:
            movement = parse_movement(record)
        except ValidationError as e:
            rejected.append(RejectedRecord(index=index, record=record, reason=_describe(e)))
            continue
        except TypeError as e:
            rejected.append(RejectedRecord(index=index, record=record, reason=str(e)))
            continue

        if registry is not None and movement.category not in registry:
            rejected.append(
                RejectedRecord(
                    index=index,
                    record=record,
                    reason=f"category: unknown category '{movement.category}'",
                )
            )
            continue

        movements.append(movement)

    if rejected:
        sample = "; ".join(f"#{r.index} {r.reason}" for r in rejected[:5])
        logger.debug(
            f"Rejected {len(rejected)} of {len(rejected) + len(movements)} "
            f"ledger records: {sample}"
        )

    return movements, rejected
