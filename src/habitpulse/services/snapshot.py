"""JSON snapshot export/import for the whole habit collection.

The file layout is ``{"habits": [...]}`` with camelCase habit records, the
same shape the mobile app kept in its key-value store.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from ..domain.habit import Habit
from ..errors import InvalidHabitRecord
from ..logging_config import get_logger

logger = get_logger("services.snapshot")


def export_habits(*, habits: Iterable[Habit], output_path: Path) -> Path:
    """Write habits to ``output_path`` as a JSON snapshot and return the path."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"habits": [habit.to_mapping() for habit in habits if habit is not None]}
    with output_path.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2)
    logger.info(
        "Exported habit snapshot",
        extra={"path": str(output_path), "count": len(payload["habits"])},
    )
    return output_path


def import_habits(input_path: Path) -> list[Habit]:
    """Read a JSON snapshot, keeping only records that pass validation.

    Accepts either ``{"habits": [...]}`` or a bare list of habit records.
    """

    with input_path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)

    records = data.get("habits", []) if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise InvalidHabitRecord("Snapshot does not contain a list of habits", record=data)

    habits: list[Habit] = []
    for record in records:
        try:
            habits.append(Habit.from_mapping(record))
        except InvalidHabitRecord as exc:
            logger.warning("Skipping invalid habit in snapshot: %s", exc)
    logger.info("Imported habit snapshot", extra={"path": str(input_path), "count": len(habits)})
    return habits


__all__ = ["export_habits", "import_habits"]
