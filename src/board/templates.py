"""Default status columns and the optional YAML board template."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from src.store.models import ColumnKind


@dataclass(frozen=True)
class ColumnTemplate:
    name: str
    color: str


DEFAULT_COLUMNS: dict[ColumnKind, tuple[ColumnTemplate, ...]] = {
    ColumnKind.APPLICATION: (
        ColumnTemplate("Applied", "bg-blue-500"),
        ColumnTemplate("Follow-up", "bg-purple-500"),
        ColumnTemplate("Interview", "bg-indigo-500"),
        ColumnTemplate("Offer", "bg-green-500"),
        ColumnTemplate("Rejected", "bg-red-500"),
    ),
    ColumnKind.STUDY: (
        ColumnTemplate("Sunday", "bg-red-500"),
        ColumnTemplate("Monday", "bg-orange-500"),
        ColumnTemplate("Tuesday", "bg-yellow-500"),
        ColumnTemplate("Wednesday", "bg-green-500"),
        ColumnTemplate("Thursday", "bg-blue-500"),
        ColumnTemplate("Friday", "bg-indigo-500"),
        ColumnTemplate("Saturday", "bg-purple-500"),
    ),
}

FALLBACK_COLOR = "bg-gray-500"


def load_board_template(
    path: Path | str | None,
) -> dict[ColumnKind, tuple[ColumnTemplate, ...]]:
    """Load default columns from YAML, falling back to the built-ins.

    The file maps a board kind to a list of columns::

        application:
          - name: Applied
            color: bg-blue-500
          - Screening            # color defaults to bg-gray-500

    Kinds missing from the file keep their built-in defaults.

    Raises:
        FileNotFoundError: If ``path`` is given but does not exist.
        ValueError: If the file is not valid YAML or has the wrong shape.
    """
    template = dict(DEFAULT_COLUMNS)
    if path is None:
        return template

    template_path = Path(path)
    if not template_path.exists():
        raise FileNotFoundError(f"Board template not found: {template_path}")

    try:
        with template_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML board template: {template_path}") from e

    if data is None:
        return template
    if not isinstance(data, dict):
        raise ValueError(f"Board template must be a mapping/dict: {template_path}")

    for raw_kind, entries in data.items():
        try:
            kind = ColumnKind(str(raw_kind).lower())
        except ValueError as e:
            raise ValueError(f"Unknown board kind in template: {raw_kind}") from e
        if not isinstance(entries, list) or not entries:
            raise ValueError(f"Template for '{kind.value}' must be a non-empty list")
        template[kind] = tuple(_parse_entry(entry) for entry in entries)

    return template


def _parse_entry(entry: object) -> ColumnTemplate:
    if isinstance(entry, str) and entry.strip():
        return ColumnTemplate(entry.strip(), FALLBACK_COLOR)
    if isinstance(entry, dict) and str(entry.get("name") or "").strip():
        return ColumnTemplate(
            str(entry["name"]).strip(),
            str(entry.get("color") or FALLBACK_COLOR),
        )
    raise ValueError(f"Invalid column entry in board template: {entry!r}")
