"""Row coercion and validation for tabular records."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List

from charity_selector.selection.errors import ProfileError
from charity_selector.selection.models import CandidateItem, UserProfile

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"true", "yes", "y", "1"}


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in _TRUE_VALUES


def parse_int(value: Any, default: int = 0) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def parse_user_profile(row: Dict[str, Any]) -> UserProfile:
    """Coerce a raw profile row. Raises :class:`ProfileError` if id, name or state is missing."""
    if not row or not row.get("id") or not row.get("name") or not row.get("state"):
        raise ProfileError("Profile missing required fields (id, name, state)")
    return UserProfile(
        id=row["id"].strip(),
        name=row["name"].strip(),
        region=row["state"].strip(),
        is_married=parse_bool(row.get("isMarried")),
        has_children=parse_bool(row.get("hasChildren")),
        has_pets=parse_bool(row.get("hasPets")),
        age=parse_int(row.get("age")),
    )


def parse_candidates(rows: Iterable[Dict[str, Any]], source: str = "") -> List[CandidateItem]:
    """Build candidates from rows, logging and dropping invalid ones."""
    valid: List[CandidateItem] = []
    seen: set[str] = set()
    total = 0
    for row in rows:
        total += 1
        try:
            item = CandidateItem.from_row(row)
        except ValueError as e:
            logger.warning("Skipping invalid charity row %d in %s: %s", total, source or "<rows>", e)
            continue
        if item.id in seen:
            logger.warning("Skipping duplicate charity row %d in %s: id %s", total, source or "<rows>", item.id)
            continue
        seen.add(item.id)
        valid.append(item)
    logger.info("%d valid charities out of %d total", len(valid), total)
    return valid
