from __future__ import annotations

from clipflow.config import settings


def validate_tag_name(name: str | None) -> tuple[bool, str | None]:
    """Validate a tag name after trimming."""
    if name is None or not name.strip():
        return False, "Tag name must not be empty"
    limit = settings.tag_name_max_length
    if len(name.strip()) > limit:
        return False, f"Tag name must be at most {limit} characters long"
    return True, None


def normalize_tag_refs(refs: list[str] | None) -> list[str]:
    """Drop blanks and duplicates while keeping first-seen order."""
    if not refs:
        return []
    seen: list[str] = []
    for ref in refs:
        if isinstance(ref, str) and ref.strip() and ref.strip() not in seen:
            seen.append(ref.strip())
    return seen
