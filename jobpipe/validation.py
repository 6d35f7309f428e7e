"""Input checks at the library boundary."""
from __future__ import annotations

from typing import Any, Sequence

from jobpipe.errors import ValidationError


def validate_search(keywords: Any, location: Any) -> tuple[list[str], str]:
    """Return cleaned (keywords, location) or raise ValidationError."""
    if isinstance(keywords, str) or not isinstance(keywords, Sequence):
        raise ValidationError("Keywords must be a list of strings", field="keywords")
    cleaned: list[str] = []
    for kw in keywords:
        if not isinstance(kw, str) or not kw.strip():
            raise ValidationError("Keywords must be non-empty strings", field="keywords")
        cleaned.append(kw.strip())
    if not cleaned:
        raise ValidationError("At least one keyword is required", field="keywords")
    if not isinstance(location, str) or not location.strip():
        raise ValidationError("Location is required", field="location")
    return cleaned, location.strip()


def validate_cv_text(text: Any) -> None:
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("CV text is empty", field="content")
