"""Column mapping suggestions for gradebook exports."""

from typing import Any, Callable, Iterable
import logging
import re

from .models import FieldMapping

logger = logging.getLogger(__name__)

MappingSuggester = Callable[[list[str]], FieldMapping | dict[str, Any]]

# Checked in order; earlier fields claim their header first.
FIELD_KEYWORDS: dict[str, list[str]] = {
    "id": ["id number", "student id", "student number", "idnumber", "username", "id"],
    "first_name": ["first name", "firstname", "given name", "first"],
    "last_name": ["last name", "lastname", "surname", "family name", "last"],
    "midterm": ["midterm", "mid-term", "mid term"],
    "final": ["final exam", "final total", "final"],
    "daily": ["daily", "coursework", "continuous", "course total", "assignment"],
}


def suggest_mapping(headers: Iterable[str]) -> FieldMapping:
    """Heuristically suggest a column mapping based on header keywords."""
    headers = [str(header) for header in headers]
    used: set[str] = set()

    def find_column(keywords):
        # Exact matches win over whole-word matches inside longer headers.
        for keyword in keywords:
            for header in headers:
                if header not in used and header.strip().lower() == keyword:
                    return header
        for keyword in keywords:
            for header in headers:
                if header not in used and re.search(rf"\b{re.escape(keyword)}\b", header.lower()):
                    return header
        return ""

    suggestion = {}
    for field_name, keywords in FIELD_KEYWORDS.items():
        column = find_column(keywords)
        if column:
            used.add(column)
        suggestion[field_name] = column
    return FieldMapping.from_dict(suggestion)


def resolve_mapping(headers: Iterable[str], suggester: MappingSuggester | None = None) -> FieldMapping:
    """
    Ask an external suggester for a mapping, falling back to the heuristic.

    The suggester is a convenience only: when it is missing, raises, or names
    headers that are not in the file, the keyword heuristic is used instead.
    """
    headers = [str(header) for header in headers]
    if suggester is not None:
        try:
            suggested = suggester(headers)
        except Exception as exc:
            logger.warning("Mapping suggestion failed, using keyword heuristic: %s", exc)
        else:
            mapping = suggested if isinstance(suggested, FieldMapping) else FieldMapping.from_dict(suggested)
            unknown = [value for value in mapping.as_dict().values() if value and value not in headers]
            if not unknown:
                return mapping
            logger.warning("Suggested mapping names unknown headers %s, using keyword heuristic", unknown)
    return suggest_mapping(headers)
