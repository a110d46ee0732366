"""GitHub search query construction.

Clause order is fixed so the same criteria always produce the same query
string.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Union

from .models import BusinessCriteria

CLAUSE_SEPARATOR = " "
DEFAULT_BUSINESS_QUERY = "type:org"


def coerce_criteria(criteria: Union[BusinessCriteria, Mapping, None]) -> BusinessCriteria:
    """Validate raw criteria into a BusinessCriteria.

    Raises pydantic.ValidationError for malformed values and TypeError for
    anything that is not a mapping.
    """
    if criteria is None:
        return BusinessCriteria()
    if isinstance(criteria, BusinessCriteria):
        return criteria
    if isinstance(criteria, Mapping):
        return BusinessCriteria.model_validate(dict(criteria))
    raise TypeError(f"criteria must be a BusinessCriteria or a mapping, not {type(criteria).__name__}")


def build_business_query(criteria: Union[BusinessCriteria, Mapping, None]) -> str:
    """Translate discovery criteria into a repository search query.

    Clauses (in order): topic, language, quoted location, name/description
    substring, minimum stars. With no filters the search is limited to
    organization accounts.
    """
    criteria = coerce_criteria(criteria)
    clauses = []
    if criteria.industry:
        clauses.append(f"topic:{criteria.industry}")
    if criteria.technology:
        clauses.append(f"language:{criteria.technology}")
    if criteria.location:
        clauses.append(f'location:"{criteria.location}"')
    if criteria.company:
        clauses.append(f"{criteria.company} in:name,description")
    if criteria.min_stars:
        clauses.append(f"stars:>={criteria.min_stars}")

    if not clauses:
        return DEFAULT_BUSINESS_QUERY
    return CLAUSE_SEPARATOR.join(clauses)


def build_trend_query(language: str, window_start: date) -> str:
    """Repositories created after ``window_start``, optionally in one language."""
    clauses = [f"created:>{window_start.isoformat()}"]
    if language and language.strip():
        clauses.append(f"language:{language.strip()}")
    return CLAUSE_SEPARATOR.join(clauses)
