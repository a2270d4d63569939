"""
Filter/Search Engine - match the in-memory catalog against filter criteria.

Pure and synchronous: no I/O, single pass, output keeps catalog order.

Conditions are checked in this order, each only when its field is set:
  1. location.country == "India" (always)
  2. category (exact, "All" means any)
  3. city (exact, "All" means any)
  4. duration_months <= duration
  5. stipend >= stipend_min
  6. stipend <= stipend_max
  7. query: case-insensitive substring of title, company or description
  8. is_remote True -> only remote internships

By default every present condition must hold. With
query_overrides_filters=True a present query is the only condition checked
after the country check.
"""

from typing import Iterable, List

from internhub.models import Internship, InternshipFilter, INDIA
from internhub.models.internship import ALL


def matches_query(internship: Internship, query: str) -> bool:
    q = query.lower()
    return (
        q in internship.title.lower()
        or q in internship.company.lower()
        or q in internship.description.lower()
    )


def matches(internship: Internship, criteria: InternshipFilter, query_overrides_filters: bool = False) -> bool:
    if internship.location.country != INDIA:
        return False

    if criteria.query and query_overrides_filters:
        return matches_query(internship, criteria.query)

    if criteria.category and criteria.category != ALL and internship.category != criteria.category:
        return False

    if criteria.city and criteria.city != ALL and internship.location.city != criteria.city:
        return False

    if criteria.duration is not None and internship.duration_months > criteria.duration:
        return False

    if criteria.stipend_min is not None and internship.stipend < criteria.stipend_min:
        return False

    if criteria.stipend_max is not None and internship.stipend > criteria.stipend_max:
        return False

    if criteria.query and not matches_query(internship, criteria.query):
        return False

    if criteria.is_remote and not internship.is_remote:
        return False

    return True


def filter_internships(
    catalog: Iterable[Internship],
    criteria: InternshipFilter,
    query_overrides_filters: bool = False
) -> List[Internship]:
    """Return the matching internships in their original order."""
    return [i for i in catalog if matches(i, criteria, query_overrides_filters)]


def similar_internships(catalog: Iterable[Internship], internship: Internship, limit: int = 3) -> List[Internship]:
    """Other internships in the same category, for the detail page."""
    similar = [i for i in catalog if i.id != internship.id and i.category == internship.category]
    return similar[:limit]
