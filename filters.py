"""Read-side filtering over a full school listing. The store itself never filters."""

from typing import Any, Iterable, List, Mapping, Optional, Tuple

SEARCH_FIELDS = ("name", "address", "city")


def _matches(school: Mapping[str, Any], term: str) -> bool:
    return any(term in str(school.get(field) or "").lower() for field in SEARCH_FIELDS)


def filter_schools(
    schools: Iterable[Mapping[str, Any]],
    search: Optional[str] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
) -> List[Mapping[str, Any]]:
    """
    Keep the schools that satisfy every supplied criterion.

    `search` is a case-insensitive substring match on name, address or city;
    `city` and `state` must match exactly. Empty criteria are ignored and the
    input order is preserved.
    """
    term = (search or "").strip().lower()
    return [
        school
        for school in schools
        if (not term or _matches(school, term))
        and (not city or school.get("city") == city)
        and (not state or school.get("state") == state)
    ]


def facet_values(schools: Iterable[Mapping[str, Any]]) -> Tuple[List[str], List[str]]:
    """Sorted distinct cities and states, for populating filter choices."""
    cities, states = set(), set()
    for school in schools:
        if school.get("city"):
            cities.add(school["city"])
        if school.get("state"):
            states.add(school["state"])
    return sorted(cities), sorted(states)
