from collections.abc import Iterable

from gql_harvest.models import Fragment


def dedupe(fragments: Iterable[Fragment]) -> list[Fragment]:
    """Keep the first fragment seen for each location key, preserving order."""
    seen: set[str] = set()
    unique: list[Fragment] = []
    for fragment in fragments:
        if fragment.location_key in seen:
            continue
        seen.add(fragment.location_key)
        unique.append(fragment)
    return unique
