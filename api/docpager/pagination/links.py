"""RFC 8288 Link headers for paginated responses."""

from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode


def create_link_header(
    base_url: str,
    params: Mapping[str, Any],
    links: Mapping[str, Optional[Mapping[str, Any]]]
) -> Optional[str]:
    """Create a Link header value.

    Args:
        base_url: Resource URL without query string
        params: Query parameters shared by every link
        links: Relation name (``next``, ``prev``) to the query parameters
            that differ for that relation; ``None`` skips the relation

    Returns:
        Link header value or None if no links
    """
    values = []
    for rel, overrides in links.items():
        if overrides is None:
            continue
        query: Dict[str, Any] = {
            key: value for key, value in {**params, **overrides}.items() if value is not None
        }
        values.append(f'<{base_url}?{urlencode(query)}>; rel="{rel}"')

    return ", ".join(values) if values else None
