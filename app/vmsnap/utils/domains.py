"""Domain parameter parsing.

Expands the ``--domains`` option into a concrete, de-duplicated list of
domain names.
"""

import fnmatch
import logging
from collections.abc import Callable

from vmsnap.core.errors import DomainError

logger = logging.getLogger(__name__)

# Selects every domain defined on the host
ALL_DOMAINS = "*"


def _is_pattern(item: str) -> bool:
    return "*" in item or "?" in item


def parse_domains(param: str | None, fetch_all: Callable[[], list[str]]) -> list[str]:
    """Expand a domain parameter into domain names.

    Accepts a single name, ``*`` for every domain, a shell-style pattern
    (``vm-*``, ``web?``) or a comma-separated list mixing both. Patterns
    are matched against fetch_all(); plain names are passed through as
    given so that unknown domains can be reported later.

    Args:
        param: Raw parameter value.
        fetch_all: Returns every domain defined on the host. Only called
            when a pattern needs expanding.

    Returns:
        Domain names in first-seen order, without duplicates.

    Raises:
        DomainError: If param is empty or nothing matched.

    Example:
        >>> parse_domains("web*,db1", lambda: ["web1", "web2", "db1"])
        ['web1', 'web2', 'db1']
    """
    if not param or not param.strip():
        msg = "No domains specified"
        raise DomainError(msg)

    items = [item.strip() for item in param.split(",") if item.strip()]
    available: list[str] | None = None
    parsed: list[str] = []

    for item in items:
        if item == ALL_DOMAINS or _is_pattern(item):
            if available is None:
                available = fetch_all()
            matches = [d for d in available if fnmatch.fnmatchcase(d, item)]
            logger.debug("Pattern %s matched %d domain(s)", item, len(matches))
            parsed.extend(matches)
        else:
            parsed.append(item)

    # dict preserves insertion order
    domains = list(dict.fromkeys(parsed))

    if not domains:
        msg = f"No matching domains found for: {param}"
        raise DomainError(msg)

    return domains
