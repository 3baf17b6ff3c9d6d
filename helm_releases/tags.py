"""Tag expressions used to select which releases apply to a release target.

A tag expression is either absent, the wildcard `*`, or one or more
alternative tag names. Alternatives may be separated by commas, pipes or
whitespace, for example `frontend,backend` or `frontend | backend`:

```python
from helm_releases import tags

tags.matches({"frontend"}, "frontend,backend")  # True
tags.matches(set(), "frontend")  # False
tags.matches(set(), None)  # True
```
"""

from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache
import re

__all__ = [
    "WILDCARD",
    "TagExpression",
    "parse",
    "matches",
    "eligible",
]

WILDCARD = "*"

_SEPARATORS = re.compile(r"[\s,|]+")


@dataclass(frozen=True)
class TagExpression:
    """A parsed tag expression."""

    match_all: bool = False
    """True when the expression selects every release, tagged or not."""

    tags: frozenset[str] = frozenset()
    """Alternative tag names, any one of which selects a release."""

    def matches(self, release_tags: Iterable[str]) -> bool:
        """Return True if a release with the given tags is selected."""
        if self.match_all:
            return True
        return not self.tags.isdisjoint(release_tags)

    def __str__(self) -> str:
        if self.match_all:
            return WILDCARD
        return ",".join(sorted(self.tags))


MATCH_ALL = TagExpression(match_all=True)


@lru_cache(maxsize=128)
def parse(expression: str | None) -> TagExpression:
    """Parse a tag expression string.

    An absent expression and the wildcard both match everything.
    """
    if expression is None:
        return MATCH_ALL
    expression = expression.strip()
    if expression == WILDCARD:
        return MATCH_ALL
    return TagExpression(
        tags=frozenset(tag for tag in _SEPARATORS.split(expression) if tag)
    )


def matches(release_tags: Iterable[str], expression: str | None) -> bool:
    """Return True if the release tags satisfy the expression."""
    return parse(expression).matches(release_tags)


def eligible(
    release_tags: Iterable[str],
    global_expression: str | None,
    target_expression: str | None,
) -> bool:
    """Return True if the release tags satisfy both the global and target expression."""
    release_tags = frozenset(release_tags)
    global_match = matches(release_tags, global_expression)
    target_match = matches(release_tags, target_expression)
    return global_match and target_match
