"""Resolution of request paths against wildcard rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from vanityurls.server.mounts import ResolvedMount

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from vanityurls.server.mounts import WildcardRule


def split_segment(rest: str) -> tuple[str, str]:
    """Turn ``"foo/bar/baz"`` into ``("foo", "bar/baz")``."""
    name, _, subpath = rest.partition("/")
    return name, subpath


class RuleMatcher:
    """Wildcard rules keyed by literal prefix.

    No prefix is a prefix of another, so at most one rule matches a path.
    """

    def __init__(self, rules: Iterable[WildcardRule]) -> None:
        self._rules: dict[str, WildcardRule] = {rule.prefix: rule for rule in rules}

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[WildcardRule]:
        return iter(sorted(self._rules.values(), key=lambda r: r.prefix))

    def find(self, path: str) -> ResolvedMount | None:
        for prefix, rule in self._rules.items():
            if not path.startswith(prefix):
                continue
            name, subpath = split_segment(path[len(prefix) :])
            if not name:
                return None
            return ResolvedMount(rule.expand(name), subpath, rule=rule)
        return None
