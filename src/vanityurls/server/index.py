"""Longest-prefix lookup over static mounts."""

from __future__ import annotations

import bisect
from typing import TYPE_CHECKING

from vanityurls.server.mounts import ResolvedMount

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from vanityurls.server.mounts import MountPoint


class PathIndex:
    """Static mounts sorted by path.

    Mount paths are canonical (no trailing ``/``; the root mount is ``""``)
    and unique. A request is owned by the mount with the longest path that
    equals it or is followed in it by a ``/``.
    """

    def __init__(self, mounts: Iterable[MountPoint]) -> None:
        self._mounts: tuple[MountPoint, ...] = tuple(sorted(mounts, key=lambda m: m.path))
        self._paths: tuple[str, ...] = tuple(m.path for m in self._mounts)

    def __len__(self) -> int:
        return len(self._mounts)

    def __iter__(self) -> Iterator[MountPoint]:
        return iter(self._mounts)

    def find(self, path: str) -> ResolvedMount | None:
        """Return the mount owning ``path`` and the remaining subpath.

        Examples, given mounts ``["", "/abc", "/abc/def", "/xyz"]``:

        - ``"/abc"``       -> ``/abc``, subpath ``""``
        - ``"/abc/"``      -> ``/abc``, subpath ``""``
        - ``"/abc/foo"``   -> ``/abc``, subpath ``"foo"``
        - ``"/abc/def/x"`` -> ``/abc/def``, subpath ``"x"``
        - ``"/x"``         -> ``""`` (root), subpath ``"x"``
        """
        # Fast path: binary search for an exact match
        i = bisect.bisect_left(self._paths, path)
        if i < len(self._paths) and self._paths[i] == path:
            return ResolvedMount(self._mounts[i], "")

        # Any mount nested under paths[i-1] that prefixes path would sort
        # between the two, so a prefix at i-1 is already the longest one.
        if i > 0 and path.startswith(self._paths[i - 1] + "/"):
            return self._match(i - 1, path)

        # Slow path: e.g. given ["", "/example/helloworld", "/y"], the query
        # "/example/foo" sorts after "/example/helloworld" but belongs to "".
        # Nothing at or after i can be a prefix of path.
        best = -1
        for j in range(i):
            candidate = self._paths[j]
            if len(candidate) >= len(path):
                continue
            if not path.startswith(candidate + "/"):
                continue
            if best < 0 or len(candidate) > len(self._paths[best]):
                best = j
        if best < 0:
            return None
        return self._match(best, path)

    def _match(self, i: int, path: str) -> ResolvedMount:
        return ResolvedMount(self._mounts[i], path[len(self._paths[i]) + 1 :])
