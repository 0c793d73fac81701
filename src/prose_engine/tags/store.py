"""Sparse offset-keyed storage for paragraph classification tags."""

from __future__ import annotations

from bisect import bisect_left, insort
from enum import Enum
from typing import Dict, Iterator, List, Mapping, Optional, Tuple


class Tag(str, Enum):
    """Classification marks attached to document offsets."""

    PARAGRAPH_START = "paragraph_start"
    NON_TERMINATING_NEWLINE = "non_terminating_newline"


class TagStore:
    """Ordered ``offset -> Tag`` mapping.

    Lookups are dictionary hits; range queries and edit shifting bisect a
    sorted key list, so a forward line scan stays cheap.
    """

    def __init__(self, initial: Optional[Mapping[int, Tag]] = None) -> None:
        self._tags: Dict[int, Tag] = {}
        self._keys: List[int] = []
        self._revision = 0
        for offset, tag in (initial or {}).items():
            self.put(offset, tag)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, offset: object) -> bool:
        return offset in self._tags

    def revision(self) -> int:
        return self._revision

    def get(self, offset: int) -> Optional[Tag]:
        return self._tags.get(offset)

    def has(self, offset: int, tag: Tag) -> bool:
        return self._tags.get(offset) is tag

    def put(self, offset: int, tag: Tag) -> bool:
        """Store ``tag`` at ``offset``; return ``True`` if anything changed."""

        current = self._tags.get(offset)
        if current is tag:
            return False
        if current is None:
            insort(self._keys, offset)
        self._tags[offset] = tag
        self._revision += 1
        return True

    def remove(self, offset: int) -> bool:
        if offset not in self._tags:
            return False
        del self._tags[offset]
        del self._keys[bisect_left(self._keys, offset)]
        self._revision += 1
        return True

    def range(self, start: int, end: int) -> Iterator[Tuple[int, Tag]]:
        """Yield tags with ``start <= offset < end`` in offset order."""

        index = bisect_left(self._keys, start)
        keys = self._keys[index : bisect_left(self._keys, end, lo=index)]
        for offset in keys:
            yield offset, self._tags[offset]

    def shift(self, start: int, old_end: int, delta: int) -> None:
        """Follow an edit that replaced ``[start, old_end)``.

        Tags inside the replaced span are dropped and tags at or after
        ``old_end`` move by ``delta``; inserted text starts untagged.
        """

        if not self._keys:
            return
        lo = bisect_left(self._keys, start)
        hi = bisect_left(self._keys, old_end, lo=lo)
        if lo == hi and (hi == len(self._keys) or delta == 0):
            return
        for offset in self._keys[lo:hi]:
            del self._tags[offset]
        moved = [(offset + delta, self._tags.pop(offset)) for offset in self._keys[hi:]]
        self._keys = self._keys[:lo]
        for offset, tag in moved:
            self._tags[offset] = tag
            self._keys.append(offset)
        self._revision += 1

    def snapshot(self) -> Dict[int, Tag]:
        return {offset: self._tags[offset] for offset in self._keys}

    def clear(self) -> None:
        if self._keys:
            self._revision += 1
        self._tags.clear()
        self._keys.clear()
