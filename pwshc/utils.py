"""Small helpers shared across the compiler."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, Mapping, MutableMapping, Optional, Tuple, TypeVar

V = TypeVar("V")

__all__ = ["CaseInsensitiveDict"]


class CaseInsensitiveDict(MutableMapping[str, V]):
    """
    Ordered mapping whose string keys compare without regard to case.

    PowerShell variable, parameter and hashtable key names are all
    case-insensitive, so every table the compiler keeps goes through this
    class instead of relying on callers to lower-case keys.  The spelling
    used by the most recent write is kept for iteration; the position of
    a key is fixed by its first insertion.
    """

    def __init__(
        self,
        data: Optional[Mapping[str, V] | Iterable[Tuple[str, V]]] = None,
        **kwargs: V,
    ) -> None:
        self._store: Dict[str, Tuple[str, V]] = {}
        if data is not None:
            self.update(data)
        if kwargs:
            self.update(kwargs)

    @staticmethod
    def _fold(key: str) -> str:
        return key.casefold()

    def __setitem__(self, key: str, value: V) -> None:
        self._store[self._fold(key)] = (key, value)

    def __getitem__(self, key: str) -> V:
        return self._store[self._fold(key)][1]

    def __delitem__(self, key: str) -> None:
        del self._store[self._fold(key)]

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self._fold(key) in self._store

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Mapping):
            other = CaseInsensitiveDict(other)
        else:
            return NotImplemented
        return dict(self.folded_items()) == dict(other.folded_items())

    def folded_items(self) -> Iterator[Tuple[str, V]]:
        """Yield ``(folded_key, value)`` pairs."""
        return ((folded, pair[1]) for folded, pair in self._store.items())

    def copy(self) -> "CaseInsensitiveDict[V]":
        return CaseInsensitiveDict(self._store.values())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({dict(self.items())!r})"
