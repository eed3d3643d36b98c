from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Iterable, Iterator


def _l2_norm(values: Iterable[float]) -> float:
    return math.sqrt(sum(v * v for v in values))


class SparseVector(Mapping):
    """
    Read-only sparse vector: tag id -> weight, over a fixed key domain.
    """

    __slots__ = ("_domain", "_values")

    def __init__(self, values: Mapping[int, float] | None = None, domain: Iterable[int] | None = None):
        vals = dict(values or {})
        dom = frozenset(vals.keys()) if domain is None else frozenset(domain)
        missing = vals.keys() - dom
        if missing:
            raise KeyError(f"keys outside the vector domain: {sorted(missing)}")
        self._domain = dom
        self._values = vals

    @property
    def key_domain(self) -> frozenset[int]:
        return self._domain

    def __getitem__(self, key: int) -> float:
        return self._values[key]

    def __iter__(self) -> Iterator[int]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"SparseVector({self._values!r})"

    def norm(self) -> float:
        return _l2_norm(self._values.values())


class MutableSparseVector:
    """
    Sparse vector with a fixed key domain. Each key in the domain is either
    set (has a value) or unset; only set keys take part in iteration, len()
    and norm().
    """

    def __init__(self, domain: Iterable[int]):
        self._domain = frozenset(domain)
        self._values: dict[int, float] = {}

    @classmethod
    def create(cls, domain: Iterable[int]) -> "MutableSparseVector":
        return cls(domain)

    @property
    def key_domain(self) -> frozenset[int]:
        return self._domain

    def contains(self, key: int) -> bool:
        return key in self._values

    __contains__ = contains

    def get(self, key: int, default: float | None = None) -> float | None:
        return self._values.get(key, default)

    def __getitem__(self, key: int) -> float:
        return self._values[key]

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[int]:
        return iter(self._values)

    def keys(self):
        return self._values.keys()

    def values(self):
        return self._values.values()

    def items(self):
        return self._values.items()

    def set(self, key: int, value: float) -> None:
        if key not in self._domain:
            raise KeyError(f"key {key!r} is not in the vector domain")
        self._values[key] = float(value)

    def add(self, key: int, value: float) -> float:
        """
        Adds value to the key, setting it to value if it is unset. Returns the
        new value.
        """
        if key not in self._domain:
            raise KeyError(f"key {key!r} is not in the vector domain")
        self._values[key] = self._values.get(key, 0.0) + value
        return self._values[key]

    def fill(self, value: float) -> None:
        v = float(value)
        self._values = {k: v for k in self._domain}

    def clear(self) -> None:
        # unsets every key; the domain stays the same
        self._values.clear()

    def shrink_domain(self) -> "MutableSparseVector":
        out = MutableSparseVector(self._values.keys())
        out._values = dict(self._values)
        return out

    def norm(self) -> float:
        return _l2_norm(self._values.values())

    def freeze(self) -> SparseVector:
        return SparseVector(self._values, domain=self._domain)

    def __repr__(self) -> str:
        return f"MutableSparseVector({self._values!r}, domain_size={len(self._domain)})"
