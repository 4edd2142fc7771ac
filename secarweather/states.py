from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple


DEFAULT_CODE = "US"


@dataclass(frozen=True)
class Jurisdiction:
    name: str
    office: str
    code: str


class StateCatalog:
    """
    Fixed, ordered set of report jurisdictions.

    Order matters: the rendered report lists states in catalog order no matter
    which alert fetch finished first.
    """

    def __init__(self, states: Iterable[Jurisdiction]) -> None:
        self._states: Tuple[Jurisdiction, ...] = tuple(states)
        self._by_name = {s.name: s for s in self._states}

    def __iter__(self) -> Iterator[Jurisdiction]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def names(self) -> list[str]:
        return [s.name for s in self._states]

    def code_for(self, name: str) -> str:
        st = self._by_name.get(name)
        return st.code if st else DEFAULT_CODE
