from __future__ import annotations

from typing import Dict, Iterator, Protocol

from feed_engine.data.symbol import Symbol
from feed_engine.exceptions.core import UniverseError
from feed_engine.universe.user_defined import UserDefinedUniverse
from feed_engine.utils.logger import get_logger, log_universe

_logger = get_logger(__name__)


class UniverseRegistry(Protocol):
    def add(self, symbol: Symbol, universe: UserDefinedUniverse) -> None:
        ...

    def __contains__(self, symbol: object) -> bool:
        ...


class UniverseManager:
    """
    Registry of active universes keyed by their universe symbol.
    """

    def __init__(self) -> None:
        self._universes: Dict[Symbol, UserDefinedUniverse] = {}

    def add(self, symbol: Symbol, universe: UserDefinedUniverse) -> None:
        if symbol in self._universes:
            raise UniverseError(f"Universe '{symbol.id}' already registered")
        self._universes[symbol] = universe
        log_universe(_logger, "Universe registered", universe=symbol.id)

    def remove(self, symbol: Symbol) -> UserDefinedUniverse | None:
        universe = self._universes.pop(symbol, None)
        if universe is not None:
            log_universe(_logger, "Universe removed", universe=symbol.id)
        return universe

    def get(self, symbol: Symbol) -> UserDefinedUniverse | None:
        return self._universes.get(symbol)

    def __getitem__(self, symbol: Symbol) -> UserDefinedUniverse:
        try:
            return self._universes[symbol]
        except KeyError:
            raise KeyError(
                f"Unknown universe '{symbol.id}'. "
                f"Registered universes: {[s.id for s in self._universes]}"
            )

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._universes

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._universes)

    def __len__(self) -> int:
        return len(self._universes)
