from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SecurityType(Enum):
    BASE = "base"
    EQUITY = "equity"
    FOREX = "forex"
    CRYPTO = "crypto"
    FUTURE = "future"
    OPTION = "option"


@dataclass(frozen=True)
class Symbol:
    """
    Instrument identity.

    Semantics:
      - `value`         : ticker as displayed (e.g. 'SPY', 'BTCUSD')
      - `market`        : lowercase market code (e.g. 'usa', 'coinbase')
      - `security_type` : asset class
      - `synthetic`     : engine-generated identity that never names a tradable instrument

    A synthetic symbol never equals a tradable one, even with the same ticker.
    """

    value: str
    market: str
    security_type: SecurityType = SecurityType.EQUITY
    synthetic: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("Symbol value must be a non-empty string")
        object.__setattr__(self, "market", str(self.market).strip().lower())

    @classmethod
    def create(cls, ticker: str, security_type: SecurityType = SecurityType.EQUITY, market: str = "usa") -> "Symbol":
        return cls(value=ticker.strip().upper(), market=market, security_type=security_type)

    @classmethod
    def create_synthetic(cls, name: str, market: str = "usa") -> "Symbol":
        return cls(value=name.strip(), market=market, security_type=SecurityType.EQUITY, synthetic=True)

    @property
    def id(self) -> str:
        prefix = "#" if self.synthetic else ""
        return f"{prefix}{self.value} {self.security_type.name} {self.market.upper()}"

    def __str__(self) -> str:
        return self.value
