"""
SIMM bucket mapping.

Maps a (risk type, qualifier) pair to its SIMM bucket. Interest rate
risk types are bucketed by currency volatility class (1 regular,
2 low, 3 high); credit and equity qualifiers are mapped from an
explicit table supplied by the user.
"""

import logging
from typing import Dict, Iterable, Optional

from ..errors import ConfigurationError
from .risk_types import RiskType

logger = logging.getLogger(__name__)

# Risk types for which SIMM defines buckets
BUCKETED_RISK_TYPES = {
    RiskType.IR_CURVE,
    RiskType.IR_VOL,
    RiskType.INFLATION,
    RiskType.INFLATION_VOL,
    RiskType.XCCY_BASIS,
    RiskType.CREDIT_Q,
    RiskType.CREDIT_VOL,
    RiskType.CREDIT_NON_Q,
    RiskType.CREDIT_VOL_NON_Q,
    RiskType.EQUITY,
    RiskType.EQUITY_VOL,
    RiskType.COMMODITY,
    RiskType.COMMODITY_VOL,
}

_IR_TYPES = {
    RiskType.IR_CURVE,
    RiskType.IR_VOL,
    RiskType.INFLATION,
    RiskType.INFLATION_VOL,
    RiskType.XCCY_BASIS,
}

IR_REGULAR_VOL_CURRENCIES = frozenset({
    "USD", "EUR", "GBP", "CHF", "AUD", "NZD", "CAD", "SEK",
    "NOK", "DKK", "HKD", "KRW", "SGD", "TWD",
})
IR_LOW_VOL_CURRENCIES = frozenset({"JPY"})

RESIDUAL = "Residual"


class SimmBucketMapper:
    """
    Qualifier to bucket lookup.

    Args:
        mappings: Bucket by qualifier, per risk type. Credit vol
            qualifiers fall back to the CreditQ table, equity vol to the
            Equity table.
        residual_risk_types: Risk types whose unmapped qualifiers go to
            the residual bucket instead of failing

    Example:
        >>> mapper = SimmBucketMapper({RiskType.EQUITY: {"ACME": "5"}})
        >>> mapper.bucket(RiskType.EQUITY_VOL, "ACME")
        '5'
    """

    def __init__(
        self,
        mappings: Optional[Dict[RiskType, Dict[str, str]]] = None,
        residual_risk_types: Iterable[RiskType] = ()
    ):
        self._mappings: Dict[RiskType, Dict[str, str]] = {}
        for risk_type, table in (mappings or {}).items():
            self.add_mappings(risk_type, table)
        self._residual = set(residual_risk_types)

    @staticmethod
    def has_buckets(risk_type: RiskType) -> bool:
        return risk_type in BUCKETED_RISK_TYPES

    def add_mappings(self, risk_type: RiskType, table: Dict[str, str]) -> None:
        if not self.has_buckets(risk_type):
            raise ConfigurationError(f"Risk type {risk_type.value} has no buckets")
        self._mappings.setdefault(self._lookup_type(risk_type), {}).update(
            {q: str(b) for q, b in table.items()})

    def _lookup_type(self, risk_type: RiskType) -> RiskType:
        if risk_type == RiskType.CREDIT_VOL:
            return RiskType.CREDIT_Q
        if risk_type == RiskType.CREDIT_VOL_NON_Q:
            return RiskType.CREDIT_NON_Q
        if risk_type == RiskType.EQUITY_VOL:
            return RiskType.EQUITY
        if risk_type == RiskType.COMMODITY_VOL:
            return RiskType.COMMODITY
        return risk_type

    def bucket(self, risk_type: RiskType, qualifier: str) -> str:
        """
        Bucket of a qualifier.

        Raises:
            ConfigurationError: If the risk type has no buckets, or the
                qualifier is unmapped and no residual bucket is configured
        """
        if not self.has_buckets(risk_type):
            raise ConfigurationError(f"Risk type {risk_type.value} has no buckets")

        if risk_type in _IR_TYPES:
            if qualifier in IR_LOW_VOL_CURRENCIES:
                return "2"
            if qualifier in IR_REGULAR_VOL_CURRENCIES:
                return "1"
            return "3"

        lookup = self._lookup_type(risk_type)
        table = self._mappings.get(lookup, {})
        if qualifier in table:
            return table[qualifier]
        if risk_type in self._residual or lookup in self._residual:
            logger.warning("No SIMM bucket for %s qualifier %s, using %s", risk_type.value, qualifier, RESIDUAL)
            return RESIDUAL
        raise ConfigurationError(
            f"No SIMM bucket for {risk_type.value} qualifier {qualifier}")

    def __contains__(self, item) -> bool:
        risk_type, qualifier = item
        if risk_type in _IR_TYPES:
            return True
        return qualifier in self._mappings.get(self._lookup_type(risk_type), {})


__all__ = [
    "SimmBucketMapper",
    "BUCKETED_RISK_TYPES",
    "IR_REGULAR_VOL_CURRENCIES",
    "IR_LOW_VOL_CURRENCIES",
    "RESIDUAL",
]
