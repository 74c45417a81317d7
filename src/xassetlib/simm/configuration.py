"""
SIMM configuration base.

A configuration is a set of static, versioned tables (risk weights,
correlations, buckets, labels) loaded once at construction. All queries
are pure lookups; the only mutation after construction is add_labels2,
which extends the admissible Label2 values of a risk type.

Concrete versions subclass SimmConfiguration, populate the tables in
__init__ and implement correlation and label2.
"""

from typing import Dict, List, Mapping, Optional, Set

import numpy as np

from ..errors import ConfigurationError
from .bucket_mapper import RESIDUAL, SimmBucketMapper
from .risk_types import MarginType, RiskClass, RiskType

RISK_CLASS_ORDER = [
    RiskClass.INTEREST_RATE,
    RiskClass.CREDIT_QUALIFYING,
    RiskClass.CREDIT_NON_QUALIFYING,
    RiskClass.EQUITY,
    RiskClass.COMMODITY,
    RiskClass.FX,
]


def frozen_matrix(rows, name: str = "matrix") -> np.ndarray:
    """
    Build a read-only correlation matrix.

    Raises:
        ConfigurationError: If the matrix is not square, not symmetric,
            has a diagonal other than 1 or entries outside [-1, 1]
    """
    m = np.array(rows, dtype=float)
    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        raise ConfigurationError(f"{name} must be square, got shape {m.shape}")
    if not np.allclose(m, m.T):
        raise ConfigurationError(f"{name} is not symmetric")
    if not np.allclose(np.diag(m), 1.0):
        raise ConfigurationError(f"{name} must have a unit diagonal")
    if np.any(np.abs(m) > 1.0):
        raise ConfigurationError(f"{name} has entries outside [-1, 1]")
    m.setflags(write=False)
    return m


class SimmConfiguration:
    """
    Versioned SIMM tables and pure lookups over them.

    Args:
        bucket_mapper: Qualifier to bucket mapping
        name: Configuration name
        version: SIMM version string
        mpor_days: Margin period of risk in days

    Subclasses fill these tables:
        _buckets: bucket names by risk type
        _labels1, _labels2: admissible labels by risk type
        _rw_risk_type: flat risk weight by risk type
        _rw_bucket: risk weight by risk type and bucket
        _rw_label1: risk weight by risk type, bucket and label1 position
        _hvr: historical volatility ratio by risk type
        _intra_bucket_correlation: same-bucket correlation by risk type and bucket
        _inter_bucket_correlation: cross-bucket matrix by risk type, over
            the non-residual buckets in order
        _risk_class_correlation: psi matrix in RISK_CLASS_ORDER
    """

    def __init__(
        self,
        bucket_mapper: SimmBucketMapper,
        name: str,
        version: str,
        mpor_days: int = 10
    ):
        self.bucket_mapper = bucket_mapper
        self.name = name
        self.version = version
        self.mpor_days = mpor_days

        self._buckets: Dict[RiskType, List[str]] = {}
        self._labels1: Dict[RiskType, List[str]] = {}
        self._labels2: Dict[RiskType, List[str]] = {}
        self._rw_risk_type: Dict[RiskType, float] = {}
        self._rw_bucket: Dict[RiskType, Dict[str, float]] = {}
        self._rw_label1: Dict[RiskType, Dict[str, List[float]]] = {}
        self._hvr: Dict[RiskType, float] = {}
        self._intra_bucket_correlation: Dict[RiskType, Dict[str, float]] = {}
        self._inter_bucket_correlation: Dict[RiskType, np.ndarray] = {}
        self._risk_class_correlation = np.eye(len(RISK_CLASS_ORDER))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, version={self.version!r}, mpor_days={self.mpor_days})"

    # ---- tables ----------------------------------------------------------

    def buckets(self, risk_type: RiskType) -> List[str]:
        return list(self._buckets.get(risk_type, []))

    def labels1(self, risk_type: RiskType) -> List[str]:
        return list(self._labels1.get(risk_type, []))

    def labels2(self, risk_type: RiskType) -> List[str]:
        return list(self._labels2.get(risk_type, []))

    def has_buckets(self, risk_type: RiskType) -> bool:
        return bool(self._buckets.get(risk_type))

    def is_valid_risk_type(self, risk_type: RiskType) -> bool:
        return (risk_type in self._rw_risk_type
                or risk_type in self._rw_bucket
                or risk_type in self._rw_label1)

    def bucket(self, risk_type: RiskType, qualifier: str) -> str:
        return self.bucket_mapper.bucket(risk_type, qualifier)

    def add_labels2(self, risk_type: RiskType, label2: str) -> None:
        """Extend the admissible Label2 values of a risk type."""
        labels = self._labels2.setdefault(risk_type, [])
        if label2 not in labels:
            labels.append(label2)

    # ---- weights ---------------------------------------------------------

    def _label1_index(self, risk_type: RiskType, label1: Optional[str]) -> int:
        labels = self._labels1.get(risk_type, [])
        key = (label1 or "").lower()
        for i, label in enumerate(labels):
            if label.lower() == key:
                return i
        raise ConfigurationError(f"Label1 '{label1}' is not valid for {risk_type.value}")

    def weight(
        self,
        risk_type: RiskType,
        qualifier: Optional[str] = None,
        label1: Optional[str] = None,
        calculation_currency: str = "USD"
    ) -> float:
        """
        Risk weight of a sensitivity.

        Args:
            risk_type: CRIF risk type
            qualifier: CRIF qualifier (currency, issuer, equity name)
            label1: CRIF Label1 (tenor)
            calculation_currency: SIMM calculation currency

        Returns:
            Risk weight

        Raises:
            ConfigurationError: If the risk type is not configured or the
                qualifier / label cannot be mapped
        """
        if risk_type in self._rw_risk_type:
            return self._rw_risk_type[risk_type]

        if risk_type in self._rw_bucket:
            if qualifier is None:
                raise ConfigurationError(f"{risk_type.value} risk weight needs a qualifier")
            b = self.bucket(risk_type, qualifier)
            try:
                return self._rw_bucket[risk_type][b]
            except KeyError:
                raise ConfigurationError(f"No {risk_type.value} risk weight for bucket {b}") from None

        if risk_type in self._rw_label1:
            if qualifier is None:
                raise ConfigurationError(f"{risk_type.value} risk weight needs a qualifier")
            b = self.bucket(risk_type, qualifier)
            return self._rw_label1[risk_type][b][self._label1_index(risk_type, label1)]

        raise ConfigurationError(f"Risk type {risk_type.value} is not configured in {self.name}")

    def historical_volatility_ratio(self, risk_type: RiskType) -> float:
        return self._hvr.get(risk_type, 1.0)

    def curvature_margin_scaling(self) -> float:
        raise NotImplementedError

    # ---- correlations ----------------------------------------------------

    def correlation(
        self,
        risk_type_1: RiskType,
        qualifier_1: str,
        label1_1: str,
        label2_1: str,
        risk_type_2: RiskType,
        qualifier_2: str,
        label1_2: str,
        label2_2: str,
        calculation_currency: str = "USD"
    ) -> float:
        raise NotImplementedError

    def label2(self, index_name: str, is_overnight: Optional[bool] = None) -> str:
        raise NotImplementedError

    def risk_class_correlation(self, rc1: RiskClass, rc2: RiskClass) -> float:
        return float(self._risk_class_correlation[
            RISK_CLASS_ORDER.index(rc1), RISK_CLASS_ORDER.index(rc2)])

    def intra_bucket_correlation(self, risk_type: RiskType, bucket: str) -> float:
        try:
            return self._intra_bucket_correlation[risk_type][bucket]
        except KeyError:
            raise ConfigurationError(
                f"No intra-bucket correlation for {risk_type.value} bucket {bucket}") from None

    def inter_bucket_correlation(self, risk_type: RiskType, bucket_1: str, bucket_2: str) -> float:
        """Correlation between two buckets, zero when either is residual."""
        if bucket_1 == bucket_2:
            return 1.0
        if bucket_1 == RESIDUAL or bucket_2 == RESIDUAL:
            return 0.0
        if risk_type not in self._inter_bucket_correlation:
            raise ConfigurationError(f"No inter-bucket correlation for {risk_type.value}")
        buckets = [b for b in self._buckets[risk_type] if b != RESIDUAL]
        return float(self._inter_bucket_correlation[risk_type][
            buckets.index(bucket_1), buckets.index(bucket_2)])

    # ---- groups ----------------------------------------------------------

    @staticmethod
    def group(qualifier: str, groups: Mapping[int, Set[str]]) -> int:
        """
        Index of the group containing a qualifier.

        Args:
            qualifier: Qualifier, e.g. a currency code
            groups: Partition of qualifiers by group index

        Returns:
            Group index

        Raises:
            ConfigurationError: If the qualifier is in no group or in
                more than one
        """
        found = [g for g, members in groups.items() if qualifier in members]
        if not found:
            raise ConfigurationError(f"Qualifier {qualifier} is not in any group")
        if len(found) > 1:
            raise ConfigurationError(f"Qualifier {qualifier} is in several groups {sorted(found)}")
        return found[0]

    @staticmethod
    def margin_type(risk_type: RiskType) -> MarginType:
        return risk_type.margin_type

    @staticmethod
    def risk_class(risk_type: RiskType) -> RiskClass:
        return risk_type.risk_class


__all__ = [
    "SimmConfiguration",
    "RISK_CLASS_ORDER",
    "frozen_matrix",
]
