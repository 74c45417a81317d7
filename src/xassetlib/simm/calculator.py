"""
SIMM margin aggregation.

For each product class and risk class:

    WS_k   = RW_k * HVR * s_k                        weighted sensitivity
    K_b    = sqrt(sum_kl rho_kl WS_k WS_l)            within bucket b
    S_b    = max(min(sum_k WS_k, K_b), -K_b)
    M      = sqrt(sum_b K_b^2 + sum_b!=c gamma_bc S_b S_c) + K_residual

computed separately for delta, vega and base correlation risk. The risk
class margin is the sum over margin types, the product class margin
aggregates risk classes with the psi matrix

    SIMM_p = sqrt(sum_rs psi_rs SIMM_r SIMM_s)

and the total is the sum over product classes. Concentration risk
factors are taken as 1 and curvature margin is not computed.
"""

import logging
from collections import OrderedDict
from typing import Dict, List, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..errors import UnsupportedFeatureError
from .bucket_mapper import RESIDUAL
from .configuration import RISK_CLASS_ORDER, SimmConfiguration
from .crif import CrifRecord, load_crif
from .risk_types import MarginType, ProductClass, RiskClass, RiskType

logger = logging.getLogger(__name__)

ALL = "All"
RESULT_COLUMNS = ["ProductClass", "RiskClass", "MarginType", "Bucket", "Margin", "Currency"]

FactorKey = Tuple[RiskType, str, str, str]


class SimmCalculator:
    """
    SIMM calculator over CRIF sensitivities.

    Args:
        configuration: SIMM configuration (tables for one version)
        calculation_currency: Currency of the CRIF USD amounts and of the
            result; FX delta to this currency is ignored

    Example:
        >>> calc = SimmCalculator(SimmConfiguration_ISDA_V2_3_8())
        >>> results = calc.calculate(crif_df)
        >>> calc.total(crif_df)
    """

    def __init__(self, configuration: SimmConfiguration, calculation_currency: str = "USD"):
        self.configuration = configuration
        self.calculation_currency = calculation_currency

    def _records(self, crif: Union[pd.DataFrame, Sequence[CrifRecord]]) -> List[CrifRecord]:
        records = load_crif(crif) if isinstance(crif, pd.DataFrame) else list(crif)
        kept = []
        mapper = self.configuration.bucket_mapper
        for r in records:
            if not self.configuration.is_valid_risk_type(r.risk_type):
                raise UnsupportedFeatureError(
                    f"Risk type {r.risk_type.value} is not supported by {self.configuration.name}")
            if r.risk_type == RiskType.FX and r.qualifier == self.calculation_currency:
                logger.debug("Skipping FX delta in calculation currency %s", r.qualifier)
                continue
            if (r.bucket and r.risk_type.risk_class in (RiskClass.CREDIT_QUALIFYING, RiskClass.EQUITY)
                    and r.risk_type != RiskType.BASE_CORR
                    and (r.risk_type, r.qualifier) not in mapper):
                mapper.add_mappings(r.risk_type, {r.qualifier: r.bucket})
            kept.append(r)
        return kept

    def _bucket_of(self, r: CrifRecord) -> str:
        rc = r.risk_type.risk_class
        if rc == RiskClass.INTEREST_RATE:
            return r.qualifier
        if rc == RiskClass.FX or r.risk_type == RiskType.BASE_CORR:
            return ALL
        return self.configuration.bucket(r.risk_type, r.qualifier)

    def weighted_sensitivities(self, records: Sequence[CrifRecord]) -> Dict[FactorKey, float]:
        """Net sensitivities per risk factor and apply risk weights."""
        net: Dict[FactorKey, float] = OrderedDict()
        for r in records:
            key = (r.risk_type, r.qualifier, r.label1, r.label2)
            net[key] = net.get(key, 0.0) + r.amount_usd

        ws = OrderedDict()
        for key, amount in net.items():
            rt, qualifier, label1, _ = key
            rw = self.configuration.weight(rt, qualifier, label1 or None, self.calculation_currency)
            ws[key] = rw * self.configuration.historical_volatility_ratio(rt) * amount
        return ws

    def _bucket_margin(self, keys: List[FactorKey], values: np.ndarray) -> Tuple[float, float]:
        n = len(keys)
        rho = np.eye(n)
        for i in range(n):
            for j in range(i + 1, n):
                k1, k2 = keys[i], keys[j]
                rho[i, j] = rho[j, i] = self.configuration.correlation(
                    k1[0], k1[1], k1[2], k1[3], k2[0], k2[1], k2[2], k2[3],
                    self.calculation_currency)
        k = float(np.sqrt(max(values @ rho @ values, 0.0)))
        s = float(np.clip(values.sum(), -k, k))
        return k, s

    def margin(self, records: Sequence[CrifRecord]) -> Tuple[float, Dict[str, float]]:
        """
        Margin of one risk class and margin type.

        Returns:
            (margin, K_b by bucket)
        """
        if not records:
            return 0.0, {}
        ws = self.weighted_sensitivities(records)
        bucket_of = {}
        for r in records:
            bucket_of[(r.risk_type, r.qualifier, r.label1, r.label2)] = self._bucket_of(r)

        by_bucket: Dict[str, List[FactorKey]] = OrderedDict()
        for key in ws:
            by_bucket.setdefault(bucket_of[key], []).append(key)

        k_b, s_b = OrderedDict(), OrderedDict()
        for b, keys in by_bucket.items():
            k_b[b], s_b[b] = self._bucket_margin(keys, np.array([ws[k] for k in keys]))

        risk_type = records[0].risk_type
        buckets = [b for b in k_b if b != RESIDUAL]
        total = sum(k_b[b] ** 2 for b in buckets)
        for i, b in enumerate(buckets):
            for c in buckets[i + 1:]:
                gamma = self.configuration.inter_bucket_correlation(risk_type, b, c)
                total += 2.0 * gamma * s_b[b] * s_b[c]
        value = float(np.sqrt(max(total, 0.0))) + k_b.get(RESIDUAL, 0.0)
        return value, dict(k_b)

    def calculate(
        self,
        crif: Union[pd.DataFrame, Sequence[CrifRecord]],
        include_buckets: bool = False
    ) -> pd.DataFrame:
        """
        Compute SIMM.

        Args:
            crif: CRIF DataFrame or records
            include_buckets: Also report K_b per bucket

        Returns:
            DataFrame with columns ProductClass, RiskClass, MarginType,
            Bucket, Margin, Currency. Aggregate levels use "All".
        """
        records = self._records(crif)
        groups: Dict[ProductClass, Dict[RiskClass, Dict[MarginType, List[CrifRecord]]]] = OrderedDict()
        for r in records:
            (groups.setdefault(r.product_class, OrderedDict())
                   .setdefault(r.risk_type.risk_class, OrderedDict())
                   .setdefault(r.risk_type.margin_type, []).append(r))

        rows = []
        ccy = self.calculation_currency
        grand_total = 0.0
        for pc, classes in groups.items():
            class_margins = np.zeros(len(RISK_CLASS_ORDER))
            for rc, margin_types in classes.items():
                rc_total = 0.0
                for mt, recs in margin_types.items():
                    value, k_b = self.margin(recs)
                    rc_total += value
                    if include_buckets:
                        for b, k in k_b.items():
                            rows.append([pc.value, rc.value, mt.value, b, k, ccy])
                    rows.append([pc.value, rc.value, mt.value, ALL, value, ccy])
                rows.append([pc.value, rc.value, ALL, ALL, rc_total, ccy])
                class_margins[RISK_CLASS_ORDER.index(rc)] = rc_total

            psi = np.array([[self.configuration.risk_class_correlation(a, b) for b in RISK_CLASS_ORDER]
                            for a in RISK_CLASS_ORDER])
            pc_total = float(np.sqrt(max(class_margins @ psi @ class_margins, 0.0)))
            rows.append([pc.value, ALL, ALL, ALL, pc_total, ccy])
            grand_total += pc_total

        rows.append([ALL, ALL, ALL, ALL, grand_total, ccy])
        logger.info("SIMM %s: %d sensitivities, total %.2f %s",
                    self.configuration.version, len(records), grand_total, ccy)
        return pd.DataFrame(rows, columns=RESULT_COLUMNS)

    def total(self, crif: Union[pd.DataFrame, Sequence[CrifRecord]]) -> float:
        results = self.calculate(crif)
        return float(results.iloc[-1]["Margin"])


__all__ = [
    "SimmCalculator",
    "RESULT_COLUMNS",
    "ALL",
]
