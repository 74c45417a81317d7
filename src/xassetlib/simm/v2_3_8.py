"""
ISDA SIMM v2.3.8 configuration (effective December 2021), 10-day MPOR.

Tables cover the interest rate, FX, qualifying credit and equity risk
classes. Commodity, non-qualifying credit, curvature and concentration
thresholds are not tabulated.
"""

import re
from typing import Optional

from ..errors import ConfigurationError
from .bucket_mapper import RESIDUAL, SimmBucketMapper
from .configuration import SimmConfiguration, frozen_matrix
from .risk_types import RiskClass, RiskType

# Interest rate tenors (Label1)
ir_tenors = ['2w', '1m', '3m', '6m', '1y', '2y', '3y', '5y', '10y', '15y', '20y', '30y']

# Interest rate sub-curves (Label2)
ir_sub_curves = ['OIS', 'Libor1m', 'Libor3m', 'Libor6m', 'Libor12m', 'Prime', 'Municipal']

# Risk Weights for Regular/Low/High Vol Currency Bucket
reg_vol_rw = {
    '2w'  : 109,
    '1m'  : 105,
    '3m'  : 90,
    '6m'  : 71,
    '1y'  : 66,
    '2y'  : 66,
    '3y'  : 64,
    '5y'  : 60,
    '10y' : 60,
    '15y' : 61,
    '20y' : 61,
    '30y' : 67,
}

low_vol_rw = {
    '2w'  : 15,
    '1m'  : 18,
    '3m'  : 9,
    '6m'  : 11,
    '1y'  : 13,
    '2y'  : 15,
    '3y'  : 19,
    '5y'  : 23,
    '10y' : 23,
    '15y' : 22,
    '20y' : 22,
    '30y' : 23,
}

high_vol_rw = {
    '2w'  : 163,
    '1m'  : 109,
    '3m'  : 87,
    '6m'  : 89,
    '1y'  : 102,
    '2y'  : 96,
    '3y'  : 101,
    '5y'  : 97,
    '10y' : 97,
    '15y' : 102,
    '20y' : 106,
    '30y' : 101,
}

# Risk Weights for Inflation Rate/Cross-Currency Basis Swap Spread
inflation_rw = 61
ccy_basis_swap_spread_rw = 21

# Historical Volatility Ratio for Interest Rate Risk Class
ir_hvr = 0.47

# Vega Risk Weight for Interest Rate Risk Class
ir_vrw = 0.23

# IR Correlations - 12x12 tenor correlation matrix
ir_corr = [
    [1.00, 0.77, 0.67, 0.59, 0.48, 0.39, 0.34, 0.30, 0.25, 0.23, 0.21, 0.20],
    [0.77, 1.00, 0.84, 0.74, 0.56, 0.43, 0.36, 0.31, 0.26, 0.21, 0.19, 0.19],
    [0.67, 0.84, 1.00, 0.88, 0.69, 0.55, 0.47, 0.40, 0.34, 0.27, 0.25, 0.25],
    [0.59, 0.74, 0.88, 1.00, 0.86, 0.73, 0.65, 0.57, 0.49, 0.40, 0.38, 0.37],
    [0.48, 0.56, 0.69, 0.86, 1.00, 0.94, 0.87, 0.79, 0.68, 0.60, 0.57, 0.55],
    [0.39, 0.43, 0.55, 0.73, 0.94, 1.00, 0.96, 0.91, 0.80, 0.74, 0.70, 0.69],
    [0.34, 0.36, 0.47, 0.65, 0.87, 0.96, 1.00, 0.97, 0.88, 0.81, 0.77, 0.76],
    [0.30, 0.31, 0.40, 0.57, 0.79, 0.91, 0.97, 1.00, 0.95, 0.90, 0.86, 0.85],
    [0.25, 0.26, 0.34, 0.49, 0.68, 0.80, 0.88, 0.95, 1.00, 0.97, 0.94, 0.94],
    [0.23, 0.21, 0.27, 0.40, 0.60, 0.74, 0.81, 0.90, 0.97, 1.00, 0.98, 0.97],
    [0.21, 0.19, 0.25, 0.38, 0.57, 0.70, 0.77, 0.86, 0.94, 0.98, 1.00, 0.99],
    [0.20, 0.19, 0.25, 0.37, 0.55, 0.69, 0.76, 0.85, 0.94, 0.97, 0.99, 1.00],
]

# Correlation between sub-curves of one currency
sub_curves_corr = 0.993

# Correlation between inflation rate and any yield curve / IR vol and inflation vol
inflation_corr = 0.24

# Correlation between cross currency basis and any other IR risk factor
ccy_basis_spread_corr = 0.04

# Correlation between different currencies
ir_gamma_diff_ccy = 0.32

# Credit Qualifying tenors (Label1) and Label2
creditQ_tenors = ['1y', '2y', '3y', '5y', '10y']
creditQ_labels2 = ['', 'Sec']

# Credit Qualifying Risk Weights
creditQ_rw = {
    '1':  75,
    '2':  90,
    '3':  84,
    '4':  54,
    '5':  62,
    '6':  48,
    '7':  185,
    '8':  343,
    '9':  255,
    '10': 250,
    '11': 214,
    '12': 173,
    RESIDUAL: 343,
}

# Vega Risk Weight for Credit Qualifying
creditQ_vrw = 0.74

# Base Correlation Weight
base_corr_weight = 10

# Correlation between base correlation risk factors
base_corr_corr = 0.24

# Credit Qualifying Correlations
# [same qualifier, different qualifier, residual same qualifier, residual different qualifier]
creditQ_corr = [0.93, 0.46, 0.5, 0.29]

# Correlations for Credit Qualifying across different non-residual buckets
creditQ_corr_non_res = [
    [1.00, 0.38, 0.38, 0.35, 0.37, 0.34, 0.42, 0.32, 0.34, 0.33, 0.34, 0.33],
    [0.38, 1.00, 0.48, 0.46, 0.48, 0.46, 0.39, 0.40, 0.41, 0.41, 0.43, 0.40],
    [0.38, 0.48, 1.00, 0.50, 0.51, 0.50, 0.40, 0.39, 0.45, 0.44, 0.47, 0.42],
    [0.35, 0.46, 0.50, 1.00, 0.50, 0.50, 0.37, 0.37, 0.41, 0.43, 0.45, 0.40],
    [0.37, 0.48, 0.51, 0.50, 1.00, 0.50, 0.39, 0.38, 0.43, 0.43, 0.46, 0.42],
    [0.34, 0.46, 0.50, 0.50, 0.50, 1.00, 0.37, 0.35, 0.39, 0.41, 0.44, 0.41],
    [0.42, 0.39, 0.40, 0.37, 0.39, 0.37, 1.00, 0.33, 0.37, 0.37, 0.35, 0.35],
    [0.32, 0.40, 0.39, 0.37, 0.38, 0.35, 0.33, 1.00, 0.36, 0.37, 0.37, 0.36],
    [0.34, 0.41, 0.45, 0.41, 0.43, 0.39, 0.37, 0.36, 1.00, 0.41, 0.40, 0.38],
    [0.33, 0.41, 0.44, 0.43, 0.43, 0.41, 0.37, 0.37, 0.41, 1.00, 0.41, 0.39],
    [0.34, 0.43, 0.47, 0.45, 0.46, 0.44, 0.35, 0.37, 0.40, 0.41, 1.00, 0.40],
    [0.33, 0.40, 0.42, 0.40, 0.42, 0.41, 0.35, 0.36, 0.38, 0.39, 0.40, 1.00],
]

# Equity Risk Weights
equity_rw = {
    '1':  30,
    '2':  33,
    '3':  36,
    '4':  29,
    '5':  26,
    '6':  25,
    '7':  34,
    '8':  28,
    '9':  36,
    '10': 50,
    '11': 19,
    '12': 19,
    RESIDUAL: 50,
}

# Historical Volatility Ratio for Equity
equity_hvr = 0.6

# Vega Risk Weight for Equity
equity_vrw = 0.45
equity_vrw_bucket_12 = 0.96

# Equity Correlations
equity_corr = {
    '1':  0.18,
    '2':  0.20,
    '3':  0.28,
    '4':  0.24,
    '5':  0.25,
    '6':  0.36,
    '7':  0.35,
    '8':  0.37,
    '9':  0.23,
    '10': 0.27,
    '11': 0.45,
    '12': 0.45,
    RESIDUAL: 0.0,
}

# Equity correlations across different non-residual buckets
equity_corr_non_res = [
    [1.00, 0.18, 0.19, 0.19, 0.14, 0.16, 0.15, 0.16, 0.18, 0.12, 0.19, 0.19],
    [0.18, 1.00, 0.22, 0.21, 0.15, 0.18, 0.17, 0.19, 0.20, 0.14, 0.21, 0.21],
    [0.19, 0.22, 1.00, 0.22, 0.13, 0.16, 0.18, 0.17, 0.22, 0.13, 0.20, 0.20],
    [0.19, 0.21, 0.22, 1.00, 0.17, 0.22, 0.22, 0.23, 0.22, 0.17, 0.26, 0.26],
    [0.14, 0.15, 0.13, 0.17, 1.00, 0.29, 0.26, 0.29, 0.14, 0.24, 0.32, 0.32],
    [0.16, 0.18, 0.16, 0.22, 0.29, 1.00, 0.34, 0.36, 0.17, 0.30, 0.39, 0.39],
    [0.15, 0.17, 0.18, 0.22, 0.26, 0.34, 1.00, 0.33, 0.16, 0.28, 0.36, 0.36],
    [0.16, 0.19, 0.17, 0.23, 0.29, 0.36, 0.33, 1.00, 0.17, 0.29, 0.40, 0.40],
    [0.18, 0.20, 0.22, 0.22, 0.14, 0.17, 0.16, 0.17, 1.00, 0.13, 0.21, 0.21],
    [0.12, 0.14, 0.13, 0.17, 0.24, 0.30, 0.28, 0.29, 0.13, 1.00, 0.30, 0.30],
    [0.19, 0.21, 0.20, 0.26, 0.32, 0.39, 0.36, 0.40, 0.21, 0.30, 1.00, 0.45],
    [0.19, 0.21, 0.20, 0.26, 0.32, 0.39, 0.36, 0.40, 0.21, 0.30, 0.45, 1.00],
]

# FX volatility groups, 0 Regular, 1 High
high_vol_currency_group = {'BRL', 'RUB', 'TRY'}
regular_vol_currency_group = {
    'AED', 'AFN', 'ALL', 'AMD', 'ANG', 'AOA', 'ARS', 'AUD', 'AWG', 'AZN',
    'BAM', 'BBD', 'BDT', 'BGN', 'BHD', 'BIF', 'BMD', 'BND', 'BOB', 'BSD',
    'BTN', 'BWP', 'BYN', 'BZD', 'CAD', 'CDF', 'CHF', 'CLF', 'CLP', 'CNH',
    'CNY', 'COP', 'CRC', 'CUP', 'CVE', 'CZK', 'DJF', 'DKK', 'DOP', 'DZD',
    'EGP', 'ERN', 'ETB', 'EUR', 'FJD', 'FKP', 'GBP', 'GEL', 'GHS', 'GIP',
    'GMD', 'GNF', 'GTQ', 'GYD', 'HKD', 'HNL', 'HRK', 'HTG', 'HUF', 'IDR',
    'ILS', 'INR', 'IQD', 'IRR', 'ISK', 'JMD', 'JOD', 'JPY', 'KES', 'KGS',
    'KHR', 'KMF', 'KPW', 'KRW', 'KWD', 'KYD', 'KZT', 'LAK', 'LBP', 'LKR',
    'LRD', 'LSL', 'LYD', 'MAD', 'MDL', 'MGA', 'MKD', 'MMK', 'MNT', 'MOP',
    'MRU', 'MUR', 'MVR', 'MWK', 'MXN', 'MYR', 'MZN', 'NAD', 'NGN', 'NIO',
    'NOK', 'NPR', 'NZD', 'OMR', 'PAB', 'PEN', 'PGK', 'PHP', 'PKR', 'PLN',
    'PYG', 'QAR', 'RON', 'RSD', 'RWF', 'SAR', 'SBD', 'SCR', 'SDG', 'SEK',
    'SGD', 'SHP', 'SLL', 'SOS', 'SRD', 'SSP', 'STN', 'SVC', 'SYP', 'SZL',
    'THB', 'TJS', 'TMT', 'TND', 'TOP', 'TTD', 'TWD', 'TZS', 'UAH', 'UGX',
    'USD', 'UYU', 'UZS', 'VES', 'VND', 'VUV', 'WST', 'XAF', 'XCD', 'XOF',
    'XPF', 'YER', 'ZAR', 'ZMW', 'ZWL',
}

# FX Risk Weights, [group of qualifier][group of calculation currency]
fx_rw = [
    [7.4, 14.7],
    [14.7, 21.4],
]

# Historical Volatility Ratio for FX
fx_hvr = 0.57

# Vega Risk Weight for FX
fx_vrw = 0.48

# FX Correlations (Regular Vol calculation currency)
fx_reg_vol_corr = [
    [0.5, 0.27],
    [0.27, 0.42],
]

# FX Correlations (High Vol calculation currency)
fx_high_vol_corr = [
    [0.85, 0.54],
    [0.54, 0.5],
]

# FX Vega Correlation
fx_vega_corr = 0.5

# Correlation between Risk Classes
# IR, CreditQ, CreditNonQ, Equity, Commodity, FX
corr_params = [
    [1.00, 0.04, 0.04, 0.07, 0.37, 0.14],
    [0.04, 1.00, 0.54, 0.70, 0.27, 0.37],
    [0.04, 0.54, 1.00, 0.46, 0.24, 0.15],
    [0.07, 0.70, 0.46, 1.00, 0.35, 0.39],
    [0.37, 0.27, 0.24, 0.35, 1.00, 0.35],
    [0.14, 0.37, 0.15, 0.39, 0.35, 1.00],
]

curvature_margin_scaling = 2.3

_IR_DELTA_TYPES = {RiskType.IR_CURVE, RiskType.INFLATION, RiskType.XCCY_BASIS}
_IR_VEGA_TYPES = {RiskType.IR_VOL, RiskType.INFLATION_VOL}

_TENOR = re.compile(r'^(\d+)([DWMY])$')
_OVERNIGHT_TENORS = {'ON', 'TN', 'SN', '1D'}
_LIBOR_LABELS = {'1M': 'Libor1m', '3M': 'Libor3m', '6M': 'Libor6m', '12M': 'Libor12m', '1Y': 'Libor12m'}


class SimmConfiguration_ISDA_V2_3_8(SimmConfiguration):
    """
    SIMM v2.3.8 tables.

    Args:
        bucket_mapper: Qualifier to bucket mapping for credit and equity
        mpor_days: Margin period of risk, only 10 days is tabulated
        name: Configuration name
        version: Version string

    Raises:
        ConfigurationError: For an MPOR other than 10 days or inconsistent
            FX volatility groups
    """

    def __init__(
        self,
        bucket_mapper: Optional[SimmBucketMapper] = None,
        mpor_days: int = 10,
        name: str = "SIMM ISDA 2.3.8 (26 July 2021)",
        version: str = "2.3.8"
    ):
        if mpor_days != 10:
            raise ConfigurationError(f"SIMM {version} is only configured for a 10 day MPOR, got {mpor_days}")
        super().__init__(bucket_mapper or SimmBucketMapper(), name, version, mpor_days)

        ir_buckets = ['1', '2', '3']
        credit_buckets = [str(i) for i in range(1, 13)] + [RESIDUAL]
        equity_buckets = [str(i) for i in range(1, 13)] + [RESIDUAL]

        for rt in _IR_DELTA_TYPES | _IR_VEGA_TYPES:
            self._buckets[rt] = list(ir_buckets)
        for rt in (RiskType.CREDIT_Q, RiskType.CREDIT_VOL):
            self._buckets[rt] = list(credit_buckets)
        for rt in (RiskType.EQUITY, RiskType.EQUITY_VOL):
            self._buckets[rt] = list(equity_buckets)

        for rt in (RiskType.IR_CURVE, RiskType.IR_VOL, RiskType.INFLATION_VOL,
                   RiskType.EQUITY_VOL, RiskType.FX_VOL):
            self._labels1[rt] = list(ir_tenors)
        for rt in (RiskType.CREDIT_Q, RiskType.CREDIT_VOL):
            self._labels1[rt] = list(creditQ_tenors)
        self._labels2[RiskType.IR_CURVE] = list(ir_sub_curves)
        self._labels2[RiskType.CREDIT_Q] = list(creditQ_labels2)

        self._rw_label1[RiskType.IR_CURVE] = {
            '1': [reg_vol_rw[t] for t in ir_tenors],
            '2': [low_vol_rw[t] for t in ir_tenors],
            '3': [high_vol_rw[t] for t in ir_tenors],
        }
        self._rw_risk_type.update({
            RiskType.INFLATION: inflation_rw,
            RiskType.XCCY_BASIS: ccy_basis_swap_spread_rw,
            RiskType.IR_VOL: ir_vrw,
            RiskType.INFLATION_VOL: ir_vrw,
            RiskType.FX_VOL: fx_vrw,
            RiskType.CREDIT_VOL: creditQ_vrw,
            RiskType.BASE_CORR: base_corr_weight,
        })
        self._rw_bucket[RiskType.CREDIT_Q] = dict(creditQ_rw)
        self._rw_bucket[RiskType.EQUITY] = dict(equity_rw)
        self._rw_bucket[RiskType.EQUITY_VOL] = {
            b: (equity_vrw_bucket_12 if b == '12' else equity_vrw) for b in equity_buckets}

        self._hvr.update({
            RiskType.IR_VOL: ir_hvr,
            RiskType.INFLATION_VOL: ir_hvr,
            RiskType.EQUITY_VOL: equity_hvr,
            RiskType.FX_VOL: fx_hvr,
        })

        self._intra_bucket_correlation[RiskType.EQUITY] = dict(equity_corr)
        self._intra_bucket_correlation[RiskType.EQUITY_VOL] = dict(equity_corr)

        credit_inter = frozen_matrix(creditQ_corr_non_res, "CreditQ inter-bucket correlation")
        equity_inter = frozen_matrix(equity_corr_non_res, "Equity inter-bucket correlation")
        self._inter_bucket_correlation[RiskType.CREDIT_Q] = credit_inter
        self._inter_bucket_correlation[RiskType.CREDIT_VOL] = credit_inter
        self._inter_bucket_correlation[RiskType.EQUITY] = equity_inter
        self._inter_bucket_correlation[RiskType.EQUITY_VOL] = equity_inter

        self._ir_correlation = frozen_matrix(ir_corr, "IR tenor correlation")
        self._risk_class_correlation = frozen_matrix(corr_params, "Risk class correlation")

        self._ccy_groups = {
            0: frozenset(regular_vol_currency_group),
            1: frozenset(high_vol_currency_group),
        }
        for ccy in regular_vol_currency_group | high_vol_currency_group:
            self.group(ccy, self._ccy_groups)
        self._rw_fx = [list(row) for row in fx_rw]
        self._fx_reg_vol_correlation = [list(row) for row in fx_reg_vol_corr]
        self._fx_high_vol_correlation = [list(row) for row in fx_high_vol_corr]

    @property
    def ccy_groups(self):
        return dict(self._ccy_groups)

    def is_valid_risk_type(self, risk_type: RiskType) -> bool:
        return risk_type == RiskType.FX or super().is_valid_risk_type(risk_type)

    def curvature_margin_scaling(self) -> float:
        return curvature_margin_scaling

    def label2(self, index_name: str, is_overnight: Optional[bool] = None) -> str:
        """
        SIMM sub-curve of an interest rate index.

        Args:
            index_name: Index name, e.g. "USD-LIBOR-3M", "EUR-ESTER"
            is_overnight: Whether the index is an overnight index; when
                None an index without a tenor is treated as overnight

        Returns:
            Label2 value

        Raises:
            ConfigurationError: For an index tenor with no sub-curve
        """
        name = index_name.strip().upper()
        if name.startswith('BMA') or '-BMA' in name or 'SIFMA' in name:
            return 'Municipal'
        if 'PRIME' in name:
            return 'Prime'

        tokens = name.split('-')
        tenor = tokens[-1] if len(tokens) > 1 else None
        if tenor is not None and tenor not in _OVERNIGHT_TENORS and not _TENOR.match(tenor):
            tenor = None

        if is_overnight is None:
            is_overnight = tenor is None or tenor in _OVERNIGHT_TENORS
        if is_overnight:
            return 'OIS'
        if tenor in _LIBOR_LABELS:
            return _LIBOR_LABELS[tenor]
        raise ConfigurationError(f"No SIMM Label2 for index {index_name}")

    def add_labels2(self, risk_type: RiskType, label2: str) -> None:
        """Add a Libor style sub-curve, e.g. "Libor2m", to Risk_IRCurve."""
        if risk_type != RiskType.IR_CURVE:
            raise ConfigurationError(f"Label2 values can only be added for {RiskType.IR_CURVE.value}")
        match = re.match(r'^Libor(\d+)([dwmy])$', label2)
        if label2 not in ir_sub_curves and match is None:
            raise ConfigurationError(f"Label2 {label2} is not a valid sub-curve")
        super().add_labels2(risk_type, label2)

    def weight(
        self,
        risk_type: RiskType,
        qualifier: Optional[str] = None,
        label1: Optional[str] = None,
        calculation_currency: str = "USD"
    ) -> float:
        if risk_type == RiskType.FX:
            if qualifier is None:
                raise ConfigurationError("FX risk weight needs a qualifier")
            g1 = self.group(qualifier, self._ccy_groups)
            g2 = self.group(calculation_currency, self._ccy_groups)
            return self._rw_fx[g1][g2]
        return super().weight(risk_type, qualifier, label1, calculation_currency)

    def inter_bucket_correlation(self, risk_type: RiskType, bucket_1: str, bucket_2: str) -> float:
        # interest rate buckets are currencies at aggregation level
        if risk_type.risk_class == RiskClass.INTEREST_RATE:
            return 1.0 if bucket_1 == bucket_2 else ir_gamma_diff_ccy
        return super().inter_bucket_correlation(risk_type, bucket_1, bucket_2)

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
        """
        Correlation between two risk factors.

        Factors of different risk classes are correlated by the risk class
        correlation. Within a class, delta and vega factors are
        uncorrelated.
        """
        if (risk_type_1 == risk_type_2 and qualifier_1 == qualifier_2
                and label1_1 == label1_2 and label2_1 == label2_2):
            return 1.0

        rc1, rc2 = risk_type_1.risk_class, risk_type_2.risk_class
        if rc1 != rc2:
            return self.risk_class_correlation(rc1, rc2)
        if risk_type_1.margin_type != risk_type_2.margin_type:
            return 0.0

        if rc1 == RiskClass.INTEREST_RATE:
            return self._ir_correlation_of(
                risk_type_1, qualifier_1, label1_1, label2_1,
                risk_type_2, qualifier_2, label1_2, label2_2)
        if rc1 == RiskClass.FX:
            # vega of one pair aggregates across its tenors
            if qualifier_1 == qualifier_2:
                return 1.0
            if risk_type_1 == RiskType.FX_VOL:
                return fx_vega_corr
            g1 = self.group(qualifier_1, self._ccy_groups)
            g2 = self.group(qualifier_2, self._ccy_groups)
            if self.group(calculation_currency, self._ccy_groups) == 1:
                return self._fx_high_vol_correlation[g1][g2]
            return self._fx_reg_vol_correlation[g1][g2]
        if rc1 == RiskClass.CREDIT_QUALIFYING:
            if risk_type_1 == RiskType.BASE_CORR:
                return 1.0 if qualifier_1 == qualifier_2 else base_corr_corr
            b1 = self.bucket(risk_type_1, qualifier_1)
            b2 = self.bucket(risk_type_2, qualifier_2)
            if b1 != b2:
                return self.inter_bucket_correlation(risk_type_1, b1, b2)
            same = qualifier_1 == qualifier_2
            if b1 == RESIDUAL:
                return creditQ_corr[2] if same else creditQ_corr[3]
            return creditQ_corr[0] if same else creditQ_corr[1]
        if rc1 == RiskClass.EQUITY:
            b1 = self.bucket(risk_type_1, qualifier_1)
            b2 = self.bucket(risk_type_2, qualifier_2)
            if b1 != b2:
                return self.inter_bucket_correlation(risk_type_1, b1, b2)
            if qualifier_1 == qualifier_2:
                return 1.0
            return self.intra_bucket_correlation(risk_type_1, b1)

        raise ConfigurationError(f"Risk class {rc1.value} is not configured in {self.name}")

    def _ir_correlation_of(self, rt1, q1, l1_1, l2_1, rt2, q2, l1_2, l2_2) -> float:
        if q1 != q2:
            return ir_gamma_diff_ccy

        if rt1 in _IR_VEGA_TYPES:
            if rt1 != rt2:
                return inflation_corr
            i = self._label1_index(rt1, l1_1)
            j = self._label1_index(rt2, l1_2)
            return float(self._ir_correlation[i, j])

        if RiskType.XCCY_BASIS in (rt1, rt2):
            return 1.0 if rt1 == rt2 else ccy_basis_spread_corr
        if RiskType.INFLATION in (rt1, rt2):
            return 1.0 if rt1 == rt2 else inflation_corr

        i = self._label1_index(RiskType.IR_CURVE, l1_1)
        j = self._label1_index(RiskType.IR_CURVE, l1_2)
        rho = float(self._ir_correlation[i, j])
        return rho if l2_1 == l2_2 else rho * sub_curves_corr


__all__ = [
    "SimmConfiguration_ISDA_V2_3_8",
]
