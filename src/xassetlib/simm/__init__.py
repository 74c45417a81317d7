"""
SIMM package - ISDA Standard Initial Margin Model.

Provides:
- CRIF risk taxonomy and records
- Bucket mapping and versioned configurations (v2.3.8)
- Delta / vega margin aggregation
"""

from .risk_types import RiskClass, MarginType, ProductClass, RiskType
from .crif import CrifRecord, load_crif, crif_to_frame
from .bucket_mapper import SimmBucketMapper, RESIDUAL
from .configuration import SimmConfiguration, RISK_CLASS_ORDER
from .v2_3_8 import SimmConfiguration_ISDA_V2_3_8
from .calculator import SimmCalculator

__all__ = [
    "RiskClass",
    "MarginType",
    "ProductClass",
    "RiskType",
    "CrifRecord",
    "load_crif",
    "crif_to_frame",
    "SimmBucketMapper",
    "RESIDUAL",
    "SimmConfiguration",
    "RISK_CLASS_ORDER",
    "SimmConfiguration_ISDA_V2_3_8",
    "SimmCalculator",
]
