"""
CRIF sensitivity records.

A CRIF table has one row per risk factor sensitivity with the columns

    TradeID, RiskType, Qualifier, Bucket, Label1, Label2,
    Amount, AmountCurrency, AmountUSD [, ProductClass]

Records are read-only inputs of the SIMM calculator.
"""

from dataclasses import asdict, dataclass
from typing import List, Sequence

import pandas as pd

from .risk_types import ProductClass, RiskType

REQUIRED_COLUMNS = ["RiskType", "Qualifier", "AmountUSD"]
OPTIONAL_COLUMNS = {
    "TradeID": "",
    "Bucket": "",
    "Label1": "",
    "Label2": "",
    "Amount": None,
    "AmountCurrency": "USD",
    "ProductClass": ProductClass.RATES_FX.value,
}


@dataclass(frozen=True)
class CrifRecord:
    """One CRIF sensitivity."""
    trade_id: str
    risk_type: RiskType
    qualifier: str
    bucket: str
    label1: str
    label2: str
    amount: float
    amount_currency: str
    amount_usd: float
    product_class: ProductClass = ProductClass.RATES_FX


def _text(value) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def load_crif(df: pd.DataFrame) -> List[CrifRecord]:
    """
    Convert a CRIF DataFrame into records.

    Args:
        df: CRIF table, see module docstring for the columns

    Returns:
        List of CrifRecord

    Raises:
        ValueError: On missing required columns or unknown risk types
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"CRIF is missing columns: {missing}")

    frame = df.copy()
    for column, default in OPTIONAL_COLUMNS.items():
        if column not in frame.columns:
            frame[column] = default
    frame["Amount"] = frame["Amount"].fillna(frame["AmountUSD"])

    records = []
    for row in frame.itertuples(index=False):
        records.append(CrifRecord(
            trade_id=_text(row.TradeID),
            risk_type=RiskType.from_string(str(row.RiskType)),
            qualifier=_text(row.Qualifier),
            bucket=_text(row.Bucket),
            label1=_text(row.Label1),
            label2=_text(row.Label2),
            amount=float(row.Amount),
            amount_currency=_text(row.AmountCurrency) or "USD",
            amount_usd=float(row.AmountUSD),
            product_class=ProductClass.from_string(_text(row.ProductClass) or "RatesFX")
        ))
    return records


def crif_to_frame(records: Sequence[CrifRecord]) -> pd.DataFrame:
    """Records back to a CRIF DataFrame."""
    rows = []
    for r in records:
        d = asdict(r)
        rows.append({
            "TradeID": d["trade_id"],
            "RiskType": r.risk_type.value,
            "Qualifier": d["qualifier"],
            "Bucket": d["bucket"],
            "Label1": d["label1"],
            "Label2": d["label2"],
            "Amount": d["amount"],
            "AmountCurrency": d["amount_currency"],
            "AmountUSD": d["amount_usd"],
            "ProductClass": r.product_class.value,
        })
    return pd.DataFrame(rows, columns=[
        "TradeID", "RiskType", "Qualifier", "Bucket", "Label1", "Label2",
        "Amount", "AmountCurrency", "AmountUSD", "ProductClass"
    ])


__all__ = [
    "CrifRecord",
    "load_crif",
    "crif_to_frame",
]
