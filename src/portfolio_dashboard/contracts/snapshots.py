from datetime import datetime
from typing import Annotated, Literal, get_args

from pydantic import AfterValidator, AliasChoices, BaseModel, Field

Period = Literal["1D", "TODAY", "5D", "1M", "6M", "1Y", "ALL"]

ALL_PERIODS: tuple[str, ...] = get_args(Period)
HISTORY_PERIODS: tuple[str, ...] = ("1D", "5D", "1M", "6M", "1Y", "ALL")


def _require_iso_timestamp(value: str) -> str:
    # kept as the wire string; only checked for ISO-8601
    datetime.fromisoformat(value)
    return value


IsoTimestamp = Annotated[str, AfterValidator(_require_iso_timestamp)]


class PortfolioSnapshot(BaseModel):
    timestamp: IsoTimestamp
    value: float
    return_: float = Field(..., validation_alias=AliasChoices("return_", "return"))
    cumulative_return: float
    return_dollar: float
    cumulative_return_dollar: float

    model_config = {"frozen": True, "populate_by_name": True}


class BenchmarkSnapshot(BaseModel):
    timestamp: IsoTimestamp
    price: float
    return_: float = Field(..., validation_alias=AliasChoices("return_", "return"))
    cumulative_return: float

    model_config = {"frozen": True, "populate_by_name": True}


class SummaryMetrics(BaseModel):
    total_return: float
    total_return_dollar: float
    mean_return_ann: float
    volatility_ann: float
    sharpe: float

    model_config = {"frozen": True}
