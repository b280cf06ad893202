"""HTTP response model definitions"""
from typing import Any, Dict, List

from pydantic import BaseModel

class DailyPnL(BaseModel):
    date: str
    realized_pnl_usd: float = 0.0
    unrealized_pnl_usd: float = 0.0
    fees_usd: float = 0.0
    funding_usd: float = 0.0
    net_pnl_usd: float = 0.0
    equity_usd: float = 0.0

class PnLSummaryResponse(BaseModel):
    total_realized_usd: float = 0.0
    total_unrealized_usd: float = 0.0
    total_fees_usd: float = 0.0
    total_funding_usd: float = 0.0
    net_pnl_usd: float = 0.0

class Diagnostics(BaseModel):
    data_source: str = "hyperliquid_api"
    last_api_call: str
    notes: str = "Unrealized PnL and equity reflect the current snapshot and only appear on today's row"

class PnLResponse(BaseModel):
    """
    Daily PnL report for one wallet.

    Attributes:
        wallet: Wallet address the report was computed for
        start, end: Inclusive UTC date range (YYYY-MM-DD)
        daily: One row per day in the range, ascending
        summary: Totals across the range; net_pnl_usd is the sum of daily nets
        diagnostics: Data source and time of the upstream call
    """
    wallet: str
    start: str
    end: str
    daily: List[DailyPnL]
    summary: PnLSummaryResponse
    diagnostics: Diagnostics

class TokenInsightRequest(BaseModel):
    vs_currency: str = "usd"
    history_days: int = 30

class TokenSummary(BaseModel):
    id: str
    symbol: str = ""
    name: str = ""
    market_data: Dict[str, Any] = {}

class InsightBody(BaseModel):
    reasoning: str
    sentiment: str

class ModelInfo(BaseModel):
    provider: str = "google"
    model: str

class TokenInsightResponse(BaseModel):
    source: str = "coingecko"
    token: TokenSummary
    insight: InsightBody
    model: ModelInfo
