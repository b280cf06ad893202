"""Domain models for daily PnL reports"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List

ZERO = Decimal('0')

@dataclass
class DailyBucket:
    """Aggregate PnL for one UTC calendar day"""
    date: str  # YYYY-MM-DD
    realized: Decimal = ZERO
    unrealized: Decimal = ZERO
    fees: Decimal = ZERO
    funding: Decimal = ZERO
    net: Decimal = ZERO
    equity: Decimal = ZERO

    def compute_net(self) -> None:
        self.net = self.realized + self.unrealized - self.fees + self.funding

    def to_dict(self) -> Dict[str, Any]:
        realized = float(self.realized)
        unrealized = float(self.unrealized)
        fees = float(self.fees)
        funding = float(self.funding)
        # net is rederived from the emitted floats so the identity holds on the wire
        return {
            'date': self.date,
            'realized_pnl_usd': realized,
            'unrealized_pnl_usd': unrealized,
            'fees_usd': fees,
            'funding_usd': funding,
            'net_pnl_usd': realized + unrealized - fees + funding,
            'equity_usd': float(self.equity)
        }

@dataclass
class PnLSummary:
    """Range totals; net is the sum of per-day nets"""
    total_realized: Decimal = ZERO
    total_unrealized: Decimal = ZERO
    total_fees: Decimal = ZERO
    total_funding: Decimal = ZERO
    net: Decimal = ZERO

    @classmethod
    def from_buckets(cls, buckets: List[DailyBucket]) -> 'PnLSummary':
        summary = cls()
        for bucket in buckets:
            summary.total_realized += bucket.realized
            summary.total_unrealized += bucket.unrealized
            summary.total_fees += bucket.fees
            summary.total_funding += bucket.funding
            summary.net += bucket.net
        return summary

def summarize_daily(daily: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Add up serialized daily rows in date order"""
    summary = {
        'total_realized_usd': 0.0,
        'total_unrealized_usd': 0.0,
        'total_fees_usd': 0.0,
        'total_funding_usd': 0.0,
        'net_pnl_usd': 0.0
    }
    for day in daily:
        summary['total_realized_usd'] += day['realized_pnl_usd']
        summary['total_unrealized_usd'] += day['unrealized_pnl_usd']
        summary['total_fees_usd'] += day['fees_usd']
        summary['total_funding_usd'] += day['funding_usd']
        summary['net_pnl_usd'] += day['net_pnl_usd']
    return summary

@dataclass
class PnLReport:
    """Complete PnL report for a wallet and date range"""
    daily: List[DailyBucket] = field(default_factory=list)
    summary: PnLSummary = field(default_factory=PnLSummary)

    def to_dict(self) -> Dict[str, Any]:
        """JSON form; the summary is built from the emitted daily floats, not from the Decimal totals"""
        daily = [bucket.to_dict() for bucket in self.daily]
        return {
            'daily': daily,
            'summary': summarize_daily(daily)
        }
