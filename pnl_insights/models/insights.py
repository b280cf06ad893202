# pnl_insights/models/insights.py
from dataclasses import dataclass

VALID_SENTIMENTS = ('Bullish', 'Bearish', 'Neutral')

@dataclass
class TokenInfo:
    """Token identity shown to the insight model"""
    name: str
    symbol: str

@dataclass
class MarketData:
    """Current market figures in the requested quote currency"""
    vs_currency: str
    current_price: float
    market_cap: float
    total_volume: float
    price_change_percentage_24h: float

    def to_dict(self) -> dict:
        # Keys carry the quote currency, e.g. current_price_usd
        return {
            f'current_price_{self.vs_currency}': self.current_price,
            f'market_cap_{self.vs_currency}': self.market_cap,
            f'total_volume_{self.vs_currency}': self.total_volume,
            'price_change_percentage_24h': self.price_change_percentage_24h
        }

@dataclass(frozen=True)
class Insight:
    """Model generated market read"""
    reasoning: str
    sentiment: str

DEFAULT_INSIGHT = Insight(reasoning='AI analysis unavailable', sentiment='Neutral')
