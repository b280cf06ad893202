"""CoinGecko API integration service"""
import logging
from typing import Any, Dict, List, Optional

import requests

from pnl_insights.models.insights import MarketData

logger = logging.getLogger(__name__)

class CoinGeckoAPIError(Exception):
    """Non-success response from CoinGecko"""

    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"CoinGecko API error ({status_code}): {detail}")

class CoinGeckoAPI:
    """Handles CoinGecko coin metadata and market chart requests"""

    def __init__(self, api_key: Optional[str] = None, base_url: str = "https://api.coingecko.com/api/v3",
                 timeout: float = 15.0):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def _make_request(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Make a GET request against the CoinGecko API"""
        headers = {'Accept': 'application/json'}
        if self.api_key:
            headers['x-cg-demo-api-key'] = self.api_key

        response = requests.get(
            f'{self.base_url}/{endpoint}',
            params=params,
            headers=headers,
            timeout=self.timeout
        )
        if not response.ok:
            raise CoinGeckoAPIError(response.status_code, response.reason or response.text)
        return response.json()

    def get_coin(self, token_id: str) -> Dict[str, Any]:
        """Get token metadata including market_data"""
        return self._make_request(f'coins/{token_id}')

    def get_market_chart(self, token_id: str, vs_currency: str, days: int) -> Dict[str, Any]:
        """Get price, market cap and volume history"""
        return self._make_request(
            f'coins/{token_id}/market_chart',
            params={'vs_currency': vs_currency, 'days': days}
        )

def extract_market_data(metadata: Dict[str, Any], vs_currency: str) -> MarketData:
    """Pick the current figures for one quote currency out of coin metadata"""
    market = metadata.get('market_data') or {}
    return MarketData(
        vs_currency=vs_currency,
        current_price=(market.get('current_price') or {}).get(vs_currency) or 0,
        market_cap=(market.get('market_cap') or {}).get(vs_currency) or 0,
        total_volume=(market.get('total_volume') or {}).get(vs_currency) or 0,
        price_change_percentage_24h=market.get('price_change_percentage_24h') or 0
    )

def summarize_price_history(prices: List[List[float]], days: int) -> str:
    """Describe the price move between the first and last chart points"""
    if not prices:
        return ''
    first_price = prices[0][1]
    last_price = prices[-1][1]
    if not first_price:
        return ''
    price_change = (last_price - first_price) / first_price * 100
    return (
        f"Over the past {days} days, the price changed by {price_change:.2f}% "
        f"(from ${first_price:.2f} to ${last_price:.2f})."
    )
