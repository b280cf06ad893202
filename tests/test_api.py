from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from pnl_insights.api import create_app
from pnl_insights.config import Settings
from pnl_insights.models.pnl import DailyBucket, PnLReport, PnLSummary
from pnl_insights.services.coingecko import CoinGeckoAPIError
from pnl_insights.services.hyperliquid import HyperliquidAPIError, HyperliquidUnavailableError
from pnl_insights.services.insights import InsightGenerator
from pnl_insights.services.pnl import MalformedRecordError

WALLET = '0x0000000000000000000000000000000000000000'


class StubCalculator:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def calculate(self, wallet, start, end):
        self.calls.append((wallet, start, end))
        if self.error:
            raise self.error
        bucket = DailyBucket(date=start.isoformat(), realized=Decimal('7'), fees=Decimal('1.5'))
        bucket.compute_net()
        return PnLReport(daily=[bucket], summary=PnLSummary.from_buckets([bucket]))


class StubCoinGecko:
    def __init__(self, metadata=None, metadata_error=None, chart=None, chart_error=None):
        self.metadata = metadata or {}
        self.metadata_error = metadata_error
        self.chart = chart or {'prices': []}
        self.chart_error = chart_error

    def get_coin(self, token_id):
        if self.metadata_error:
            raise self.metadata_error
        return self.metadata

    def get_market_chart(self, token_id, vs_currency, days):
        if self.chart_error:
            raise self.chart_error
        return self.chart


def _client(calculator=None, coingecko=None):
    app = create_app(
        Settings(),
        pnl_calculator=calculator or StubCalculator(),
        coingecko=coingecko or StubCoinGecko(),
        insight_generator=InsightGenerator(api_key=None, model='gemini-2.5-flash'),
    )
    return TestClient(app)


def test_index_lists_routes():
    res = _client().get('/')

    assert res.status_code == 200
    paths = [route['path'] for route in res.json()['routes']]
    assert '/api/hyperliquid/{wallet}/pnl' in paths


def test_pnl_requires_start_and_end():
    res = _client().get(f'/api/hyperliquid/{WALLET}/pnl')

    assert res.status_code == 400
    assert res.json()['message'] == 'Start and end dates are required'


@pytest.mark.parametrize('wallet,start,end,message', [
    ('0x123', '2020-01-01', '2020-01-02', 'Invalid address format'),
    (WALLET, '2020-01-05', '2020-01-02', 'Start date must be before end date'),
    (WALLET, '2020-1-5', '2020-01-02', 'Invalid start date format. Use YYYY-MM-DD'),
])
def test_pnl_validation_errors(wallet, start, end, message):
    calculator = StubCalculator()

    res = _client(calculator).get(f'/api/hyperliquid/{wallet}/pnl', params={'start': start, 'end': end})

    assert res.status_code == 400
    assert res.json() == {'error': 'Validation error', 'message': message}
    assert calculator.calls == []


def test_pnl_success():
    calculator = StubCalculator()

    res = _client(calculator).get(f'/api/hyperliquid/{WALLET}/pnl', params={'start': '2020-01-01', 'end': '2020-01-01'})

    assert res.status_code == 200
    body = res.json()
    assert body['wallet'] == WALLET
    assert body['daily'][0]['date'] == '2020-01-01'
    assert body['daily'][0]['net_pnl_usd'] == 5.5
    assert body['summary']['net_pnl_usd'] == 5.5
    assert body['summary']['total_fees_usd'] == 1.5
    assert body['diagnostics']['data_source'] == 'hyperliquid_api'
    assert calculator.calls == [(WALLET, date(2020, 1, 1), date(2020, 1, 1))]


@pytest.mark.parametrize('error,status', [
    (HyperliquidAPIError('userFunding', 'HTTP 500: boom'), 502),
    (HyperliquidUnavailableError('clearinghouseState', 'timed out'), 503),
    (MalformedRecordError('fee', 'abc'), 502),
])
def test_pnl_upstream_failures(error, status):
    res = _client(StubCalculator(error=error)).get(
        f'/api/hyperliquid/{WALLET}/pnl', params={'start': '2020-01-01', 'end': '2020-01-02'}
    )

    assert res.status_code == status
    assert 'daily' not in res.json()


def test_token_insight_with_default_insight():
    coingecko = StubCoinGecko(
        metadata={
            'id': 'bitcoin',
            'symbol': 'btc',
            'name': 'Bitcoin',
            'market_data': {
                'current_price': {'usd': 65000},
                'market_cap': {'usd': 1000},
                'total_volume': {'usd': 50},
                'price_change_percentage_24h': 1.5,
            },
        },
        chart={'prices': [[0, 100.0], [1, 110.0]]},
    )

    res = _client(coingecko=coingecko).post('/api/token/BITCOIN/insight', json={'vs_currency': 'USD'})

    assert res.status_code == 200
    body = res.json()
    assert body['source'] == 'coingecko'
    assert body['token']['market_data']['current_price_usd'] == 65000
    assert body['insight'] == {'reasoning': 'AI analysis unavailable', 'sentiment': 'Neutral'}
    assert body['model'] == {'provider': 'google', 'model': 'gemini-2.5-flash'}


def test_token_insight_without_body():
    res = _client(coingecko=StubCoinGecko(metadata={'id': 'bitcoin'})).post('/api/token/bitcoin/insight')

    assert res.status_code == 200
    assert res.json()['token']['market_data']['current_price_usd'] == 0


def test_token_insight_metadata_failure_keeps_status():
    coingecko = StubCoinGecko(metadata_error=CoinGeckoAPIError(404, 'Not Found'))

    res = _client(coingecko=coingecko).post('/api/token/nope/insight', json={})

    assert res.status_code == 404
    assert res.json() == {'error': 'Failed to fetch token metadata', 'details': 'Not Found'}


def test_token_insight_chart_failure_is_not_fatal():
    coingecko = StubCoinGecko(metadata={'id': 'bitcoin'}, chart_error=CoinGeckoAPIError(429, 'Too Many Requests'))

    res = _client(coingecko=coingecko).post('/api/token/bitcoin/insight', json={})

    assert res.status_code == 200
