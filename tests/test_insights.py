from types import SimpleNamespace

import openai

from pnl_insights.models.insights import DEFAULT_INSIGHT, Insight, MarketData, TokenInfo
from pnl_insights.services.coingecko import extract_market_data, summarize_price_history
from pnl_insights.services.insights import InsightGenerator

TOKEN = TokenInfo(name='Bitcoin', symbol='btc')
MARKET = MarketData(
    vs_currency='usd',
    current_price=65000.5,
    market_cap=1_280_000_000_000,
    total_volume=35_000_000_000,
    price_change_percentage_24h=-1.234,
)


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _generator(content=None, error=None, api_key='key'):
    completions = FakeCompletions(content, error)
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return InsightGenerator(api_key, model='test-model', client=client), completions


def test_no_api_key_returns_default():
    generator, completions = _generator('{}', api_key=None)

    assert generator.generate(TOKEN, MARKET) == DEFAULT_INSIGHT
    assert completions.requests == []


def test_parses_fenced_json():
    content = '```json\n{"reasoning": "Momentum is fading.", "sentiment": "Bearish"}\n```'
    generator, completions = _generator(content)

    insight = generator.generate(TOKEN, MARKET, 'Over the past 30 days, the price changed by 5.00%.')

    assert insight == Insight(reasoning='Momentum is fading.', sentiment='Bearish')
    assert completions.requests[0]['model'] == 'test-model'
    prompt = completions.requests[0]['messages'][0]['content']
    assert 'Token: Bitcoin (BTC)' in prompt
    assert '24h Price Change: -1.23%' in prompt
    assert 'Over the past 30 days' in prompt


def test_unknown_sentiment_becomes_neutral():
    generator, _ = _generator('{"reasoning": "Sideways.", "sentiment": "Euphoric"}')

    assert generator.generate(TOKEN, MARKET).sentiment == 'Neutral'


def test_invalid_or_incomplete_json_returns_default():
    assert InsightGenerator.parse_response('not json') == DEFAULT_INSIGHT
    assert InsightGenerator.parse_response('{"reasoning": "only reasoning"}') == DEFAULT_INSIGHT
    assert InsightGenerator.parse_response('') == DEFAULT_INSIGHT


def test_client_error_returns_default():
    generator, _ = _generator(error=openai.OpenAIError('quota exceeded'))

    assert generator.generate(TOKEN, MARKET) == DEFAULT_INSIGHT


def test_extract_market_data_uses_quote_currency():
    metadata = {
        'market_data': {
            'current_price': {'usd': 2.5, 'eur': 2.3},
            'market_cap': {'eur': 1000},
            'price_change_percentage_24h': 4.2,
        }
    }

    market = extract_market_data(metadata, 'eur')

    assert market.to_dict() == {
        'current_price_eur': 2.3,
        'market_cap_eur': 1000,
        'total_volume_eur': 0,
        'price_change_percentage_24h': 4.2,
    }


def test_summarize_price_history():
    text = summarize_price_history([[0, 100.0], [1, 90.0], [2, 110.0]], 7)

    assert text == 'Over the past 7 days, the price changed by 10.00% (from $100.00 to $110.00).'
    assert summarize_price_history([], 7) == ''
