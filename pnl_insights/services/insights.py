import json
import logging
from typing import Optional

import openai

from pnl_insights.models.insights import DEFAULT_INSIGHT, VALID_SENTIMENTS, Insight, MarketData, TokenInfo

logger = logging.getLogger(__name__)

class InsightGenerator:
    """Asks a chat model for a short market read; falls back to a neutral insight on any failure"""

    def __init__(
            self,
            api_key: Optional[str],
            model: str = "gemini-2.5-flash",
            base_url: Optional[str] = None,
            client=None
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = openai.OpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    def build_prompt(self, token: TokenInfo, market_data: MarketData, price_history_text: str = '') -> str:
        """Build the analyst prompt for one token"""
        return (
            "You are a cryptocurrency market analyst. Analyze the following token data and provide insights.\n"
            f"Token: {token.name} ({token.symbol.upper()})\n"
            f"Current Price: ${market_data.current_price:,}\n"
            f"Market Cap: ${market_data.market_cap:,}\n"
            f"24h Volume: ${market_data.total_volume:,}\n"
            f"24h Price Change: {market_data.price_change_percentage_24h:.2f}%\n"
            f"{price_history_text}\n"
            "Based on this data, provide a brief analysis (2-3 sentences) and determine the market sentiment.\n"
            "Respond ONLY with valid JSON in this exact format (no markdown, no code blocks, no backticks):\n"
            "{\n"
            '  "reasoning": "Your brief analysis here (2-3 sentences)",\n'
            '  "sentiment": "Bullish/Bearish/Neutral"\n'
            "}"
        )

    @staticmethod
    def parse_response(content: Optional[str]) -> Insight:
        """Parse the model's JSON answer, tolerating markdown code fences"""
        if not content:
            logger.warning("No content in model response")
            return DEFAULT_INSIGHT

        cleaned = content.strip()
        if cleaned.startswith('```'):
            cleaned = cleaned.removeprefix('```json').removeprefix('```')
            cleaned = cleaned.replace('```', '')
        cleaned = cleaned.strip()

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse model response: {e}")
            logger.error(f"Raw response: {cleaned}")
            return DEFAULT_INSIGHT

        if not isinstance(parsed, dict) or not parsed.get('reasoning') or not parsed.get('sentiment'):
            logger.warning("Model response missing required fields")
            return DEFAULT_INSIGHT

        sentiment = parsed['sentiment']
        if sentiment not in VALID_SENTIMENTS:
            logger.warning(f"Invalid sentiment value: {sentiment}")
            sentiment = 'Neutral'

        return Insight(reasoning=str(parsed['reasoning']), sentiment=sentiment)

    def generate(self, token: TokenInfo, market_data: MarketData, price_history_text: str = '') -> Insight:
        """Generate an insight for the token, or the default insight if the model is unavailable"""
        if not self.api_key:
            logger.warning("Insight API key not provided, using default insight")
            return DEFAULT_INSIGHT

        prompt = self.build_prompt(token, market_data, price_history_text)
        try:
            logger.info(f"Calling insight model {self.model}...")
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}]
            )
            content = response.choices[0].message.content
        except (openai.OpenAIError, IndexError, AttributeError) as e:
            logger.error(f"Error calling insight model: {e}")
            return DEFAULT_INSIGHT

        insight = self.parse_response(content)
        if insight is not DEFAULT_INSIGHT:
            logger.info("Insight generated successfully")
        return insight
