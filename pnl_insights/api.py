"""FastAPI application exposing token insights and Hyperliquid daily PnL.

Collaborators are built from :class:`Settings` once in :func:`create_app` and
can be replaced for tests.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Optional

import requests
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pnl_insights.config import Settings
from pnl_insights.models.insights import TokenInfo
from pnl_insights.models.responses import (
    Diagnostics,
    InsightBody,
    ModelInfo,
    PnLResponse,
    TokenInsightRequest,
    TokenInsightResponse,
    TokenSummary,
)
from pnl_insights.services.coingecko import (
    CoinGeckoAPI,
    CoinGeckoAPIError,
    extract_market_data,
    summarize_price_history,
)
from pnl_insights.services.hyperliquid import HyperliquidAPI, HyperliquidAPIError, HyperliquidUnavailableError
from pnl_insights.services.insights import InsightGenerator
from pnl_insights.services.pnl import DailyPnLCalculator, MalformedRecordError
from pnl_insights.validation import parse_date, validate_pnl_request

logger = logging.getLogger(__name__)

API_ROUTES = [
    {
        'method': 'POST',
        'path': '/api/token/{id}/insight',
        'description': 'Token insights (body: { vs_currency, history_days })'
    },
    {
        'method': 'GET',
        'path': '/api/hyperliquid/{wallet}/pnl',
        'description': 'HyperLiquid PnL (query: start, end)'
    },
]

def _error(status_code: int, error: str, message: Optional[str] = None, details: Optional[str] = None) -> JSONResponse:
    content = {'error': error}
    if message is not None:
        content['message'] = message
    if details is not None:
        content['details'] = details
    return JSONResponse(status_code=status_code, content=content)

def create_app(
        settings: Settings,
        pnl_calculator: Optional[DailyPnLCalculator] = None,
        coingecko: Optional[CoinGeckoAPI] = None,
        insight_generator: Optional[InsightGenerator] = None
) -> FastAPI:
    """Build the application with collaborators configured from settings"""
    if pnl_calculator is None:
        hl = settings.hyperliquid_settings
        pnl_calculator = DailyPnLCalculator(HyperliquidAPI(hl.api_url, hl.page_size, hl.timeout))
    if coingecko is None:
        coingecko = CoinGeckoAPI(settings.COINGECKO_DEMO_API_KEY, settings.COINGECKO_API_URL, settings.REQUEST_TIMEOUT)
    if insight_generator is None:
        insight_generator = InsightGenerator(settings.GEMINI_API_KEY, settings.GEMINI_MODEL, settings.GEMINI_BASE_URL)

    app = FastAPI(title="PnL Insights API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        headers = dict(request.headers)
        if 'authorization' in headers:
            headers['authorization'] = '***REDACTED***'
        client = request.client.host if request.client else '-'
        logger.info(f"-> {request.method} {request.url.path} from {client}")
        if request.query_params:
            logger.info(f"    query: {dict(request.query_params)}")
        logger.debug(f"    headers: {headers}")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(f"<- {request.method} {request.url.path} {response.status_code} {duration_ms:.0f}ms")
        return response

    @app.get("/")
    def index():
        return {'routes': API_ROUTES}

    @app.get("/api/hyperliquid/{wallet}/pnl", response_model=PnLResponse)
    def get_hyperliquid_pnl(wallet: str, start: Optional[str] = None, end: Optional[str] = None):
        logger.info(f"Received request for HyperLiquid PNL. Wallet: {wallet}, Start: {start}, End: {end}")

        if not start or not end:
            return _error(400, "Validation error", "Start and end dates are required")

        validation = validate_pnl_request(wallet, start, end)
        if not validation.valid:
            logger.error(f"Validation error: {validation.error}")
            return _error(400, "Validation error", validation.error)

        try:
            report = pnl_calculator.calculate(wallet, parse_date(start), parse_date(end))
        except HyperliquidUnavailableError as e:
            return _error(503, "Service unavailable", "HyperLiquid API is not responding", str(e))
        except HyperliquidAPIError as e:
            return _error(502, "External API error", "Failed to fetch data from HyperLiquid API", str(e))
        except MalformedRecordError as e:
            return _error(502, "External API error", "Malformed data from HyperLiquid API", str(e))

        data = report.to_dict()
        return PnLResponse(
            wallet=wallet,
            start=start,
            end=end,
            daily=data['daily'],
            summary=data['summary'],
            diagnostics=Diagnostics(last_api_call=datetime.now(timezone.utc).isoformat())
        )

    @app.post("/api/token/{token_id}/insight", response_model=TokenInsightResponse)
    def get_token_insights(token_id: str, body: Optional[TokenInsightRequest] = None):
        body = body or TokenInsightRequest()
        token_id = token_id.lower()
        vs_currency = (body.vs_currency or 'usd').lower()
        history_days = body.history_days or 30

        logger.info(f"Fetching insights for token ID: {token_id}")
        logger.info(f"Request parameters: vs_currency={vs_currency}, history_days={history_days}")

        try:
            try:
                metadata = coingecko.get_coin(token_id)
            except CoinGeckoAPIError as e:
                logger.error(f"Error fetching metadata from CoinGecko: {e}")
                return _error(e.status_code, "Failed to fetch token metadata", details=e.detail)

            market_data = extract_market_data(metadata, vs_currency)

            price_history_text = ''
            try:
                chart = coingecko.get_market_chart(token_id, vs_currency, history_days)
                price_history_text = summarize_price_history(chart.get('prices') or [], history_days)
                if price_history_text:
                    logger.info(f"Price history: {price_history_text}")
            except (CoinGeckoAPIError, requests.RequestException, ValueError) as e:
                logger.warning(f"Failed to fetch market chart data: {e}")

            token = TokenInfo(name=metadata.get('name') or token_id, symbol=metadata.get('symbol') or '')
            insight = insight_generator.generate(token, market_data, price_history_text)
        except Exception as e:
            logger.error(f"Exception occurred: {e}")
            return _error(500, "Internal server error", details=str(e))

        return TokenInsightResponse(
            token=TokenSummary(
                id=metadata.get('id') or token_id,
                symbol=metadata.get('symbol') or '',
                name=metadata.get('name') or '',
                market_data=market_data.to_dict()
            ),
            insight=InsightBody(reasoning=insight.reasoning, sentiment=insight.sentiment),
            model=ModelInfo(model=insight_generator.model)
        )

    return app
