# pnl_insights/services/hyperliquid.py
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, TypeVar

import requests

from pnl_insights.models.hyperliquid import AccountSnapshot, Fill, FundingEvent

logger = logging.getLogger(__name__)

T = TypeVar('T')

FILLS_SOURCE = "userFillsByTime"
FUNDING_SOURCE = "userFunding"
SNAPSHOT_SOURCE = "clearinghouseState"

class HyperliquidAPIError(Exception):
    """Upstream fetch failed for one of the Hyperliquid info requests"""
    prefix = "HyperLiquid API error"

    def __init__(self, source: str, detail: str):
        self.source = source
        self.detail = detail
        super().__init__(f"{self.prefix} ({source}): {detail}")

class HyperliquidUnavailableError(HyperliquidAPIError):
    """No response from the Hyperliquid API (connection failure or timeout)"""
    prefix = "No response from HyperLiquid API"

class HyperliquidAPI:
    """Read-only client for the Hyperliquid info endpoint"""

    def __init__(self, api_url: str = "https://api.hyperliquid.xyz/info", page_size: int = 2000,
                 timeout: float = 15.0):
        self.api_url = api_url
        self.page_size = page_size
        self.timeout = timeout

    def _make_request(self, source: str, payload: Dict[str, Any]) -> Any:
        logger.info(f"Requesting {source} for {payload.get('user')}")
        try:
            response = requests.post(
                self.api_url,
                json=payload,
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            raise HyperliquidUnavailableError(source, str(e)) from e
        except requests.RequestException as e:
            raise HyperliquidAPIError(source, str(e)) from e

        if response.status_code != 200:
            raise HyperliquidAPIError(source, f"HTTP {response.status_code}: {response.text}")

        try:
            return response.json()
        except ValueError as e:
            raise HyperliquidAPIError(source, f"Invalid JSON in response: {response.text}") from e

    def fetch_paginated(
            self,
            source: str,
            wallet: str,
            start_time: int,
            end_time: int,
            parse: Callable[[Dict[str, Any]], T],
            stop: Optional[threading.Event] = None
    ) -> List[T]:
        """
        Fetch every record of a time-ordered request type between start_time and
        end_time (epoch ms, inclusive), advancing the cursor past the last record
        of each full page.

        Setting ``stop`` abandons the fetch before the next page is requested.
        """
        records: List[T] = []
        cursor = start_time

        while cursor <= end_time:
            if stop is not None and stop.is_set():
                raise HyperliquidAPIError(source, "Fetch cancelled")

            page = self._make_request(source, {
                "type": source,
                "user": wallet,
                "startTime": cursor,
                "endTime": end_time,
            })

            if page is None:
                break
            if not isinstance(page, list):
                raise HyperliquidAPIError(source, f"Unexpected response format. Expected list, got: {type(page)}")
            if not page:
                break

            try:
                records.extend(parse(raw) for raw in page)
            except (KeyError, TypeError, ValueError) as e:
                raise HyperliquidAPIError(source, f"Malformed record: {e!r}") from e

            if len(page) < self.page_size:
                break

            next_cursor = int(page[-1]["time"]) + 1
            if next_cursor <= cursor:
                raise HyperliquidAPIError(source, f"Pagination cursor did not advance past {cursor}")
            cursor = next_cursor
            logger.info(f"{source}: page full ({len(page)} records), continuing from {cursor}")

        logger.info(f"{source}: fetched {len(records)} records for {wallet}")
        return records

    def get_user_fills(self, wallet: str, start_time: int, end_time: int,
                       stop: Optional[threading.Event] = None) -> List[Fill]:
        """Get trade fills in the time range, following pagination"""
        return self.fetch_paginated(FILLS_SOURCE, wallet, start_time, end_time, Fill.from_api, stop)

    def get_user_funding(self, wallet: str, start_time: int, end_time: int,
                         stop: Optional[threading.Event] = None) -> List[FundingEvent]:
        """Get funding payments in the time range, following pagination"""
        return self.fetch_paginated(FUNDING_SOURCE, wallet, start_time, end_time, FundingEvent.from_api, stop)

    def get_clearinghouse_state(self, wallet: str) -> AccountSnapshot:
        """Get the current positions and margin summary for a wallet"""
        data = self._make_request(SNAPSHOT_SOURCE, {"type": SNAPSHOT_SOURCE, "user": wallet})
        if data is not None and not isinstance(data, dict):
            raise HyperliquidAPIError(SNAPSHOT_SOURCE, f"Unexpected response format. Expected object, got: {type(data)}")
        try:
            return AccountSnapshot.from_api(data)
        except (AttributeError, TypeError) as e:
            raise HyperliquidAPIError(SNAPSHOT_SOURCE, f"Malformed snapshot: {e!r}") from e
