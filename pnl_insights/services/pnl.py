"""Daily PnL aggregation over Hyperliquid fills, funding and account state"""
import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, Optional

from pnl_insights.models.pnl import DailyBucket, PnLReport, PnLSummary, ZERO
from pnl_insights.services.hyperliquid import HyperliquidAPI

logger = logging.getLogger(__name__)

class PnLComputationError(Exception):
    """Base exception for PnL aggregation failures"""
    pass

class MalformedRecordError(PnLComputationError):
    """A numeric field from the upstream source could not be parsed"""

    def __init__(self, field_name: str, value):
        self.field_name = field_name
        self.value = value
        super().__init__(f"Malformed numeric value for {field_name}: {value!r}")

def to_decimal(value, field_name: str) -> Decimal:
    """Parse an upstream decimal string; anything non-numeric is fatal"""
    try:
        parsed = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise MalformedRecordError(field_name, value)
    if not parsed.is_finite():
        raise MalformedRecordError(field_name, value)
    return parsed

def utc_date_key(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).strftime('%Y-%m-%d')

def day_bounds_ms(start: date, end: date) -> tuple[int, int]:
    """Inclusive epoch-ms window covering start 00:00 UTC through the last ms of end"""
    start_ms = int(datetime.combine(start, time.min, tzinfo=timezone.utc).timestamp() * 1000)
    end_ms = int(datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc).timestamp() * 1000) - 1
    return start_ms, end_ms

def build_buckets(start: date, end: date) -> Dict[str, DailyBucket]:
    """One empty bucket per UTC calendar day in [start, end], ascending"""
    buckets: Dict[str, DailyBucket] = {}
    day = start
    while day <= end:
        key = day.isoformat()
        buckets[key] = DailyBucket(date=key)
        day += timedelta(days=1)
    return buckets

class DailyPnLCalculator:
    """Builds per-day PnL and a range summary for a wallet"""

    def __init__(self, api: HyperliquidAPI, clock: Optional[Callable[[], datetime]] = None):
        self.api = api
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _fetch_all(self, wallet: str, start_ms: int, end_ms: int):
        """
        Run the three upstream requests concurrently; the first failure aborts all of them.

        A paginated fetch still in flight when another one fails stops before its
        next page request.
        """
        stop = threading.Event()
        executor = ThreadPoolExecutor(max_workers=3, thread_name_prefix="hl_fetch")
        try:
            fills_future = executor.submit(self.api.get_user_fills, wallet, start_ms, end_ms, stop=stop)
            funding_future = executor.submit(self.api.get_user_funding, wallet, start_ms, end_ms, stop=stop)
            snapshot_future = executor.submit(self.api.get_clearinghouse_state, wallet)
            futures = [fills_future, funding_future, snapshot_future]

            done, _ = wait(futures, return_when=FIRST_EXCEPTION)
            for future in futures:
                if future in done and future.exception() is not None:
                    raise future.exception()

            return fills_future.result(), funding_future.result(), snapshot_future.result()
        finally:
            stop.set()
            executor.shutdown(wait=False, cancel_futures=True)

    def calculate(self, wallet: str, start: date, end: date) -> PnLReport:
        """
        Aggregate fills, funding and the clearinghouse snapshot into one bucket
        per day in [start, end].

        Unrealized PnL and equity only exist as a current snapshot, so they are
        populated for today's bucket (if it is in range) and stay zero for every
        other day.
        """
        buckets = build_buckets(start, end)
        start_ms, end_ms = day_bounds_ms(start, end)

        try:
            fills, funding, snapshot = self._fetch_all(wallet, start_ms, end_ms)
        except Exception as e:
            logger.error(f"Error fetching Hyperliquid data for {wallet}: {e}")
            raise

        dropped = 0
        for fill in fills:
            bucket = buckets.get(utc_date_key(fill.time))
            if bucket is None:
                dropped += 1
                continue
            bucket.realized += to_decimal(fill.closed_pnl, 'closedPnl')
            bucket.fees += to_decimal(fill.fee, 'fee')

        for event in funding:
            bucket = buckets.get(utc_date_key(event.time))
            if bucket is None:
                dropped += 1
                continue
            bucket.funding += to_decimal(event.usdc, 'usdc')

        if dropped:
            logger.debug(f"Dropped {dropped} records outside {start} - {end}")

        today = self.clock().astimezone(timezone.utc).date().isoformat()
        today_bucket = buckets.get(today)
        if today_bucket is not None:
            for position in snapshot.positions:
                today_bucket.unrealized += to_decimal(position.unrealized_pnl, 'unrealizedPnl')
            if snapshot.account_value is not None:
                today_bucket.equity = to_decimal(snapshot.account_value, 'accountValue')
            else:
                today_bucket.equity = ZERO

        daily = [buckets[key] for key in sorted(buckets)]
        for bucket in daily:
            bucket.compute_net()

        summary = PnLSummary.from_buckets(daily)
        logger.info(
            f"Computed PnL for {wallet} over {len(daily)} days: "
            f"{len(fills)} fills, {len(funding)} funding events, net {summary.net}"
        )
        return PnLReport(daily=daily, summary=summary)
