# pnl_insights/models/hyperliquid.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

@dataclass(frozen=True)
class Fill:
    coin: str
    closed_pnl: str     # closedPnl, signed decimal string
    fee: str            # fee charged
    time: int           # epoch ms
    side: Optional[str] = None
    px: Optional[str] = None
    sz: Optional[str] = None
    hash: Optional[str] = None

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> 'Fill':
        return cls(
            coin=raw.get('coin', ''),
            closed_pnl=raw['closedPnl'],
            fee=raw['fee'],
            time=int(raw['time']),
            side=raw.get('side'),
            px=raw.get('px'),
            sz=raw.get('sz'),
            hash=raw.get('hash')
        )

@dataclass(frozen=True)
class FundingEvent:
    coin: str
    usdc: str           # funding cash flow, signed decimal string
    time: int           # epoch ms

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> 'FundingEvent':
        # userFunding nests the payment under "delta"
        delta = raw.get('delta') or {}
        return cls(
            coin=delta.get('coin', raw.get('coin', '')),
            usdc=delta['usdc'] if 'usdc' in delta else raw['usdc'],
            time=int(raw['time'])
        )

@dataclass(frozen=True)
class AssetPosition:
    coin: str
    unrealized_pnl: str

@dataclass(frozen=True)
class AccountSnapshot:
    """Clearinghouse state at fetch time only"""
    positions: List[AssetPosition] = field(default_factory=list)
    account_value: Optional[str] = None

    @classmethod
    def from_api(cls, raw: Optional[Dict[str, Any]]) -> 'AccountSnapshot':
        raw = raw or {}
        positions = []
        for asset_position in raw.get('assetPositions') or []:
            position = asset_position.get('position') or {}
            positions.append(AssetPosition(
                coin=position.get('coin', ''),
                unrealized_pnl=position.get('unrealizedPnl', '0')
            ))
        margin_summary = raw.get('marginSummary') or {}
        return cls(positions=positions, account_value=margin_summary.get('accountValue'))
