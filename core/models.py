"""
資料模型

    Quote           單一標的報價（價格、漲跌、漲跌幅）
    BotStatus       監控狀態列舉
    SessionStatus   每次輪詢重新計算的狀態紀錄
    DashboardSnapshot  儀表板目前可見的資料（報價 + 狀態 + 訊號）

訊號（Signal）由外部服務提供，維持原始 dict 直接轉交，不在此定義。
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

import pandas as pd

from .symbols import INSTRUMENTS, TRACKED_TICKERS


# =============================================================================
# 報價
# =============================================================================

@dataclass(frozen=True)
class Quote:
    """單一標的報價；未初始化時全為 0"""
    price: float = 0.0
    change: float = 0.0
    change_percent: float = 0.0

    @classmethod
    def from_prices(cls, price: float, prev_close: float) -> Quote:
        """由成交價與昨收計算漲跌；prev_close 必須 > 0"""
        change = price - prev_close
        return cls(price, change, change / prev_close * 100)

    @property
    def available(self) -> bool:
        """是否已取得有效報價"""
        return self.price > 0

    def to_dict(self) -> dict:
        return {
            'price': self.price,
            'change': self.change,
            'changePercent': self.change_percent,
        }


QuoteStore = Mapping[str, Quote]


def empty_store() -> QuoteStore:
    """五檔追蹤標的皆為零值的初始報價表"""
    return freeze_store({ticker: Quote() for ticker in TRACKED_TICKERS})


def freeze_store(quotes: Dict[str, Quote]) -> QuoteStore:
    """包成唯讀 mapping，讀取端無法就地修改"""
    return MappingProxyType(dict(quotes))


def store_to_dict(store: QuoteStore) -> dict:
    return {ticker: quote.to_dict() for ticker, quote in store.items()}


def store_to_frame(store: QuoteStore) -> pd.DataFrame:
    """報價表 → DataFrame（CLI 表格輸出用）"""
    rows = []
    for inst in INSTRUMENTS:
        quote = store.get(inst.ticker, Quote())
        rows.append({
            'ticker': inst.ticker,
            'name': inst.name,
            'price': quote.price,
            'change': quote.change,
            'change%': quote.change_percent,
        })
    return pd.DataFrame(rows).set_index('ticker').round(2)


# =============================================================================
# 狀態
# =============================================================================

class BotStatus(Enum):
    """監控狀態"""
    ACTIVE = 'ACTIVE'
    INACTIVE = 'INACTIVE'
    ERROR = 'ERROR'

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SessionStatus:
    state: BotStatus
    checked_at: datetime
    market_open: bool
    cumulative_drop: float

    def to_dict(self) -> dict:
        return {
            'status': self.state.value,
            'lastChecked': self.checked_at.isoformat(),
            'marketOpen': self.market_open,
            'cumulativeDrop': self.cumulative_drop,
        }


# =============================================================================
# 儀表板快照
# =============================================================================

@dataclass(frozen=True)
class DashboardSnapshot:
    """
    儀表板可見資料

    每次輪詢成功才整份替換；失敗時保留上一份並附上錯誤訊息。
    `status` 為 None 代表尚未完成第一次輪詢。
    """
    quotes: QuoteStore = field(default_factory=empty_store)
    status: Optional[SessionStatus] = None
    signals: List[dict] = field(default_factory=list)
    updated_at: Optional[datetime] = None

    @property
    def loading(self) -> bool:
        return self.updated_at is None

    def to_dict(self) -> dict:
        return {
            'loading': self.loading,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
            'status': self.status.to_dict() if self.status else None,
            'marketData': store_to_dict(self.quotes),
            'signals': list(self.signals),
        }
