"""
市場狀態容器

持有報價表與累積跌點，由 RefreshLoop 注入給各元件：

    state = MarketState()
    fetcher = QuoteFetcher(state)          # 唯一寫入者
    synthesizer = StatusSynthesizer(state) # 只讀

寫入權限只能取得一次（writer()），第二個寫入者會直接報錯。
"""
import logging
import threading
from typing import Optional, Tuple

from .models import QuoteStore, empty_store, freeze_store
from .symbols import TRACKED_TICKERS

logger = logging.getLogger(__name__)


class MarketState:
    """報價表 + 累積跌點（讀取端可由任意執行緒取得一致快照）"""

    def __init__(self):
        self._lock = threading.Lock()
        self._quotes: QuoteStore = empty_store()
        self._cumulative_drop: float = 0.0
        self._writer: Optional['StateWriter'] = None

    @property
    def quotes(self) -> QuoteStore:
        with self._lock:
            return self._quotes

    @property
    def cumulative_drop(self) -> float:
        with self._lock:
            return self._cumulative_drop

    def read(self) -> Tuple[QuoteStore, float]:
        """同時取得報價表與累積跌點"""
        with self._lock:
            return self._quotes, self._cumulative_drop

    def writer(self) -> 'StateWriter':
        """取得唯一寫入權限"""
        with self._lock:
            if self._writer is not None:
                raise RuntimeError('MarketState 已有寫入者')
            self._writer = StateWriter(self)
            return self._writer

    def _commit(self, quotes: dict, cumulative_drop: Optional[float]) -> None:
        if set(quotes) != set(TRACKED_TICKERS):
            raise ValueError(f'報價表標的不符: {sorted(quotes)}')
        frozen = freeze_store(quotes)
        with self._lock:
            self._quotes = frozen
            if cumulative_drop is not None:
                self._cumulative_drop = cumulative_drop


class StateWriter:
    """MarketState 的寫入端"""

    def __init__(self, state: MarketState):
        self._state = state

    @property
    def state(self) -> MarketState:
        return self._state

    def commit(self, quotes: dict, cumulative_drop: Optional[float] = None) -> None:
        """
        整份替換報價表

        Args:
            quotes:          完整報價表（必須恰好包含五檔追蹤標的）
            cumulative_drop: 大盤最新漲跌點；None 表示本次未更新大盤
        """
        self._state._commit(quotes, cumulative_drop)
        logger.debug('[STATE] 報價表已更新 (cumulative_drop=%s)', cumulative_drop)
