"""
輪詢更新迴圈

啟動時立即執行一輪，之後每 REFRESH_INTERVAL_SECONDS 秒執行一輪：

    ┌ QuoteFetcher.refresh() ─┐
    │                         ├→ StatusSynthesizer.get_status() → 更新快照
    └ SignalsFetcher.fetch() ─┘

- 報價與訊號同時抓取，狀態在報價完成後才計算（累積跌點讀到本輪結果）
- 三者全部成功才替換儀表板快照；任一失敗則保留舊快照並設定錯誤訊息
- 同一時間只會有一輪在執行
"""
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, List, Optional

import requests

from .config import REFRESH_INTERVAL_SECONDS, FETCH_ERROR_MESSAGE
from .models import DashboardSnapshot
from .quotes import QuoteFetcher
from .signals import SignalsFetcher
from .state import MarketState
from .status import FaultPolicy, StatusSynthesizer

logger = logging.getLogger(__name__)


class RefreshLoop:
    """
    儀表板資料輪詢器

    使用方式：
        loop = RefreshLoop(fetcher, synthesizer, signals_fetcher)
        loop.start()
        loop.snapshot      # 目前可見資料
        loop.error         # 最近一輪的錯誤訊息（成功時為 None）
        loop.stop()
    """

    def __init__(self, quote_fetcher: QuoteFetcher, synthesizer: StatusSynthesizer,
                 signals_fetcher: SignalsFetcher,
                 interval: float = REFRESH_INTERVAL_SECONDS):
        if quote_fetcher.state is not synthesizer.state:
            raise ValueError('QuoteFetcher 與 StatusSynthesizer 必須共用同一個 MarketState')
        self.quote_fetcher = quote_fetcher
        self.synthesizer = synthesizer
        self.signals_fetcher = signals_fetcher
        self.interval = interval

        self._snapshot = DashboardSnapshot(quotes=quote_fetcher.state.quotes)
        self._error: Optional[str] = None
        self._cycle_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._listeners: List[Callable[['RefreshLoop'], None]] = []

        self.cycles = 0
        self.last_cycle: Optional[datetime] = None

    # ===== 可見狀態 =====

    @property
    def snapshot(self) -> DashboardSnapshot:
        return self._snapshot

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def to_dict(self) -> dict:
        data = self._snapshot.to_dict()
        data['error'] = self._error
        return data

    def add_listener(self, callback: Callable[['RefreshLoop'], None]) -> None:
        """註冊每輪結束後的回呼（成功或失敗皆會呼叫）"""
        self._listeners.append(callback)

    # ===== 單輪更新 =====

    def run_once(self) -> bool:
        """
        執行一輪更新

        Returns:
            True 表示三項資料皆成功更新；失敗或上一輪尚未結束時為 False
        """
        if not self._cycle_lock.acquire(blocking=False):
            logger.warning('[REFRESH] 上一輪尚未完成，略過本輪')
            return False

        try:
            ok = self._cycle()
        finally:
            self._cycle_lock.release()

        for callback in self._listeners:
            try:
                callback(self)
            except Exception:
                logger.exception('[REFRESH] 回呼 %r 執行失敗', callback)
        return ok

    def _cycle(self) -> bool:
        started = time.monotonic()
        self.cycles += 1
        self.last_cycle = datetime.now(timezone.utc)

        try:
            with ThreadPoolExecutor(max_workers=2, thread_name_prefix='refresh') as pool:
                quotes_future = pool.submit(self.quote_fetcher.refresh)
                signals_future = pool.submit(self.signals_fetcher.fetch)

                quotes_future.result()
                status = self.synthesizer.get_status()
                signals = signals_future.result()
        except Exception:
            logger.exception('[REFRESH] 第 %d 輪更新失敗，保留上一輪資料', self.cycles)
            self._error = FETCH_ERROR_MESSAGE
            return False

        self._snapshot = DashboardSnapshot(
            quotes=self.quote_fetcher.state.quotes,
            status=status,
            signals=list(signals),
            updated_at=status.checked_at,
        )
        self._error = None
        logger.info(
            '[REFRESH] 第 %d 輪完成 (%s, 累積 %.2f 點, %d 則訊號, %.2fs)',
            self.cycles, status.state, status.cumulative_drop, len(signals),
            time.monotonic() - started,
        )
        return True

    # ===== 背景執行 =====

    def start(self) -> None:
        """啟動背景輪詢（立即執行第一輪）"""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name='refresh-loop', daemon=True)
        self._thread.start()
        logger.info('[REFRESH] 開始輪詢，每 %.1f 秒一次', self.interval)

    def _run(self) -> None:
        next_run = time.monotonic()
        while not self._stop_event.is_set():
            self.run_once()
            # 單輪超過間隔時不補跑，從現在重新計時
            next_run = max(next_run + self.interval, time.monotonic())
            if self._stop_event.wait(max(0.0, next_run - time.monotonic())):
                break

    def join(self, timeout: Optional[float] = None) -> None:
        """等待背景輪詢結束（或逾時）"""
        if self._thread is not None:
            self._thread.join(timeout)

    def stop(self, timeout: Optional[float] = None) -> None:
        """停止輪詢並等待進行中的一輪結束"""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
            logger.info('[REFRESH] 已停止輪詢')


def create_refresh_loop(state: MarketState = None, session: requests.Session = None,
                        fault_policy: FaultPolicy = None,
                        interval: float = REFRESH_INTERVAL_SECONDS) -> RefreshLoop:
    """
    以預設設定組裝 RefreshLoop

    Args:
        state:        市場狀態（預設建立新的）
        session:      共用的 requests.Session（預設各元件自行建立）
        fault_policy: 狀態故障模擬策略（預設依 FAULT_INJECTION_RATE）
        interval:     輪詢間隔（秒）
    """
    state = state or MarketState()
    return RefreshLoop(
        QuoteFetcher(state, session=session),
        StatusSynthesizer(state, fault_policy=fault_policy),
        SignalsFetcher(session=session),
        interval=interval,
    )
