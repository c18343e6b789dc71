"""
即時報價擷取模組

從台灣證券交易所基本市況報導網站 (MIS) 批次抓取追蹤標的報價：

    https://mis.twse.com.tw/stock/api/getStockInfo.jsp?ex_ch=tse_t00.tw|tse_0050.tw&_=<ms>

回應格式：
    {"msgArray": [{"c": "t00", "z": "17000.5", "y": "17100.0", ...}, ...]}
    c = 代號, z = 最近成交價, y = 昨日收盤價
"""
import logging
import math
import time
from typing import Callable, Dict, Optional
from urllib.parse import quote

import requests

from .config import (
    TWSE_QUOTE_URL, QUOTE_RELAY_URL, TWSE_REFERER,
    REQUEST_TIMEOUT_SECONDS, BENCHMARK_TICKER,
)
from .errors import NetworkError, ParseError
from .models import Quote
from .state import MarketState
from .symbols import exchange_query, resolve_code

logger = logging.getLogger(__name__)


def _to_float(value) -> Optional[float]:
    """字串轉數值；'-'、空字串、NaN 等回傳 None"""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def build_quote_url(base_url: str = TWSE_QUOTE_URL, relay_url: str = QUOTE_RELAY_URL,
                    timestamp_ms: Optional[int] = None) -> str:
    """
    組合批次查詢網址

    Args:
        base_url:     TWSE MIS API 網址
        relay_url:    CORS 中繼代理；空字串表示直接連線
        timestamp_ms: 防快取參數（預設為目前時間）
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    url = f'{base_url}?ex_ch={exchange_query()}&_={timestamp_ms}'
    if relay_url:
        return f'{relay_url}?url={quote(url, safe="")}'
    return url


class QuoteFetcher:
    """
    報價擷取器

    MarketState 的唯一寫入者。每次 refresh() 整份替換報價表，
    中途任何錯誤都不會留下部分更新。
    """

    def __init__(self, state: MarketState, session: requests.Session = None,
                 base_url: str = TWSE_QUOTE_URL, relay_url: str = QUOTE_RELAY_URL,
                 timeout: float = REQUEST_TIMEOUT_SECONDS,
                 clock: Callable[[], float] = time.time):
        self._writer = state.writer()
        self.session = session or requests.Session()
        self.base_url = base_url
        self.relay_url = relay_url
        self.timeout = timeout
        self.clock = clock

    @property
    def state(self) -> MarketState:
        return self._writer.state

    def _request(self) -> dict:
        url = build_quote_url(self.base_url, self.relay_url, int(self.clock() * 1000))
        headers = {'Accept': 'application/json'}
        if not self.relay_url:
            headers['Referer'] = TWSE_REFERER

        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(f'TWSE 報價請求失敗: {e}') from e

        # 3xx 也算失敗（requests 的 ok 會放行）
        if not 200 <= response.status_code < 300:
            raise NetworkError(
                f'CORS proxy 或 TWSE API 回應狀態 {response.status_code}',
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ParseError(f'TWSE 回應不是合法 JSON: {e}') from e

        if not isinstance(payload, dict):
            raise ParseError(f'TWSE 回應格式錯誤: {type(payload).__name__}')
        return payload

    def refresh(self) -> Dict[str, Quote]:
        """
        抓取並更新報價表

        Returns:
            本次成功更新的報價 {ticker: Quote}

        Raises:
            NetworkError: 連線失敗或非成功狀態碼
            ParseError:   回應無法解析
        """
        payload = self._request()

        entries = payload.get('msgArray')
        if not entries:
            logger.warning('TWSE API 回應中 msgArray 無資料')
            return {}

        updates: Dict[str, Quote] = {}
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            ticker = resolve_code(entry.get('c'))
            if ticker is None:
                continue

            price = _to_float(entry.get('z'))
            prev_close = _to_float(entry.get('y'))
            if price is None or prev_close is None or prev_close <= 0:
                logger.debug('%s: 報價無效 (z=%r, y=%r)，略過', ticker, entry.get('z'), entry.get('y'))
                continue

            updates[ticker] = Quote.from_prices(price, prev_close)

        if not updates:
            logger.warning('TWSE API 回應中沒有可用的報價')
            return {}

        staged = dict(self.state.quotes)
        staged.update(updates)
        cumulative_drop = updates[BENCHMARK_TICKER].change if BENCHMARK_TICKER in updates else None
        self._writer.commit(staged, cumulative_drop)

        logger.info('[QUOTE] 更新 %d 檔報價', len(updates))
        return updates
