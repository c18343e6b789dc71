"""
TWMonitor 核心模組

台股即時報價輪詢、交易時段判斷與進場訊號轉交，供 main.py 與 run.py 共同使用
"""
from .config import (
    # 上游 API
    TWSE_QUOTE_URL, QUOTE_RELAY_URL, SIGNALS_URL,
    # 輪詢參數
    REFRESH_INTERVAL_SECONDS, REQUEST_TIMEOUT_SECONDS, FAULT_INJECTION_RATE,
    # 交易時段
    MARKET_TIMEZONE, MARKET_OPEN_TIME, MARKET_CLOSE_TIME,
    BENCHMARK_TICKER, FETCH_ERROR_MESSAGE,
)
from .errors import MonitorError, NetworkError, ParseError
from .symbols import (
    Instrument, INSTRUMENTS, TRACKED_TICKERS,
    exchange_query, resolve_code, get_instrument,
)
from .session import is_market_open, to_taipei
from .models import (
    Quote, QuoteStore, BotStatus, SessionStatus, DashboardSnapshot,
    empty_store, store_to_dict, store_to_frame,
)
from .state import MarketState
from .quotes import QuoteFetcher, build_quote_url
from .status import StatusSynthesizer, FaultPolicy, NoFaults, RandomFaults
from .signals import SignalsFetcher
from .refresh import RefreshLoop, create_refresh_loop
