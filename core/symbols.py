"""
標的對照表

內部代號（yfinance 格式，如 0050.TW）與 TWSE MIS 交易所代碼的雙向對照。

    ticker → ex_ch 代碼   組合批次查詢字串（tse_0050.tw|otc_00933B.tw）
    c 欄位 → ticker       將回應對應回內部代號
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class Instrument:
    """追蹤中的標的"""
    ticker: str
    exchange_code: str
    name: str

    @property
    def short_code(self) -> str:
        """回應中 `c` 欄位的代碼（tse_0050.tw → 0050）"""
        return self.exchange_code.split('_', 1)[1].rsplit('.', 1)[0]

    @property
    def link_url(self) -> str:
        return f'https://tw.stock.yahoo.com/quote/{self.ticker}'


INSTRUMENTS: Tuple[Instrument, ...] = (
    Instrument('^TWII', 'tse_t00.tw', '台灣加權指數'),
    Instrument('0050.TW', 'tse_0050.tw', '元大台灣50'),
    Instrument('00646.TW', 'tse_00646.tw', '元大S&P500'),
    Instrument('00878.TW', 'tse_00878.tw', '國泰永續高股息'),
    Instrument('00933B.TW', 'otc_00933B.tw', '國泰10Y+金融債'),
)

TRACKED_TICKERS: Tuple[str, ...] = tuple(i.ticker for i in INSTRUMENTS)

TICKER_TO_EXCHANGE: Dict[str, str] = {i.ticker: i.exchange_code for i in INSTRUMENTS}
CODE_TO_TICKER: Dict[str, str] = {i.short_code: i.ticker for i in INSTRUMENTS}

_BY_TICKER: Dict[str, Instrument] = {i.ticker: i for i in INSTRUMENTS}


def exchange_query() -> str:
    """批次查詢字串（ex_ch 參數）"""
    return '|'.join(TICKER_TO_EXCHANGE.values())


def resolve_code(code: str) -> Optional[str]:
    """上游代碼 → 內部代號；未知代碼回傳 None"""
    return CODE_TO_TICKER.get(code)


def get_instrument(ticker: str) -> Optional[Instrument]:
    return _BY_TICKER.get(ticker)
