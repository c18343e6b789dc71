"""
台股交易時段判斷

將任意時間轉換為台北時間後判斷是否為交易時段：
- 週一 ~ 週五
- 09:00:00 ~ 13:30:00（兩端皆包含）

不考慮國定假日與颱風假。
"""
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from .config import MARKET_TIMEZONE, MARKET_OPEN_TIME, MARKET_CLOSE_TIME, TRADING_WEEKDAYS

TAIPEI_TZ = ZoneInfo(MARKET_TIMEZONE)


def to_taipei(now: Optional[datetime] = None) -> datetime:
    """
    轉換為台北時間

    Args:
        now: 任意時間；None 表示現在。無時區資訊的 datetime 視為 UTC。
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(TAIPEI_TZ)


def is_market_open(now: Optional[datetime] = None) -> bool:
    """台股是否在交易時段內"""
    local = to_taipei(now)
    if local.weekday() not in TRADING_WEEKDAYS:
        return False

    # 比較到秒：13:30:00 仍算開盤，13:30:01 已收盤
    clock = local.time().replace(microsecond=0)
    return MARKET_OPEN_TIME <= clock <= MARKET_CLOSE_TIME
