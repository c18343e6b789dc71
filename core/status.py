"""
監控狀態合成

依交易時段與最新累積跌點產生 SessionStatus。
故障模擬以 FaultPolicy 注入，測試時可換成固定結果。
"""
import logging
import random
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Optional

from .config import FAULT_INJECTION_RATE
from .models import BotStatus, SessionStatus
from .session import is_market_open
from .state import MarketState

logger = logging.getLogger(__name__)


# =============================================================================
# 故障模擬策略
# =============================================================================

class FaultPolicy(ABC):
    """決定本次狀態是否強制為 ERROR"""

    @abstractmethod
    def should_fail(self) -> bool:
        ...


class NoFaults(FaultPolicy):
    def should_fail(self) -> bool:
        return False


class RandomFaults(FaultPolicy):
    """以固定機率模擬上游不穩定"""

    def __init__(self, rate: float, rng: Optional[random.Random] = None):
        if not 0.0 <= rate <= 1.0:
            raise ValueError(f'rate 必須介於 0 ~ 1: {rate}')
        self.rate = rate
        self.rng = rng or random.Random()

    def should_fail(self) -> bool:
        return self.rng.random() < self.rate


def default_fault_policy(rate: float = FAULT_INJECTION_RATE) -> FaultPolicy:
    return RandomFaults(rate) if rate > 0 else NoFaults()


# =============================================================================
# 狀態合成器
# =============================================================================

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StatusSynthesizer:

    def __init__(self, state: MarketState, fault_policy: FaultPolicy = None,
                 clock: Callable[[], datetime] = _utcnow):
        self.state = state
        self.fault_policy = fault_policy or default_fault_policy()
        self.clock = clock

    def get_status(self) -> SessionStatus:
        """計算目前狀態（不會拋出例外）"""
        now = self.clock()
        market_open = is_market_open(now)
        state = BotStatus.ACTIVE if market_open else BotStatus.INACTIVE

        if self.fault_policy.should_fail():
            logger.warning('[STATUS] 故障模擬觸發，狀態設為 ERROR')
            state = BotStatus.ERROR

        return SessionStatus(
            state=state,
            checked_at=now,
            market_open=market_open,
            cumulative_drop=self.state.cumulative_drop,
        )
