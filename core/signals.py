"""
進場訊號擷取

訊號由外部服務（/api/signals）計算，此處只負責取回並原樣轉交：

    [{"id": ..., "indicator": ..., "value": ..., "title": ...,
      "description": ..., "applicableTo": ["0050.TW", ...]}, ...]
"""
import logging
from typing import List

import requests

from .config import SIGNALS_URL, REQUEST_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class SignalsFetcher:

    def __init__(self, url: str = SIGNALS_URL, session: requests.Session = None,
                 timeout: float = REQUEST_TIMEOUT_SECONDS):
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch(self) -> List[dict]:
        """取得訊號清單；任何失敗皆回傳空清單"""
        try:
            response = self.session.get(self.url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error('取得進場訊號失敗: %s', e)
            return []

        if not 200 <= response.status_code < 300:
            logger.warning('取得進場訊號失敗，狀態碼: %s', response.status_code)
            return []

        if not response.content:
            return []

        try:
            signals = response.json()
        except ValueError as e:
            logger.error('進場訊號回應無法解析: %s', e)
            return []

        if signals is None:
            return []
        if not isinstance(signals, list):
            logger.warning('進場訊號回應不是清單: %s', type(signals).__name__)
            return []
        return signals
