"""
TWMonitor 統一配置模組

集中管理所有配置參數，供 main.py 與 run.py 共用
"""
import os
from datetime import time

# =============================================================================
# 上游 API 設定（可透過環境變數覆蓋）
# =============================================================================
TWSE_QUOTE_URL = os.environ.get(
    'TWMONITOR_QUOTE_URL', 'https://mis.twse.com.tw/stock/api/getStockInfo.jsp'
)
# CORS 中繼代理；設為空字串則直接連線 TWSE
QUOTE_RELAY_URL = os.environ.get('TWMONITOR_QUOTE_RELAY', 'https://api.allorigins.win/raw')
TWSE_REFERER = 'https://mis.twse.com.tw/'

# 進場訊號服務（外部協作者，本專案不實作）
SIGNALS_URL = os.environ.get('TWMONITOR_SIGNALS_URL', 'http://localhost:8000/api/signals')

# =============================================================================
# 輪詢參數
# =============================================================================
REFRESH_INTERVAL_SECONDS = float(os.environ.get('TWMONITOR_REFRESH_SECONDS', 5))
REQUEST_TIMEOUT_SECONDS = float(os.environ.get('TWMONITOR_TIMEOUT_SECONDS', 10))

# 狀態故障模擬機率（0 = 停用）
FAULT_INJECTION_RATE = float(os.environ.get('TWMONITOR_FAULT_RATE', 0.0))

# =============================================================================
# 台股交易時段
# =============================================================================
MARKET_TIMEZONE = 'Asia/Taipei'
MARKET_OPEN_TIME = time(9, 0)
MARKET_CLOSE_TIME = time(13, 30)
TRADING_WEEKDAYS = frozenset({0, 1, 2, 3, 4})   # 週一 ~ 週五

# =============================================================================
# 標的
# =============================================================================
BENCHMARK_TICKER = '^TWII'

# =============================================================================
# 前端訊息
# =============================================================================
FETCH_ERROR_MESSAGE = '無法從監控服務獲取資料。請稍後再試。'
