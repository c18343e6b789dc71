"""
監控服務錯誤類型
"""


class MonitorError(Exception):
    """監控服務錯誤基底類別"""


class NetworkError(MonitorError):
    """傳輸失敗或上游回應非成功狀態碼"""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(MonitorError):
    """上游回應無法解析為 JSON"""
