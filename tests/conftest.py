"""
測試共用工具：假的 requests Session / Response
"""
import json

import pytest


class FakeResponse:
    """模擬 requests.Response（只實作用到的屬性）"""

    def __init__(self, payload=None, status_code: int = 200, text: str = None):
        self.status_code = status_code
        if text is None:
            text = '' if payload is None else json.dumps(payload)
        self.content = text.encode('utf-8')

    def json(self):
        # json.JSONDecodeError 為 ValueError 子類別，與 requests 行為一致
        return json.loads(self.content.decode('utf-8'))


class FakeSession:
    """
    依序回傳預先排好的回應；元素若為 Exception 則直接拋出。
    最後一個回應會重複使用。
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append({'url': url, 'headers': headers or {}, 'timeout': timeout})
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse
