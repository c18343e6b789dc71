"""
即時報價擷取測試

使用假的 Session 模擬 TWSE MIS 回應，不連網。
"""
import math
from urllib.parse import unquote

import pytest
import requests

from core.errors import NetworkError, ParseError
from core.models import Quote
from core.quotes import QuoteFetcher, build_quote_url
from core.state import MarketState
from core.symbols import TRACKED_TICKERS


def FIXED_CLOCK():
    return 1_760_000_000.0


TWII_ENTRY = {'c': 't00', 'z': '17000.5', 'y': '17100.0'}
ETF_ENTRY = {'c': '0050', 'z': '150.25', 'y': '148.00'}


def make_fetcher(session, state=None, relay_url=''):
    state = state or MarketState()
    return QuoteFetcher(state, session=session, relay_url=relay_url, clock=FIXED_CLOCK), state


def test_benchmark_quote_and_cumulative_drop(fake_session, fake_response):
    """大盤報價：漲跌、漲跌幅與累積跌點"""
    session = fake_session(fake_response({'msgArray': [TWII_ENTRY]}))
    fetcher, state = make_fetcher(session)

    updates = fetcher.refresh()

    quote = state.quotes['^TWII']
    assert quote.price == 17000.5
    assert quote.change == pytest.approx(-99.5)
    assert quote.change_percent == pytest.approx(-0.5819, abs=1e-3)
    assert state.cumulative_drop == pytest.approx(-99.5)
    assert set(updates) == {'^TWII'}

    # 其他標的維持零值
    for ticker in TRACKED_TICKERS[1:]:
        assert state.quotes[ticker] == Quote()


def test_multiple_entries(fake_session, fake_response):
    session = fake_session(fake_response({'msgArray': [TWII_ENTRY, ETF_ENTRY]}))
    fetcher, state = make_fetcher(session)

    fetcher.refresh()

    etf = state.quotes['0050.TW']
    assert etf.price == 150.25
    assert etf.change == pytest.approx(2.25)
    assert etf.change_percent == pytest.approx(2.25 / 148 * 100)


def test_zero_prev_close_keeps_prior_value(fake_session, fake_response):
    """昨收為 0 的資料略過，保留前一次報價"""
    session = fake_session(
        fake_response({'msgArray': [ETF_ENTRY]}),
        fake_response({'msgArray': [{'c': '0050', 'z': '151.00', 'y': '0'}]}),
    )
    fetcher, state = make_fetcher(session)

    fetcher.refresh()
    before = state.quotes['0050.TW']
    assert before.price == 150.25

    assert fetcher.refresh() == {}
    assert state.quotes['0050.TW'] == before


def test_unparseable_and_unknown_entries_skipped(fake_session, fake_response):
    """試撮階段的 '-'、缺欄位、未知代碼皆略過"""
    payload = {'msgArray': [
        {'c': '0050', 'z': '-', 'y': '148.00'},
        {'c': '00878', 'y': '20.0'},
        {'c': '00646', 'z': 'nan', 'y': '40.0'},
        {'c': '2330', 'z': '1000', 'y': '990'},
        'garbage',
        {'c': '00933B', 'z': '15.1', 'y': '15.0'},
    ]}
    fetcher, state = make_fetcher(fake_session(fake_response(payload)))

    updates = fetcher.refresh()

    assert set(updates) == {'00933B.TW'}
    assert state.quotes['0050.TW'] == Quote()
    assert state.quotes['00878.TW'] == Quote()
    assert state.quotes['00646.TW'] == Quote()
    assert set(state.quotes) == set(TRACKED_TICKERS)


def test_cumulative_drop_untouched_without_benchmark(fake_session, fake_response):
    session = fake_session(
        fake_response({'msgArray': [TWII_ENTRY]}),
        fake_response({'msgArray': [ETF_ENTRY]}),
    )
    fetcher, state = make_fetcher(session)

    fetcher.refresh()
    fetcher.refresh()

    assert state.cumulative_drop == pytest.approx(-99.5)


def test_cumulative_drop_is_latest_not_sum(fake_session, fake_response):
    """累積跌點為最新一次漲跌，不累加"""
    session = fake_session(
        fake_response({'msgArray': [TWII_ENTRY]}),
        fake_response({'msgArray': [{'c': 't00', 'z': '17050.0', 'y': '17100.0'}]}),
    )
    fetcher, state = make_fetcher(session)

    fetcher.refresh()
    fetcher.refresh()

    assert state.cumulative_drop == pytest.approx(-50.0)


@pytest.mark.parametrize('payload', [{'msgArray': []}, {}, {'msgArray': None}])
def test_empty_msg_array_is_noop(fake_session, fake_response, payload):
    """msgArray 為空或不存在：不報錯、報價表不變"""
    fetcher, state = make_fetcher(fake_session(fake_response(payload)))
    before = state.quotes

    assert fetcher.refresh() == {}
    assert state.quotes is before


def test_http_error_raises_network_error(fake_session, fake_response):
    """非成功狀態碼 → NetworkError，報價表不變"""
    session = fake_session(
        fake_response({'msgArray': [TWII_ENTRY]}),
        fake_response(status_code=503, text='Service Unavailable'),
    )
    fetcher, state = make_fetcher(session)
    fetcher.refresh()
    before = state.quotes

    with pytest.raises(NetworkError) as exc_info:
        fetcher.refresh()

    assert exc_info.value.status_code == 503
    assert state.quotes is before
    assert state.cumulative_drop == pytest.approx(-99.5)


def test_transport_error_raises_network_error(fake_session):
    session = fake_session(requests.ConnectionError('connection refused'))
    fetcher, state = make_fetcher(session)

    with pytest.raises(NetworkError):
        fetcher.refresh()
    assert state.quotes['^TWII'] == Quote()


def test_invalid_json_raises_parse_error(fake_session, fake_response):
    fetcher, state = make_fetcher(fake_session(fake_response(text='<html>oops</html>')))

    with pytest.raises(ParseError):
        fetcher.refresh()


def test_non_object_json_raises_parse_error(fake_session, fake_response):
    fetcher, _ = make_fetcher(fake_session(fake_response([1, 2, 3])))

    with pytest.raises(ParseError):
        fetcher.refresh()


def test_store_replaced_not_mutated(fake_session, fake_response):
    """每次更新都換成新的報價表，舊的參考內容不變"""
    fetcher, state = make_fetcher(fake_session(fake_response({'msgArray': [TWII_ENTRY]})))
    old = state.quotes

    fetcher.refresh()

    assert state.quotes is not old
    assert old['^TWII'] == Quote()
    with pytest.raises(TypeError):
        state.quotes['^TWII'] = Quote()


def test_direct_request_url_and_headers(fake_session, fake_response):
    session = fake_session(fake_response({'msgArray': [TWII_ENTRY]}))
    fetcher, _ = make_fetcher(session, relay_url='')

    fetcher.refresh()

    call = session.calls[0]
    assert call['url'] == (
        'https://mis.twse.com.tw/stock/api/getStockInfo.jsp'
        '?ex_ch=tse_t00.tw|tse_0050.tw|tse_00646.tw|tse_00878.tw|otc_00933B.tw'
        '&_=1760000000000'
    )
    assert call['headers']['Referer'] == 'https://mis.twse.com.tw/'
    assert call['timeout'] == fetcher.timeout


def test_relay_request_url(fake_session, fake_response):
    """經 CORS 中繼時整段網址以 url 參數編碼傳遞"""
    session = fake_session(fake_response({'msgArray': [TWII_ENTRY]}))
    fetcher, _ = make_fetcher(session, relay_url='https://api.allorigins.win/raw')

    fetcher.refresh()

    url = session.calls[0]['url']
    prefix = 'https://api.allorigins.win/raw?url='
    assert url.startswith(prefix)
    assert '|' not in url
    assert unquote(url[len(prefix):]) == build_quote_url(relay_url='', timestamp_ms=1_760_000_000_000)
    assert 'Referer' not in session.calls[0]['headers']


def test_only_one_writer_per_state(fake_session, fake_response):
    state = MarketState()
    QuoteFetcher(state, session=fake_session(fake_response({})))

    with pytest.raises(RuntimeError):
        QuoteFetcher(state, session=fake_session(fake_response({})))


def test_change_percent_finite():
    quote = Quote.from_prices(100.0, 80.0)
    assert quote.change == 20.0
    assert math.isclose(quote.change_percent, 25.0)
    assert quote.available
    assert not Quote().available


@pytest.mark.parametrize('status_code', [302, 304])
def test_redirect_status_raises_network_error(fake_session, fake_response, status_code):
    """3xx 視為失敗，不進行 JSON 解析"""
    session = fake_session(fake_response({'msgArray': [TWII_ENTRY]}, status_code=status_code))
    fetcher, state = make_fetcher(session)

    with pytest.raises(NetworkError) as exc_info:
        fetcher.refresh()

    assert exc_info.value.status_code == status_code
    assert state.quotes['^TWII'] == Quote()
