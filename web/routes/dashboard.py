"""
儀表板 API 路由

路由：
- GET /api/dashboard      完整儀表板資料（狀態 + 報價 + 訊號 + 錯誤訊息）
- GET /api/market-data    五檔追蹤標的即時報價
- GET /api/market-status  監控狀態與交易時段
"""
from flask import Blueprint, current_app, jsonify

from core import INSTRUMENTS, MARKET_OPEN_TIME, MARKET_CLOSE_TIME, MARKET_TIMEZONE, is_market_open

dashboard_bp = Blueprint('dashboard', __name__)


def get_loop():
    """取得 app 綁定的 RefreshLoop"""
    return current_app.config['REFRESH_LOOP']


def instrument_rows(quotes) -> list:
    """報價表 → 前端卡片資料（含名稱、連結、是否可顯示）"""
    rows = []
    for inst in INSTRUMENTS:
        quote = quotes[inst.ticker]
        row = {
            'symbol': inst.ticker,
            'name': inst.name,
            'link': inst.link_url,
            'available': quote.available,
        }
        row.update(quote.to_dict())
        rows.append(row)
    return rows


@dashboard_bp.route('/dashboard')
def get_dashboard():
    """
    API: 儀表板完整資料

    Returns:
        {
            "loading": false,
            "error": null,
            "updatedAt": "2026-10-19T02:30:00+00:00",
            "status": {"status": "ACTIVE", "lastChecked": ..., "marketOpen": true, "cumulativeDrop": -99.5},
            "marketData": {"^TWII": {"price": ..., "change": ..., "changePercent": ...}, ...},
            "signals": [...],
            "instruments": [...]
        }
    """
    loop = get_loop()
    data = loop.to_dict()
    data['instruments'] = instrument_rows(loop.snapshot.quotes)
    return jsonify(data)


@dashboard_bp.route('/market-data')
def get_market_data():
    """API: 五檔追蹤標的即時報價"""
    snapshot = get_loop().snapshot
    rows = instrument_rows(snapshot.quotes)
    return jsonify({
        'count': len(rows),
        'quotes': rows,
        'updatedAt': snapshot.updated_at.isoformat() if snapshot.updated_at else None,
    })


@dashboard_bp.route('/market-status')
def get_market_status():
    """
    API: 監控狀態

    Returns:
        {
            "status": {...} | null,   # 最近一次成功輪詢的狀態
            "isMarketOpen": true,     # 依目前時間即時判斷
            "marketHours": {"timezone": "Asia/Taipei", "open": "09:00", "close": "13:30"},
            "error": null
        }
    """
    loop = get_loop()
    status = loop.snapshot.status
    return jsonify({
        'status': status.to_dict() if status else None,
        'isMarketOpen': is_market_open(),
        'marketHours': {
            'timezone': MARKET_TIMEZONE,
            'open': MARKET_OPEN_TIME.strftime('%H:%M'),
            'close': MARKET_CLOSE_TIME.strftime('%H:%M'),
        },
        'error': loop.error,
    })
