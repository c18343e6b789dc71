"""
TWMonitor API Server - 入口點

啟動 Flask 應用程式與背景輪詢

模組架構：
- core: 報價擷取、交易時段、狀態合成、訊號轉交、輪詢迴圈
- web:  Flask 路由（dashboard_bp）
"""
import atexit
import logging
import os
from typing import Optional

from flask import Flask, jsonify

from core import RefreshLoop, create_refresh_loop
from web.routes import dashboard_bp

logger = logging.getLogger('main')


def register_blueprints(app):
    """註冊所有 Blueprint"""
    app.register_blueprint(dashboard_bp, url_prefix='/api')

    logger.info('  dashboard_bp → /api/dashboard, /api/market-data, /api/market-status')


def create_app(loop: Optional[RefreshLoop] = None, start_loop: bool = True):
    """
    工廠函數：建立 Flask 應用程式

    Args:
        loop:       RefreshLoop 實例（預設以 create_refresh_loop() 建立）
        start_loop: 是否立即啟動背景輪詢
    """
    app = Flask(__name__)

    logger.info('=' * 50)
    logger.info('TWMonitor API Server')
    logger.info('=' * 50)

    loop = loop or create_refresh_loop()
    app.config['REFRESH_LOOP'] = loop

    logger.info('註冊 API 路由...')
    register_blueprints(app)

    @app.route('/api/health')
    def health_check():
        return jsonify({
            'status': 'ok',
            'running': loop.running,
            'cycles': loop.cycles,
            'lastCycle': loop.last_cycle.isoformat() if loop.last_cycle else None,
        })

    if start_loop:
        loop.start()
        atexit.register(loop.stop)

    logger.info('=' * 50)
    logger.info('應用程式初始化完成')
    logger.info('=' * 50)

    return app


# ===== 主程式入口 =====

if __name__ == '__main__':
    from log_setup import setup_logging
    setup_logging('main.log')

    app = create_app()

    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() == 'true'
    port = int(os.environ.get('PORT', 5000))

    logger.info('啟動伺服器: http://localhost:%d', port)
    logger.info('Debug 模式: %s', debug_mode)
    logger.info('-' * 50)

    # 背景輪詢只能有一個實例，不使用 reloader
    app.run(
        host='0.0.0.0',
        port=port,
        debug=debug_mode,
        use_reloader=False,
        threaded=True
    )
