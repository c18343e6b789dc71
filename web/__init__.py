"""
Web 應用模組

提供 Flask Web 應用的路由；RefreshLoop 由 main.py 注入（app.config['REFRESH_LOOP']）
"""
from .routes import dashboard_bp

__all__ = [
    'dashboard_bp',
]
