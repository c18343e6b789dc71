"""
Web 路由模組

提供 Flask Blueprint 路由
"""
from .dashboard import dashboard_bp

__all__ = ['dashboard_bp']
