"""
FastAPI service for keyword, mention, source and trend management.
"""

from trend_monitor.api.app import create_app

__all__ = ["create_app"]
