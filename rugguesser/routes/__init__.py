"""Routes package - Blueprint imports and exports"""
from rugguesser.routes.health import health_bp

__all__ = ['health_bp']
