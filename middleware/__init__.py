"""HTTP middleware for the metrics server"""
from .request_logging import RequestLoggingMiddleware

__all__ = ['RequestLoggingMiddleware']
