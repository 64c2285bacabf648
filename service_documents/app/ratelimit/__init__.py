"""
Rate limiting package for the document service.

Holds the sliding-window gate that caps outbound submissions at a fixed
number of requests per rolling window, letting up to that many through at
once and serving waiters in arrival order.
"""

from .gate import RateLimitConfig, TokenBucket, RateGate, BlockingRateGate

__all__ = [
    "RateLimitConfig",
    "TokenBucket",
    "RateGate",
    "BlockingRateGate",
]
