"""
Search throttle module.
"""

from .throttle import SearchThrottle, ThrottleConfig, ThrottleResult

__all__ = ["SearchThrottle", "ThrottleConfig", "ThrottleResult"]
