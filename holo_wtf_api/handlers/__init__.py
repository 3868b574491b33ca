"""Business request handlers registered in the route table."""

from .concerts import ConcertListHandler, ConcertPlatformHandler

__all__ = ["ConcertListHandler", "ConcertPlatformHandler"]
