"""Fetcher facade."""

from .fetcher import Fetcher, request_blocking

__all__ = ["Fetcher", "request_blocking"]
