"""Core helpers shared by the sync engine and the translation providers."""

from .async_utils import run_sync

__all__ = ["run_sync"]
