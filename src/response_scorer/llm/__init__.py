from __future__ import annotations

from .completion_client import CompletionClient, CompletionError, resolve_api_key

__all__ = ["CompletionClient", "CompletionError", "resolve_api_key"]
