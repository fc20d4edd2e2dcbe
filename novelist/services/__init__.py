"""Relay services for Novelist."""
from .llm_client import LLMClient, LLMResponse, LLMError, LLMClientError
from .completion_relay import CompletionRelay, CompletionResult

__all__ = ['LLMClient', 'LLMResponse', 'LLMError', 'LLMClientError', 'CompletionRelay', 'CompletionResult']
