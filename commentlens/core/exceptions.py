"""
Exceptions shared across CommentLens.

- CommentLensError       : base class
- LLMError               : a text-generation call failed or returned nothing usable
- ProviderNotConfigured  : provider name unknown or its API key is missing
- AuthenticationRequired : no identified user on an analytics request
- EmptyMessage           : analytics request without a question
"""
from __future__ import annotations


class CommentLensError(Exception):
    """Base class for CommentLens errors."""


class LLMError(CommentLensError):
    """Text-generation call, timeout or empty response."""


class ProviderNotConfigured(LLMError):
    """Unknown provider name, or provider selected without an API key."""


class AuthenticationRequired(CommentLensError):
    """Raised when an analytics question arrives without a user identity."""


class EmptyMessage(CommentLensError, ValueError):
    """Raised when an analytics question is blank."""
