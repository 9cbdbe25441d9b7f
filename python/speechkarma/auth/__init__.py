"""Authentication and authorization module.

This module provides:
- Token verification (Supabase JWKS verifier)
- Optional-auth middleware and viewer dependencies
- Statement permission evaluation

Note: the test-only verifier is in tests/support/test_verifier.py
"""

from speechkarma.auth.middleware import AuthMiddleware, Viewer, get_optional_viewer, get_viewer
from speechkarma.auth.verifier import SupabaseJwksVerifier, TokenVerifier

__all__ = [
    "AuthMiddleware",
    "Viewer",
    "get_optional_viewer",
    "get_viewer",
    "SupabaseJwksVerifier",
    "TokenVerifier",
]
