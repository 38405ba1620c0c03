"""
Auth package: HS256 token codec, issuer/verifier, credential store and middleware.
"""
from . import jwt, errors, tokens, credentials

__all__ = ["jwt", "errors", "tokens", "credentials"]
