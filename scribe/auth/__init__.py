"""Authentication module for scribe"""

from .credentials import CredentialStore

__all__ = ["CredentialStore"]
