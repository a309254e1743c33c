"""Exceptions raised by Secret Server operations."""
from typing import List, Optional


class SecretServerError(Exception):
    """Base exception for Secret Server errors."""
    pass


class TransportError(SecretServerError):
    """Raised when a request to the Secret Server fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(SecretServerError):
    """Raised when a response does not have the expected JSON shape."""
    pass


class MultipleSecretsFoundError(SecretServerError):
    """Raised when a name search matches more than one secret."""

    def __init__(self, ids: List[int], searched_name: str):
        self.ids = list(ids)
        self.searched_name = searched_name
        super().__init__(
            f"multiple ({len(self.ids)}) secrets found with name {searched_name}"
        )
