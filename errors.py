"""Error type shared by the client, query and mutation layers."""

from __future__ import annotations


class ApiError(RuntimeError):
    """A failed backend call: transport failure, non-2xx status or bad JSON.

    ``status_code`` is set only when the backend answered with an HTTP error.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
