"""Error taxonomy shared by stores, services and routes."""

from __future__ import annotations

from typing import Sequence


class BrigadeServiceError(Exception):
    status_code = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFoundError(BrigadeServiceError):
    status_code = 404


class ValidationError(BrigadeServiceError):
    status_code = 400


class AuthError(BrigadeServiceError):
    """Missing or rejected identity (401) or insufficient privilege (403)."""

    def __init__(self, detail: str, status_code: int = 401) -> None:
        super().__init__(detail)
        self.status_code = status_code


class StoreError(BrigadeServiceError):
    """An underlying read or write against the database failed."""

    status_code = 500


class NotConformantError(BrigadeServiceError):
    status_code = 409

    def __init__(self, detail: str, errors: Sequence[str]) -> None:
        super().__init__(detail)
        self.errors = list(errors)
