from __future__ import annotations

# PostgREST error code for a single-row request that matched no rows
NOT_FOUND_CODE = "PGRST116"


class FormValidationError(ValueError):
    """A form failed local validation; no remote call was made."""


class AuthServiceError(ValueError):
    """The auth service rejected a request. The message is shown verbatim."""


class StoreError(RuntimeError):
    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code

    @property
    def not_found(self) -> bool:
        return self.code == NOT_FOUND_CODE


class WebhookError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
