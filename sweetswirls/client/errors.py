class ApiError(Exception):
    """A failed API call. ``status`` is 0 when the server was never reached."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message

    def __str__(self) -> str:
        return self.message


class UnauthorizedError(ApiError):
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(401, message)


class ValidationFailed(ApiError):
    """Server rejected the payload; ``field_errors`` maps wire field names to messages."""

    def __init__(self, status: int, message: str, field_errors: dict[str, str] | None = None):
        super().__init__(status, message)
        self.field_errors = field_errors or {}
