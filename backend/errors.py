class PontoError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500
    detail = "Internal server error."

    def __init__(self, detail: str | None = None, *, errors: list[str] | None = None):
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail
        self.errors = list(errors or [])


class InvalidInput(PontoError):
    status_code = 400
    detail = "Invalid request."


class InvalidDate(InvalidInput):
    detail = "Invalid date format. Use YYYY-MM-DD."


class InvalidCredentials(PontoError):
    status_code = 401
    detail = "Invalid credentials."


class NotFound(PontoError):
    status_code = 404
    detail = "Punch not found."


class DuplicateTimestamp(PontoError):
    status_code = 409
    detail = "A punch with this timestamp is already registered."


class StorageFailure(PontoError):
    # detail stays generic; the underlying error is only logged
    status_code = 500
