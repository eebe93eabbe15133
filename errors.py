# errors.py
class ApiError(Exception):
    """An error that is reported to the client inside the response envelope."""
    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InputValidationError(ApiError):
    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    status_code = 400


class StorageValidationError(ApiError):
    status_code = 400


class UnexpectedError(ApiError):
    status_code = 500
