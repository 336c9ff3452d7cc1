class CheckinError(Exception):
    """A check-in failure that maps onto one HTTP status and error code."""

    status = 500
    code = "UNEXPECTED_ERROR"
    message = "Internal server error."

    def __init__(self, message: str | None = None, details: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.details = details


class MissingToken(CheckinError):
    status = 400
    code = "MISSING_TOKEN"
    message = "Missing visit token."


class InvalidToken(CheckinError):
    status = 404
    code = "INVALID_TOKEN"
    message = "Invalid token."


class TokenExpired(CheckinError):
    status = 410
    code = "TOKEN_EXPIRED"
    message = "Token has expired."


class TokenAlreadyUsed(CheckinError):
    status = 409
    code = "TOKEN_ALREADY_USED"
    message = "Token has already been used."


class CustomerNotFound(CheckinError):
    status = 404
    code = "CUSTOMER_NOT_FOUND"
    message = "Customer not found."


class VisitCreationFailed(CheckinError):
    status = 500
    code = "VISIT_CREATION_FAILED"
    message = "Failed to record visit."


class UnexpectedError(CheckinError):
    pass
