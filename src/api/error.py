from fastapi import status
from libs.result import Error


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


# Business error code -> HTTP status for auth endpoints
ERROR_STATUS = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "DUPLICATE_USERNAME": status.HTTP_400_BAD_REQUEST,
    "DUPLICATE_EMAIL": status.HTTP_400_BAD_REQUEST,
    "DUPLICATE_ACCOUNT": status.HTTP_400_BAD_REQUEST,
    "PASSWORD_REUSED": status.HTTP_400_BAD_REQUEST,
    "INVALID_OR_EXPIRED_TOKEN": status.HTTP_400_BAD_REQUEST,
    "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
    "INVALID_TOKEN": status.HTTP_401_UNAUTHORIZED,
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "ACCOUNT_NOT_ACTIVE": status.HTTP_403_FORBIDDEN,
    "ACCESS_DENIED": status.HTTP_403_FORBIDDEN,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "ACCOUNT_LOCKED": status.HTTP_423_LOCKED,
}


def raise_for_error(error: Error):
    """Raise ClientError for known business codes, ServerError otherwise"""
    status_code = ERROR_STATUS.get(error.code)
    if status_code is None:
        raise ServerError(error)
    raise ClientError(error, status_code=status_code)
