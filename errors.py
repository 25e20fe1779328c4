"""
Error taxonomy shared by the services.

Each error carries the HTTP status it is rendered with; the app turns any of
them into a ``{"error": message}`` body.
"""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(ServiceError):
    status_code = 400


class Unauthenticated(ServiceError):
    status_code = 401


class NotFound(ServiceError):
    status_code = 404


class Internal(ServiceError):
    status_code = 500
