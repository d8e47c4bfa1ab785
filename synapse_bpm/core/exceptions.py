"""Custom exception types for domain and API layers."""


class AppError(Exception):
    """Base app exception; ``status_code`` is the HTTP status it is reported with."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BpmnError(AppError):
    """Diagram XML could not be parsed."""


class IntegrationError(AppError):
    """External integration call could not be attempted."""

    status_code = 409
