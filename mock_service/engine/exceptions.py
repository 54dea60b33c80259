"""Error taxonomy for the transformation engine.

Each error carries the HTTP status the serving layer maps it to.
"""


class MockServiceError(Exception):
    """Base class for errors surfaced to mock service callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(MockServiceError):
    """No template is registered for the requested (service, method)."""

    status_code = 404


class ParameterError(MockServiceError):
    """A required parameter is missing or fails type coercion."""

    status_code = 400

    def __init__(self, parameter: str, message: str):
        super().__init__(f"Parameter '{parameter}' {message}")
        self.parameter = parameter


class TemplateError(MockServiceError):
    """A base template cannot be cloned or lacks a field a rule expects."""

    status_code = 500


class ConflictError(MockServiceError):
    """A management operation collides with an existing service."""

    status_code = 409


class ValidationError(MockServiceError):
    """A management request carries an invalid name, method or payload."""

    status_code = 400
