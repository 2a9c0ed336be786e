"""Error taxonomy shared by the stores and the API layer."""


class ConfigError(Exception):
    """Startup configuration is missing or invalid"""
    pass


class ApiError(Exception):
    """Base for failures that map to a JSON {"error": ...} response"""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BadRequest(ApiError):
    status_code = 400


class NotFound(ApiError):
    status_code = 404


class Conflict(ApiError):
    # Duplicate registration is reported as a plain 400 on the wire
    status_code = 400


class Unauthorized(ApiError):
    status_code = 401


class InvalidCredentials(Unauthorized):
    """Unknown email or wrong password, deliberately indistinguishable"""

    status_code = 400

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)
