"""
Domain errors raised by services.
Mapped to HTTP responses by the handlers registered in app.main.
"""


class ResidencyError(Exception):
    """Base class for expected business errors"""
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationFailed(ResidencyError):
    """Missing/out-of-range input, e.g. allocating into a full room"""
    status_code = 400


class NotFound(ResidencyError):
    """Referenced tenant, room, bill or record does not exist"""
    status_code = 404
