class AttachmentApiError(Exception):
    """A create/list/delete/download call failed.

    ``message`` is the server-provided text when the response carried one.
    """

    def __init__(self, message: str = "Request failed", status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class GateBusyError(RuntimeError):
    """Metadata was requested while a previous request is still awaiting input."""
