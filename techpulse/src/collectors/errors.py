"""
Collector failures. The controller records any SourceError on the column
as `last_error`; cancellation is plain asyncio.CancelledError and never
lands here.
"""


class SourceError(Exception):
    """Base class for a failed fetch_page() call."""

    def __init__(self, source_type, message: str):
        super().__init__(message)
        self.source_type = source_type


class UpstreamError(SourceError):
    """Non-2xx response (`status` = HTTP code) or transport failure (`status` = "network")."""

    def __init__(self, source_type, status: int | str):
        label = getattr(source_type, "value", source_type)
        if status == "network":
            message = f"{label} unreachable (network error)"
        else:
            message = f"{label} request failed ({status})"
        super().__init__(source_type, message)
        self.status = status


class MalformedResponse(SourceError):
    """2xx response whose body is not the JSON shape the collector expects."""

    def __init__(self, source_type, reason: str):
        label = getattr(source_type, "value", source_type)
        super().__init__(source_type, f"{label} returned a malformed response: {reason}")
        self.reason = reason
