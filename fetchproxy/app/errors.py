"""Error taxonomy for the fetch proxy.

Every failure a request can hit maps to one of these classes, and every class
maps to exactly one HTTP status and a JSON body.
"""


class ProxyError(Exception):
    """Base class for errors that terminate a proxied request."""
    status_code: int = 500
    type_name: str = "Internal"

    def __init__(self, message: str = "Internal server error"):
        self.message = message
        super().__init__(message)

    def to_body(self) -> dict:
        return {"error": self.message}


class RateLimitedError(ProxyError):
    status_code = 429
    type_name = "RateLimited"

    def __init__(self, reset_in: int):
        self.reset_in = reset_in
        super().__init__(f"Rate limit exceeded. Please wait {reset_in} seconds.")

    def to_body(self) -> dict:
        return {"error": self.message, "resetIn": self.reset_in}


class MethodNotAllowedError(ProxyError):
    status_code = 405
    type_name = "MethodNotAllowed"

    def __init__(self, method: str = ""):
        self.method = method
        super().__init__("Method not allowed")


class MissingParameterError(ProxyError):
    status_code = 400
    type_name = "MissingParameter"

    def __init__(self, message: str = "URL parameter is required"):
        super().__init__(message)


class InvalidBodyError(MissingParameterError):
    """POST body that is not a JSON object."""

    def __init__(self):
        super().__init__("Invalid JSON body")


class MalformedUrlError(ProxyError):
    status_code = 400
    type_name = "MalformedUrl"

    def __init__(self, url: str = ""):
        self.url = url
        super().__init__("Invalid URL format")


class BlockedUrlError(ProxyError):
    status_code = 403
    type_name = "BlockedUrl"

    def __init__(self, url: str = ""):
        self.url = url
        super().__init__("Access to local/private IPs is forbidden")


class UpstreamHttpError(ProxyError):
    """Non-2xx answer from the target; the status is passed through."""
    type_name = "UpstreamHttpError"

    def __init__(self, status: int):
        self.status = status
        self.status_code = status
        super().__init__(f"Failed to fetch: HTTP {status}")

    def to_body(self) -> dict:
        return {"error": self.message, "status": self.status}


class FetchTimeoutError(ProxyError):
    status_code = 504
    type_name = "Timeout"

    def __init__(self, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__("Request timeout")

    def to_body(self) -> dict:
        return {"error": self.message, "type": self.type_name}


class FetchNetworkError(ProxyError):
    status_code = 502
    type_name = "NetworkError"

    def __init__(self, detail: str):
        super().__init__(detail or "Network error")

    def to_body(self) -> dict:
        return {"error": self.message, "type": self.type_name}


class PayloadTooLargeError(ProxyError):
    status_code = 413
    type_name = "PayloadTooLarge"

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Content too large. Max size is {_format_mb(limit)}MB")

    def to_body(self) -> dict:
        return {"error": self.message, "size": self.size}


def _format_mb(limit: int) -> str:
    mb = limit / 1024 / 1024
    return str(int(mb)) if mb.is_integer() else f"{mb:g}"


def internal_error_body(exc: BaseException) -> dict:
    return {"error": str(exc) or "Internal server error", "type": type(exc).__name__}
