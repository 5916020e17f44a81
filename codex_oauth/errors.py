"""Error hierarchy for the Codex OAuth flow

Every error is terminal for the current authorization attempt. The ``code``
attribute is a stable identifier callers can switch on.
"""

from typing import Optional, Sequence


class OAuthError(Exception):
    """Base class for all OAuth flow errors"""

    code = "oauth-error"
    default_message = "OAuth flow failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AlreadyInProgressError(OAuthError):
    """A second authentication was requested while one is still running"""

    code = "already-in-progress"
    default_message = "Authentication already in progress"


class PortUnavailableError(OAuthError):
    """Every candidate callback port failed to bind"""

    code = "port-unavailable"

    def __init__(self, ports: Sequence[int]):
        self.ports = list(ports)
        joined = ", ".join(str(port) for port in self.ports)
        super().__init__(f"Callback port already in use (tried: {joined})")


class InvalidStateError(OAuthError):
    """Callback state does not match any pending attempt"""

    code = "invalid-state"
    default_message = "Callback state does not match a pending authorization attempt"


class IssuerError(OAuthError):
    """The issuer redirected back with an ``error`` parameter"""

    code = "issuer-error"

    def __init__(self, error: str, description: Optional[str] = None):
        self.error = error
        self.description = description
        super().__init__(error)


class TokenHTTPError(OAuthError):
    """Token endpoint answered with a non-200 status"""

    code = "http-error"

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Token endpoint returned HTTP {status_code}: {body}")


class InvalidTokenError(OAuthError):
    """Token exchange succeeded but the access token carries no usable identity"""

    code = "invalid-token"
    default_message = "Invalid or expired token"


class InvalidResponseError(OAuthError):
    """Token endpoint body could not be decoded"""

    code = "invalid-response"
    default_message = "Invalid response from server"


class AuthTimeoutError(OAuthError):
    """No callback arrived within the overall timeout"""

    code = "timeout"

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Authentication timeout after {timeout:g} seconds")


class NetworkError(OAuthError):
    """Transport failure reaching the issuer"""

    code = "network-error"


class AuthCancelledError(OAuthError):
    """The in-flight attempt was cancelled by the caller"""

    code = "cancelled"
    default_message = "Authentication cancelled"
