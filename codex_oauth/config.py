"""OAuth configuration passed to the orchestrator at construction"""

from dataclasses import dataclass, field
from typing import Dict, Tuple

import settings


@dataclass(frozen=True)
class OAuthConfig:
    """Constants for one OAuth client

    Defaults come from ``settings`` (env overridable where marked there).
    Tests and embedding applications construct their own instance.
    """
    client_id: str = settings.CODEX_CLIENT_ID
    authorize_url: str = settings.CODEX_AUTHORIZE_URL
    token_url: str = settings.CODEX_TOKEN_URL
    scopes: Tuple[str, ...] = tuple(settings.CODEX_SCOPES)
    callback_host: str = settings.CODEX_CALLBACK_HOST
    callback_port: int = settings.CODEX_CALLBACK_PORT
    fallback_ports: Tuple[int, ...] = tuple(settings.CODEX_CALLBACK_FALLBACK_PORTS)
    callback_path: str = settings.CODEX_CALLBACK_PATH
    timeout: float = settings.CODEX_AUTH_TIMEOUT
    port_ready_timeout: float = settings.CODEX_PORT_READY_TIMEOUT
    browser_open_delay: float = settings.CODEX_BROWSER_OPEN_DELAY
    http_timeout: float = settings.CODEX_HTTP_TIMEOUT
    stale_attempt_age: float = settings.CODEX_STALE_ATTEMPT_AGE
    extra_authorize_params: Dict[str, str] = field(
        default_factory=lambda: dict(settings.CODEX_EXTRA_AUTHORIZE_PARAMS),
        hash=False,
    )

    @property
    def ports(self) -> Tuple[int, ...]:
        """Callback ports in preference order"""
        return (self.callback_port,) + tuple(self.fallback_ports)

    @property
    def scope(self) -> str:
        return " ".join(self.scopes)
