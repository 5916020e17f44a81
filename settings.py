from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Logging
LOG_LEVEL = config.get("LOG_LEVEL", "info")
DEBUG_LOG_FILE = config.get("DEBUG_LOG_FILE", "codex_oauth_debug.log")

# OpenAI OAuth configuration (hardcoded - not user configurable)
# Same public client the Codex CLI registers with auth.openai.com
CODEX_CLIENT_ID = "app_EMoamEEZ73f0CkXaXp7hrann"
CODEX_OAUTH_ISSUER = "https://auth.openai.com"
CODEX_AUTHORIZE_URL = f"{CODEX_OAUTH_ISSUER}/oauth/authorize"
CODEX_TOKEN_URL = f"{CODEX_OAUTH_ISSUER}/oauth/token"
CODEX_SCOPES = ["openid", "profile", "email", "offline_access"]
CODEX_CALLBACK_PATH = "/auth/callback"

# Codex CLI parameters appended to the authorize URL (required for token exchange)
CODEX_EXTRA_AUTHORIZE_PARAMS = {
    "id_token_add_organizations": "true",
    "codex_cli_simplified_flow": "true",
    "originator": "codex_cli_rs",
    # Force the account picker so a different account can be added
    "prompt": "login",
    "max_age": "0",
}

# Local callback listener
# The issuer only accepts localhost redirect URIs on these ports
CODEX_CALLBACK_HOST = config.get("CODEX_CALLBACK_HOST", "localhost")
CODEX_CALLBACK_PORT = config.get("CODEX_CALLBACK_PORT", 1455)
CODEX_CALLBACK_FALLBACK_PORTS = config.get_int_list(
    "CODEX_CALLBACK_FALLBACK_PORTS", [1456, 1457, 1458, 1459, 1460]
)

# Timeouts (seconds)
# Overall wait for the browser redirect
CODEX_AUTH_TIMEOUT = config.get("CODEX_AUTH_TIMEOUT", 120.0)
# Per-port bind/ready bound
CODEX_PORT_READY_TIMEOUT = config.get("CODEX_PORT_READY_TIMEOUT", 2.0)
# Pause between listener ready and opening the browser
CODEX_BROWSER_OPEN_DELAY = config.get("CODEX_BROWSER_OPEN_DELAY", 0.5)
# Token endpoint requests
CODEX_HTTP_TIMEOUT = config.get("CODEX_HTTP_TIMEOUT", 15.0)
# Pending authorization attempts older than this are purged
CODEX_STALE_ATTEMPT_AGE = config.get("CODEX_STALE_ATTEMPT_AGE", 300.0)
