"""Data models for Codex OAuth authentication"""

import datetime
import time
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field


# JWT claim namespaces used by auth.openai.com (the keys are full URIs)
AUTH_CLAIM = "https://api.openai.com/auth"
PROFILE_CLAIM = "https://api.openai.com/profile"

DEFAULT_PLAN_TYPE = "free"


class PKCEPair(NamedTuple):
    """PKCE code verifier and challenge pair"""
    verifier: str
    challenge: str


# ---------------------------------------------------------------------------
# Wire models
# ---------------------------------------------------------------------------

class TokenResponse(BaseModel):
    """Token endpoint response body"""
    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: Optional[str] = None  # Omitted on refresh when the old one stays valid
    id_token: Optional[str] = None
    expires_in: int
    token_type: Optional[str] = None


class OpenAIOrganization(BaseModel):
    """Organization entry inside the auth claim"""
    id: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None


class OpenAIAuthClaims(BaseModel):
    """Claims under ``https://api.openai.com/auth``"""
    model_config = ConfigDict(extra="ignore")

    chatgpt_account_id: Optional[str] = None
    chatgpt_plan_type: Optional[str] = None
    chatgpt_user_id: Optional[str] = None
    organizations: Optional[List[OpenAIOrganization]] = None


class OpenAIProfileClaims(BaseModel):
    """Claims under ``https://api.openai.com/profile``"""
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None


class JWTClaims(BaseModel):
    """Subset of JWT payload claims the account manager reads

    ``aud`` is a string for some issuers and a list for others, so it is
    left out entirely along with every other unknown claim.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    sub: Optional[str] = None
    email: Optional[str] = None
    exp: Optional[float] = None
    iat: Optional[float] = None
    iss: Optional[str] = None
    openai_auth: Optional[OpenAIAuthClaims] = Field(default=None, alias=AUTH_CLAIM)
    openai_profile: Optional[OpenAIProfileClaims] = Field(default=None, alias=PROFILE_CLAIM)


# ---------------------------------------------------------------------------
# Flow records
# ---------------------------------------------------------------------------

@dataclass
class CallbackResult:
    """Authorization code delivered to the local callback listener"""
    code: str
    state: str


@dataclass
class AuthorizationAttempt:
    """One in-flight authorization attempt, keyed by its state token

    Attributes:
        state: Anti-CSRF state token sent to the issuer
        verifier: PKCE code verifier for this attempt only
        port: Port the callback listener actually bound to
        redirect_uri: Redirect URI sent in the authorize request
        created_at: Epoch seconds when the attempt was registered
    """
    state: str
    verifier: str
    port: int
    redirect_uri: str
    created_at: float = field(default_factory=time.time)

    def is_stale(self, max_age: float, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        return now - self.created_at >= max_age


@dataclass(frozen=True)
class AccountInfo:
    """Identity decoded from an access token

    Attributes:
        account_id: ChatGPT account identifier
        plan_type: Subscription plan ("free" when the token does not say)
        user_id: ChatGPT user identifier (falls back to ``sub``)
        email: Account email
        expires_at: Token expiry from the ``exp`` claim, if present
    """
    account_id: Optional[str]
    plan_type: str
    user_id: Optional[str]
    email: Optional[str]
    expires_at: Optional[datetime.datetime]

    @property
    def is_valid(self) -> bool:
        return self.account_id is not None and self.email is not None


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass
class Account:
    """Account record handed to storage and credential-file writers

    Attributes:
        email: Account email
        account_id: ChatGPT account identifier
        plan_type: Subscription plan
        access_token: Bearer token for API calls
        refresh_token: Long-lived token used to mint new access tokens
        id_token: Identity token ("" when the issuer did not send one)
        expires_at: Absolute access token expiry (UTC)
    """
    email: str
    account_id: str
    plan_type: str
    access_token: str
    refresh_token: str
    id_token: str
    expires_at: datetime.datetime

    @classmethod
    def from_tokens(cls, tokens: TokenResponse, info: AccountInfo) -> "Account":
        """Assemble an account from a token response and its decoded identity"""
        return cls(
            email=info.email or "",
            account_id=info.account_id or "",
            plan_type=info.plan_type,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token or "",
            id_token=tokens.id_token or "",
            expires_at=resolve_expiry(info, tokens),
        )

    @property
    def is_expired(self) -> bool:
        return _utcnow() >= self.expires_at

    @property
    def expires_in(self) -> float:
        """Seconds until the access token expires (negative once expired)"""
        return (self.expires_at - _utcnow()).total_seconds()

    def with_refreshed_tokens(self, tokens: TokenResponse, info: AccountInfo) -> "Account":
        """Copy of this account carrying refreshed tokens

        The previous refresh token is kept when the issuer did not rotate it.
        """
        return replace(
            self,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token or self.refresh_token,
            id_token=tokens.id_token or self.id_token,
            expires_at=resolve_expiry(info, tokens),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        data = asdict(self)
        data["expires_at"] = self.expires_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        """Load from dictionary"""
        expires_at = datetime.datetime.fromisoformat(data["expires_at"])
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=datetime.timezone.utc)
        return cls(
            email=data["email"],
            account_id=data["account_id"],
            plan_type=data.get("plan_type", DEFAULT_PLAN_TYPE),
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token", ""),
            id_token=data.get("id_token", ""),
            expires_at=expires_at,
        )


def resolve_expiry(info: AccountInfo, tokens: TokenResponse) -> datetime.datetime:
    """Expiry from the token's ``exp`` claim, else now + ``expires_in``"""
    if info.expires_at is not None:
        return info.expires_at
    return _utcnow() + datetime.timedelta(seconds=tokens.expires_in)
