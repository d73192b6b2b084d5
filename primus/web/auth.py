import hmac
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

from primus.helpers.config_helper import ConfigHelper
from primus.helpers.logging_helper import log_warning


@dataclass(frozen=True)
class AuthIdentity:
    owner_id: str
    claims: Dict[str, Any] = field(default_factory=dict)


def extract_bearer_token(header_value: Optional[str]) -> Optional[str]:
    """Return the credential from an ``Authorization: Bearer <token>`` header."""

    if not header_value:
        return None
    scheme, _, token = header_value.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


class AuthVerifier:
    """Maps a bearer credential to the identity that owns character records."""

    def verify(self, credential: Optional[str]) -> Optional[AuthIdentity]:
        raise NotImplementedError


class StaticTokenVerifier(AuthVerifier):
    """Fixed table of API tokens, each bound to one owner id."""

    def __init__(self, tokens: Optional[Mapping[str, str]] = None):
        self._tokens = {str(token).strip(): str(owner).strip() for token, owner in (tokens or {}).items() if str(token).strip()}

    @classmethod
    def parse_token_table(cls, raw: str) -> Dict[str, str]:
        tokens: Dict[str, str] = {}
        for entry in (raw or "").replace("\n", ",").split(","):
            entry = entry.strip()
            if not entry:
                continue
            token, sep, owner = entry.partition(":")
            if not sep or not token.strip() or not owner.strip():
                log_warning(f"Ignoring malformed [Auth] tokens entry '{entry[:4]}...'")
                continue
            tokens[token.strip()] = owner.strip()
        return tokens

    @classmethod
    def from_config(cls) -> "StaticTokenVerifier":
        raw = str(ConfigHelper.get("Auth", "tokens", fallback="") or "")
        return cls(cls.parse_token_table(raw))

    def verify(self, credential: Optional[str]) -> Optional[AuthIdentity]:
        if not credential:
            return None
        owner_id = None
        # No early exit: every entry is compared.
        for token, owner in self._tokens.items():
            if hmac.compare_digest(token.encode("utf-8"), str(credential).encode("utf-8")):
                owner_id = owner
        if owner_id is None:
            return None
        return AuthIdentity(owner_id=owner_id, claims={"method": "static_token"})


class CallbackVerifier(AuthVerifier):
    """Delegates to an identity callback supplied by the hosting platform."""

    def __init__(self, callback: Callable[[str], Optional[Mapping[str, Any]]]):
        self._callback = callback

    def verify(self, credential: Optional[str]) -> Optional[AuthIdentity]:
        if not credential:
            return None
        claims = self._callback(credential)
        if not claims:
            return None
        owner_id = claims.get("owner_id") or claims.get("uid") or claims.get("sub")
        if not owner_id:
            return None
        return AuthIdentity(owner_id=str(owner_id), claims=dict(claims))
