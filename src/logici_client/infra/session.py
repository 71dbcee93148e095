"""Persistent token storage and the explicit client session."""

import json
import logging
from pathlib import Path
from typing import Any, Callable

from logici_client.app.config import get_settings
from logici_client.domain.schemas import User

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"

# Older builds wrote the token under any of these; first hit wins.
LEGACY_TOKEN_KEYS: tuple[str, ...] = ("auth_token", "authToken", "accessToken", "jwt")


class TokenStore:
    """JSON-file key-value store holding the session token and cached user.

    On load, tokens found under legacy key names are migrated once onto the
    canonical ``token`` key and the legacy keys are dropped.
    """

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or get_settings().session_file).expanduser()
        self._data: dict[str, Any] = self._read()
        self._migrate_legacy_keys()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")

    def _migrate_legacy_keys(self) -> None:
        legacy_present = [key for key in LEGACY_TOKEN_KEYS if key in self._data]
        if not legacy_present:
            return
        if not self._data.get(TOKEN_KEY):
            for key in LEGACY_TOKEN_KEYS:
                if self._data.get(key):
                    self._data[TOKEN_KEY] = self._data[key]
                    logger.info("Migrated session token from legacy key %r", key)
                    break
        for key in legacy_present:
            self._data.pop(key, None)
        self._write()

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._write()

    def remove(self, *keys: str) -> None:
        changed = False
        for key in keys:
            if key in self._data:
                del self._data[key]
                changed = True
        if changed:
            self._write()


class Session:
    """Explicit auth context handed to every data-access call.

    ``on_logout`` stands in for the redirect to the home route; it is called
    after the token and user have been purged.
    """

    def __init__(
        self,
        store: TokenStore | None = None,
        on_logout: Callable[[], None] | None = None,
    ):
        self.store = store
        self.on_logout = on_logout
        self.token: str | None = store.get(TOKEN_KEY) if store else None
        self.user: User | None = None
        cached_user = store.get(USER_KEY) if store else None
        if cached_user:
            self.user = User.model_validate(cached_user)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def login(self, token: str, user: User | None = None) -> None:
        self.token = token
        self.user = user
        if self.store is not None:
            self.store.set(TOKEN_KEY, token)
            if user is not None:
                self.store.set(USER_KEY, user.model_dump(mode="json"))

    def set_user(self, user: User) -> None:
        self.user = user
        if self.store is not None:
            self.store.set(USER_KEY, user.model_dump(mode="json"))

    def teardown(self) -> None:
        """Purge credentials and notify the embedding UI."""
        logger.info("Tearing down client session")
        self.token = None
        self.user = None
        if self.store is not None:
            self.store.remove(TOKEN_KEY, USER_KEY, *LEGACY_TOKEN_KEYS)
        if self.on_logout is not None:
            self.on_logout()
