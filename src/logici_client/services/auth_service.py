"""Authentication service: login, logout, profile and session restore."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from logici_client.app.config import get_settings
from logici_client.domain.schemas import User
from logici_client.infra.http import ApiClient, ApiError, ApplicationError, AuthenticationRequired

logger = logging.getLogger(__name__)

# Profile fields the backend accepts on PUT /api/users/:id, by wire name.
PROFILE_FIELDS: dict[str, str] = {
    "first_name": "firstName",
    "last_name": "lastName",
    "country": "country",
    "state": "state",
    "city": "city",
}


class AuthService:
    """Account operations bound to one ApiClient and its Session."""

    def __init__(self, client: ApiClient):
        self.client = client

    @property
    def session(self):
        return self.client.session

    async def login(self, email_or_mobile: str, password: str) -> User:
        """Exchange credentials for a token and remember both token and user."""
        body = await self.client.post(
            "/auth/login",
            json={"emailOrMobile": email_or_mobile, "password": password},
        )
        payload = body.get("data") if isinstance(body.get("data"), dict) else body
        token = payload.get("token")
        if not token:
            raise ApplicationError("Login failed", body)
        user = _to_user(payload.get("user") or {})
        self.session.login(token, user)
        logger.info("Logged in as user %s", user.id if user else "?")
        return user

    async def logout(self) -> None:
        """Notify the backend (best effort) and purge the local session."""
        if self.session.token:
            try:
                await self.client.post("/auth/logout", auth=True)
            except ApiError as exc:
                logger.warning("Logout request failed: %s", exc.message)
        if self.session.token or self.session.user:
            self.session.teardown()

    async def current_user(self) -> User:
        body = await self.client.get("/me", auth=True)
        user = _to_user(body.get("data") or {})
        if user is None:
            raise ApplicationError("Malformed /me response", body)
        self.session.set_user(user)
        return user

    async def update_profile(self, user_id: int | str, **fields: Any) -> User:
        """Update profile fields; unknown field names raise KeyError."""
        unknown = set(fields) - set(PROFILE_FIELDS)
        if unknown:
            raise KeyError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        payload = {PROFILE_FIELDS[name]: value for name, value in fields.items()}
        body = await self.client.put(f"/api/users/{user_id}", json=payload, auth=True)

        current = self.session.user.model_dump() if self.session.user else {"id": user_id}
        updated = User.model_validate({"id": user_id, **(body.get("data") or {})})
        user = _to_user({**current, **updated.model_dump(exclude_unset=True)})
        self.session.set_user(user)
        return user

    async def restore(self) -> User | None:
        """Validate a stored token; a rejected or unusable token is discarded."""
        if not self.session.token:
            return None
        try:
            return await self.current_user()
        except AuthenticationRequired:
            return None
        except ApiError as exc:
            logger.warning("Session restore failed: %s", exc.message)
            self.session.teardown()
            return None


def _to_user(raw: dict[str, Any]) -> User | None:
    if not raw:
        return None
    try:
        user = User.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Ignoring malformed user payload: %s", exc)
        return None
    admin_role = get_settings().admin_role_id
    if admin_role and str(user.role_id) == admin_role:
        user = user.model_copy(update={"is_admin": True})
    return user
