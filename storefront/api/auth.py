"""Login, registration and session lookup."""

import logging
from typing import Optional

from ..models import LoginCredentials, RegisterData, User
from .client import ApiClient, ApiError

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def csrf_cookie(self) -> None:
        """Ask the backend to (re)issue the XSRF-TOKEN cookie."""
        await self.client.get("/sanctum/csrf-cookie")

    async def login(self, credentials: LoginCredentials) -> User:
        await self.csrf_cookie()
        data = await self.client.post("/api/login", json=credentials.model_dump())
        return User.model_validate(data["user"])

    async def register(self, data: RegisterData) -> User:
        await self.csrf_cookie()
        result = await self.client.post(
            "/api/register", json=data.model_dump(exclude_none=True)
        )
        return User.model_validate(result["user"])

    async def logout(self) -> None:
        await self.client.post("/api/logout")

    async def get_user(self) -> Optional[User]:
        """Current user, or None when the session is anonymous or the call fails."""
        try:
            data = await self.client.get("/api/user")
        except ApiError as e:
            logger.debug(f"No authenticated user: {e}")
            return None
        user = data.get("user")
        return User.model_validate(user) if user else None
