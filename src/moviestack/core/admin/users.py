"""Admin user management and "login as" impersonation."""

import asyncio
from typing import Any

from loguru import logger

from moviestack.api import ApiError
from moviestack.feedback import ActionFeedback, failure_message
from moviestack.identity import IdentityStore
from moviestack.models.movie import AdminUser, Identity
from moviestack.protocols import ApiProtocol

_USERS_PATH = "/api/admin/users"


def list_users(api: ApiProtocol) -> list[AdminUser]:
    data = api.call("GET", _USERS_PATH)
    if not isinstance(data, list):
        msg = f"bad users response: expected a list, got {type(data).__name__}"
        raise ValueError(msg)
    return [AdminUser.from_api(row) for row in data]


def create_user(api: ApiProtocol, username: str) -> AdminUser | None:
    """Create a user; returns the created record when the server sends one back."""
    data = api.call("POST", _USERS_PATH, payload={"username": username})
    if not isinstance(data, dict):
        return None
    try:
        return AdminUser.from_api(data)
    except ValueError:
        logger.debug("Create-user response not parseable as a user: {!r}", data)
        return None


def delete_user(api: ApiProtocol, user_id: int) -> None:
    api.call("DELETE", f"{_USERS_PATH}/{user_id}")


class UserAdmin:
    """State behind the admin pages: the user list plus create/delete/login."""

    def __init__(
        self,
        api: ApiProtocol,
        identity_store: IdentityStore,
        *,
        feedback: ActionFeedback | None = None,
    ) -> None:
        self._api = api
        self.identity_store = identity_store
        self.feedback = feedback or ActionFeedback()
        self.users: list[AdminUser] = []
        self.creating = False
        self.deleting_id: int | None = None

    async def refresh(self) -> bool:
        try:
            self.users = await asyncio.to_thread(list_users, self._api)
        except (ApiError, ValueError) as e:
            logger.debug("Listing users failed: {}", e)
            # The list endpoint carries no useful error text.
            self.feedback.fail("Failed to load users")
            return False
        return True

    async def create(self, username: str) -> dict[str, Any]:
        """Create a user after trimming; blank names never reach the server."""
        trimmed = username.strip()
        if not trimmed:
            self.feedback.fail("Username is required")
            return {"success": False, "error": "Username is required"}

        self.creating = True
        try:
            created = await asyncio.to_thread(create_user, self._api, trimmed)
        except ApiError as e:
            logger.debug("Creating user {!r} failed: {}", trimmed, e)
            error = failure_message(e, "Failed to create user")
            self.feedback.fail(error)
            return {"success": False, "error": error}
        finally:
            self.creating = False

        self.feedback.succeed(f'Created user "{trimmed}"')
        await self.refresh()
        output: dict[str, Any] = {"success": True, "username": trimmed}
        if created is not None:
            output["user_id"] = created.id
        return output

    async def delete(self, user: AdminUser) -> dict[str, Any]:
        """Delete a user. Deleting the active user also logs out."""
        if self.deleting_id == user.id:
            return {"success": False, "error": f'User "{user.username}" is already being deleted.'}

        self.deleting_id = user.id
        try:
            await asyncio.to_thread(delete_user, self._api, user.id)
        except ApiError as e:
            logger.debug("Deleting user {} failed: {}", user.id, e)
            error = failure_message(e, "Failed to delete user")
            self.feedback.fail(error)
            return {"success": False, "error": error}
        finally:
            self.deleting_id = None

        active = self.identity_store.load()
        if active is not None and active.id == user.id:
            self.identity_store.clear()
        self.feedback.succeed(f'Deleted user "{user.username}"')
        await self.refresh()
        return {"success": True, "user_id": user.id}

    def login_as(self, user: AdminUser | Identity) -> Identity:
        identity = user.identity() if isinstance(user, AdminUser) else user
        self.identity_store.save(identity)
        return identity

    def logout(self) -> None:
        self.identity_store.clear()
