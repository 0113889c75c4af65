"""Signed-in user, as supplied by the external authentication backend.

The acting teacher ID is trusted as-is; it is not checked against the
teacher collection.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from synckaro.db.store import KeyValueStore
from synckaro.models import CurrentUser

logger = logging.getLogger(__name__)


class Session:
    """Reads and writes the auth record kept in the store."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def current_user(self) -> Optional[CurrentUser]:
        """Get the signed-in user, or None."""
        data = self.store.get_auth()
        if not data or not data.get("isAuthenticated"):
            return None
        try:
            return CurrentUser.model_validate(data.get("user") or {})
        except ValidationError:
            logger.warning("Ignoring malformed auth record")
            return None

    def sign_in(self, user: CurrentUser, token: str = "") -> None:
        self.store.set_auth({
            "user": user.to_record(),
            "token": token,
            "isAuthenticated": True,
        })
        logger.info("Signed in as %s", user.id)

    def sign_out(self) -> None:
        self.store.clear_auth()
