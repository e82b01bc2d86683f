from __future__ import annotations

from typing import Any

from appboot import Service


class UsersService(Service):
    def __init__(self) -> None:
        self.model: Any = None

    async def init(self, app: Any) -> None:
        await super().init(app)
        self.model = app.models["user"]
        self.logger.debug("users service wired to the user model")

    def find(self, user_id: int) -> Any:
        return self.model.get(user_id)


exports = UsersService()
