from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class User:
    id: int
    name: str


@dataclass
class UserModel:
    app: Any = None
    users: dict[int, User] = field(default_factory=dict)

    def init(self, app: Any) -> None:
        self.app = app
        self.users = {1: User(id=1, name="admin")}

    def get(self, user_id: int) -> User | None:
        return self.users.get(user_id)


exports = UserModel()
