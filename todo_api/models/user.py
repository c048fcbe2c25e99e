"""User account model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from todo_api.models.base import BaseModel


class User(BaseModel):
    """API user. Passwords are stored as Argon2id hashes only."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<User {self.username}>"
