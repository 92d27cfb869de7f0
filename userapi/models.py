from __future__ import annotations

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import DeclarativeMeta, declarative_base

Base: DeclarativeMeta = declarative_base()


class User(Base):
    """Persisted user record. Email uniqueness is enforced by the table."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"<User id={self.id} name={self.name} email={self.email}>"
