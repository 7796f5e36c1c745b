"""User model definitions."""

from sqlalchemy import Boolean, Column, Integer, String
from tetelek.database import Base


class User(Base):
    """Represents an application user."""
    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, nullable=False)
    password = Column(String(255), nullable=False)  # argon2 hash, never plaintext
    email = Column(String(255), unique=True, nullable=False)
    superuser = Column(Boolean, nullable=False, default=False)
