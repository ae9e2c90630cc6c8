"""SQLAlchemy model for the user table."""

from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.sql import expression

from studity.infrastructure.database import Base


class UserModel(Base):
    """Database representation of a marketplace user."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    email = Column(String(120), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="student")
    is_active = Column(
        Boolean,
        nullable=False,
        default=True,
        server_default=expression.true(),
    )


__all__ = ["UserModel"]
