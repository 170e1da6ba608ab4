"""
User model.

Users are the authors of recipes and schedules. Authentication data
(password hashes, tokens) is owned by an external service and not stored here.
"""

import uuid as uuid_lib

from sqlalchemy import Column, String, DateTime

from .base import Base, columns_to_dict
from grocery_planner.utils.constants import ROLE_USER
from grocery_planner.utils.datetime_utils import utc_now


class User(Base):
    """
    Recipe and schedule author.

    Attributes:
        id: UUID string primary key
        username: Unique login name
        email: Optional unique email address
        role: "user" or "admin"
        created_at: When the user was created
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid_lib.uuid4()))
    username = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=True)
    role = Column(String(20), nullable=False, default=ROLE_USER)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    def to_dict(self):
        return columns_to_dict(self)

    def __repr__(self) -> str:
        return f"User(id='{self.id}', username='{self.username}')"
