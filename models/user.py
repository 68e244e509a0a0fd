"""
Provides the User model for the application's database schema.

The User model holds account credentials, moderation flags and the public
profile of a member of the network. It inherits common behaviors and
attributes from the `BaseModel`.

Attributes
----------
account_name : sqlalchemy.Column
    Unique handle chosen at signup.
username : sqlalchemy.Column
    Display name, defaults to ``User``.
email : sqlalchemy.Column
    The email address of the user, which must also be unique.
password : sqlalchemy.Column
    Bcrypt hash of the password.
is_admin : sqlalchemy.Column
    Grants access to the moderation endpoints.
is_inactive : sqlalchemy.Column
    ``True`` until the account is activated by email.
has_ban : sqlalchemy.Column
    Set by an administrator to suspend the account.

Relationships
-------------
posts, comments, likes : sqlalchemy.orm.relationship
    One-to-many relationships removed together with the user by the
    ``ON DELETE CASCADE`` foreign keys.
"""

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class User(BaseModel):
    """
    Represents a user entity in the application.

    :ivar account_name: Unique account name.
    :type account_name: str
    :ivar email: Email address of the user. It must be unique.
    :type email: str
    :ivar avatar: Storage key of the profile image, if any.
    :type avatar: str
    """

    __tablename__ = "users"

    account_name = Column(String(100), unique=True, nullable=False)
    username = Column(String(100), nullable=False, default="User")
    email = Column(String(255), unique=True, nullable=False)
    password = Column(String(255), nullable=False)

    is_admin = Column(Boolean, nullable=False, default=False)
    is_inactive = Column(Boolean, nullable=False, default=True)
    has_ban = Column(Boolean, nullable=False, default=False)

    activation_token = Column(String(64), index=True)
    password_reset_token = Column(String(64), index=True)

    avatar = Column(String(255))
    city = Column(String(255))
    birthday = Column(DateTime)
    description = Column(String(255))

    # Relationships
    posts = relationship("Post", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    comments = relationship("Comment", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    likes = relationship("Like", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
