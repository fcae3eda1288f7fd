"""ORM model for application users (auth and upload tiers)."""

from sqlalchemy import Column, Integer, String

from rampart.models.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'admin', 'analyst' or 'viewer'. Admins and analysts may upload;
    scorecard formats are admin-only.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="viewer")
