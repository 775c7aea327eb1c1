"""
Identity and profile models.
"""
import enum

from sqlalchemy import Boolean, Column, DateTime, String

from grocerypos.core.database import Base
from grocerypos.models.catalog import new_id, utcnow


class UserRole(enum.Enum):
    """Profile role enumeration."""
    CASHIER = "cashier"
    ADMIN = "admin"


class AuthUser(Base):
    """Identity record owned by the auth provider."""
    __tablename__ = "auth_users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(320), unique=True, index=True, nullable=False)
    password_hash = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<AuthUser(id='{self.id}', email='{self.email}')>"


class Profile(Base):
    """Model for cashier/admin profiles; shares its id with the identity."""
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    full_name = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.CASHIER.value)
    approved = Column(Boolean, nullable=False, default=False)
    # Most recent session; older sessions on other devices are invalidated
    active_session_token = Column(String(100), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Profile(id='{self.id}', role='{self.role}', approved={self.approved})>"
