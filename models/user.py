# models/user.py
from sqlalchemy import Column, Integer, String, Enum as SQLAlchemyEnum, DateTime
from sqlalchemy.sql import func
from enum import Enum
from .base import Base


class UserRole(str, Enum):
    CUSTOMER = 'customer'
    ADMIN = 'admin'


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    role = Column(SQLAlchemyEnum(UserRole, name="user_role_enum"), default=UserRole.CUSTOMER, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
