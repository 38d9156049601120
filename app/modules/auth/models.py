from sqlalchemy import Column, Integer, String, Boolean, DateTime
from app.database.database import Base
from app.common.mixins import TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(120), unique=True, nullable=False, index=True)
    password = Column(String, nullable=False)
    full_name = Column(String(120), nullable=False)
    role = Column(String(20), nullable=False, default="viewer")  # owner, admin, seller, accountant, viewer
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)
