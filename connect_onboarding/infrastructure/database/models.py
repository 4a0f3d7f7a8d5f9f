"""SQLAlchemy ORM models"""

import uuid
from sqlalchemy import Column, DateTime, Text, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class User(Base):
    """Registered user linked to a Stripe connected account"""

    __tablename__ = "app_user"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(Text, nullable=False, unique=True, index=True)
    password = Column(Text, nullable=False)  # bcrypt hash
    account_id = Column(Text, nullable=False)
    country = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
