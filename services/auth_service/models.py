from sqlalchemy import Column, Integer, String

from shared.config.database import Base
from shared.security.roles import Role


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)  # bcrypt hash
    role = Column(String(20), nullable=False, default=Role.EMPLOYEE.value)
