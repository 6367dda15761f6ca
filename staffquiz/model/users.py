from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from staffquiz.database.base_class import Base
from datetime import datetime
from staffquiz.model.quizzes import Quiz
from staffquiz.model.attempts import Attempt

ROLE_ADMIN = "admin"
ROLE_EMPLOYEE = "employee"


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(12), primary_key=True, index=True)
    employee_id = Column(String(50), nullable=True, unique=True, index=True)
    name = Column(String(255), nullable=False)
    department = Column(String(255), nullable=False, default="")
    role = Column(String(20), nullable=False, default=ROLE_EMPLOYEE)

    # admins only
    email = Column(String(255), nullable=True, unique=True)
    hashed_password = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.now)
    last_login_time = Column(DateTime, nullable=True)

    quizzes = relationship("Quiz", back_populates="creator")
    attempts = relationship("Attempt", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
