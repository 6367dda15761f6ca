from sqlalchemy import Column, String, Boolean, ForeignKey, DateTime, Integer
from sqlalchemy.orm import relationship
from staffquiz.database.base_class import Base
from datetime import datetime
from staffquiz.model.questions import Question


class Quiz(Base):
    __tablename__ = "quizzes"

    quiz_id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # FK
    creator_id = Column(String(12), ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)

    # attributes
    title = Column(String(255), nullable=False)
    description = Column(String(512), nullable=True)
    is_active = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    # relationship
    questions = relationship(
        "Question",
        back_populates="quiz",
        order_by=Question.order,
        cascade="all, delete-orphan",
    )
    attempts = relationship("Attempt", back_populates="quiz", cascade="all, delete-orphan")
    creator = relationship("User", back_populates="quizzes")
