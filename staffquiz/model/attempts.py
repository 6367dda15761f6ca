from sqlalchemy import Column, String, ForeignKey, DateTime, Integer, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from staffquiz.database.base_class import Base


class Attempt(Base):
    __tablename__ = "attempts"

    attempt_id = Column(Integer, index=True, primary_key=True, autoincrement=True)

    # FK
    user_id = Column(String(12), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    quiz_id = Column(Integer, ForeignKey("quizzes.quiz_id", ondelete="CASCADE"), nullable=False)

    # attributes
    score = Column(Integer, default=0, nullable=False)
    total_questions = Column(Integer, default=0, nullable=False)  # snapshot at last answer
    completed_at = Column(DateTime, nullable=True)  # last answer time
    answers = Column(JSON, default=dict, nullable=False)  # {question_id: {selected_answer, is_correct}}

    __table_args__ = (
        UniqueConstraint("user_id", "quiz_id", name="uq_attempt_user_quiz"),
    )

    # relationship
    user = relationship("User", back_populates="attempts")
    quiz = relationship("Quiz", back_populates="attempts")
