from sqlalchemy import Column, String, ForeignKey, Integer, Text, JSON
from sqlalchemy.orm import relationship
from staffquiz.database.base_class import Base

OPTION_KEYS = ("A", "B", "C", "D")


class Question(Base):
    __tablename__ = "questions"

    question_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.quiz_id", ondelete="CASCADE"), nullable=False, index=True)

    # attributes
    text = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)  # {"A": ..., "B": ..., "C": ..., "D": ...}
    correct_answer = Column(String(1), nullable=False, default="A")
    order = Column(Integer, nullable=False)  # 1-based, contiguous within a quiz

    # relationship
    quiz = relationship("Quiz", back_populates="questions")
