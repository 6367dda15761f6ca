from staffquiz.model import attempts, questions, quizzes, users

__all__ = ["attempts", "questions", "quizzes", "users"]
