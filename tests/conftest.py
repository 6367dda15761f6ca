import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from staffquiz.main import app  # noqa: E402
from staffquiz.database import get_db  # noqa: E402
from staffquiz.database.base_class import Base  # noqa: E402
from staffquiz.model.users import User, ROLE_ADMIN, ROLE_EMPLOYEE  # noqa: E402
from staffquiz.model.quizzes import Quiz  # noqa: E402
from staffquiz.model.questions import Question  # noqa: E402
from staffquiz.router.auth_util import create_access_token, get_password_hash  # noqa: E402

ADMIN_EMAIL = "admin@staffquiz.org"
ADMIN_PASSWORD = "s3cret-pass"


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin(db_session):
    user = User(
        user_id="100000000001",
        email=ADMIN_EMAIL,
        name="Site Admin",
        hashed_password=get_password_hash(ADMIN_PASSWORD),
        role=ROLE_ADMIN,
    )
    db_session.add(user)
    db_session.commit()
    return user


def auth_headers(user: User) -> dict:
    token = create_access_token(
        subject=user.user_id,
        name=user.name,
        role=user.role,
        employee_id=user.employee_id,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def make_employee(db_session):
    counter = {"n": 0}

    def _make(employee_id: str, name: str, department: str = "Sales") -> User:
        counter["n"] += 1
        user = User(
            user_id=f"2000000000{counter['n']:02d}",
            employee_id=employee_id,
            name=name,
            department=department,
            role=ROLE_EMPLOYEE,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture
def make_quiz(db_session, admin):
    def _make(title: str, answers: str = "AB", is_active: bool = True) -> Quiz:
        """answers lists the correct letter of each question in order"""
        quiz = Quiz(title=title, is_active=is_active, creator_id=admin.user_id)
        db_session.add(quiz)
        db_session.flush()
        for idx, letter in enumerate(answers, start=1):
            db_session.add(Question(
                quiz_id=quiz.quiz_id,
                text=f"{title} question {idx}",
                options={"A": "one", "B": "two", "C": "three", "D": "four"},
                correct_answer=letter,
                order=idx,
            ))
        db_session.commit()
        return quiz

    return _make


def question_ids(db_session, quiz: Quiz) -> list:
    return [
        q.question_id for q in
        db_session.query(Question).filter(Question.quiz_id == quiz.quiz_id).order_by(Question.order).all()
    ]


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def question_ids_of(db_session):
    return lambda quiz: question_ids(db_session, quiz)
