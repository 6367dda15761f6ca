# create_tables.py
from sqlalchemy import inspect

from staffquiz.model import attempts, questions, quizzes, users  # noqa: F401
from staffquiz.database.base_class import Base
from staffquiz.database.session import SQLALCHEMY_DATABASE_URL, get_engine
from staffquiz.log import get_logger

log = get_logger("create_tables")

engine = get_engine(SQLALCHEMY_DATABASE_URL)

Base.metadata.create_all(bind=engine)
log.info("Tables created.")

inspector = inspect(engine)
log.info("Existing tables: %s", inspector.get_table_names())
