from staffquiz.database.db import get_db, get_ctx_db

__all__ = ["get_db", "get_ctx_db"]
