# create_admin.py
# usage: python -m script.create_admin <email> <name> <password>
import sys

from pydantic import ValidationError

from staffquiz.database.db import get_ctx_db
from staffquiz.database.session import SQLALCHEMY_DATABASE_URL
from staffquiz.model.users import User, ROLE_ADMIN
from staffquiz.router.auth_util import generate_unique_user_id, get_password_hash
from staffquiz.schema.auth_schema import AdminCreate
from staffquiz.log import get_logger

log = get_logger("create_admin")


def create_admin(admin: AdminCreate) -> str:
    with get_ctx_db(SQLALCHEMY_DATABASE_URL) as db:
        if db.query(User).filter(User.email == admin.email).first():
            raise ValueError(f"A user with email {admin.email} already exists")
        user = User(
            user_id=generate_unique_user_id(db),
            email=admin.email,
            name=admin.name,
            hashed_password=get_password_hash(admin.password),
            role=ROLE_ADMIN,
        )
        db.add(user)
        db.commit()
        return user.user_id


if __name__ == "__main__":
    if len(sys.argv) != 4:
        print("usage: python -m script.create_admin <email> <name> <password>")
        sys.exit(2)
    try:
        user_id = create_admin(AdminCreate(email=sys.argv[1], name=sys.argv[2], password=sys.argv[3]))
    except (ValidationError, ValueError) as e:
        log.error("Could not create admin: %s", e)
        sys.exit(1)
    log.info("Admin %s created with user id %s", sys.argv[1], user_id)
