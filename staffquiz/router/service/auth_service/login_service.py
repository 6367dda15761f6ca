from datetime import timedelta, datetime
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from staffquiz.config import settings
from staffquiz.router.auth_util import verify_password, create_access_token
from staffquiz.model.users import User, ROLE_ADMIN, ROLE_EMPLOYEE
from staffquiz.schema.auth_schema import LoginRequestAdmin, LoginRequestEmployee
from staffquiz.log import get_logger

log = get_logger(__name__)


def login_employee_logic(db: Session, request: LoginRequestEmployee) -> dict:
    employee_id = request.employee_id.strip()
    if not employee_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Employee ID is required"
        )

    user = db.query(User).filter(
        User.employee_id == employee_id,
        User.role == ROLE_EMPLOYEE
    ).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Employee ID not found."
        )

    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        subject=user.user_id,
        name=user.name,
        role=ROLE_EMPLOYEE,
        employee_id=user.employee_id,
        expires_delta=access_token_expires
    )

    # Update last login time
    user.last_login_time = datetime.now()
    db.commit()
    log.info("employee %s logged in", user.employee_id)

    return {"access_token": access_token, "token_type": "bearer"}


def login_administrator_logic(db: Session, request: LoginRequestAdmin) -> dict:
    user = db.query(User).filter(User.email == request.email.strip()).first()

    if not user or not user.hashed_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid Credentials"
        )

    if user.role != ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This account doesn't have admin access"
        )

    # Verify password
    if not verify_password(request.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid Credentials"
        )

    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        subject=user.user_id,
        name=user.name,
        role=ROLE_ADMIN,
        expires_delta=access_token_expires
    )
    user.last_login_time = datetime.now()
    db.commit()
    log.info("admin %s logged in", user.email)

    return {"access_token": access_token, "token_type": "bearer"}
