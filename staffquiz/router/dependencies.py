from typing import Union

from fastapi import Depends, status, HTTPException, Security
from fastapi.security import OAuth2PasswordBearer
from jose import jwt
from pydantic import ValidationError
from sqlalchemy.orm import Session

from staffquiz.config import settings
from staffquiz.database import get_db
from staffquiz.model.users import User, ROLE_EMPLOYEE
from staffquiz.schema.auth_schema import TokenPayload
from staffquiz.log import get_logger

log = get_logger(__name__)

oauth2_scheme_admin = OAuth2PasswordBearer(tokenUrl="auth/login-admin", auto_error=False)
oauth2_scheme_employee = OAuth2PasswordBearer(tokenUrl="auth/login-employee", auto_error=False)


def get_token_from_any_scheme(
    token_admin: Union[str, None] = Security(oauth2_scheme_admin),
    token_employee: Union[str, None] = Security(oauth2_scheme_employee),
) -> str:
    """
    Try to extract token from either the admin or the employee login scheme.
    Raises 403 if no token is found.
    """
    if token_admin:
        return token_admin
    if token_employee:
        return token_employee
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authenticated")


def get_token(token: str = Depends(get_token_from_any_scheme)) -> TokenPayload:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        token_data = TokenPayload(**payload)
    except (jwt.JWTError, ValidationError) as e:
        log.warning("rejected access token: %s", e)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Could not validate credentials") from e
    return token_data


def get_current_user(
    db: Session = Depends(get_db), token: TokenPayload = Depends(get_token)
) -> User:
    user = db.query(User).filter(User.user_id == token.sub).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )
    return user


def get_current_admin(
    current_user: User = Depends(get_current_user),
) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This user isn't an admin.",
        )
    return current_user


def get_current_employee(
    current_user: User = Depends(get_current_user),
) -> User:
    if current_user.role != ROLE_EMPLOYEE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This user isn't an employee.",
        )
    return current_user
