from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from staffquiz.database import get_db
from staffquiz.schema.auth_schema import Token, LoginRequestAdmin, LoginRequestEmployee
from staffquiz.router.service.auth_service.login_service import (
    login_administrator_logic, login_employee_logic
)


router = APIRouter()


@router.post("/login-employee", response_model=Token, status_code=status.HTTP_200_OK)
async def login_employee(request: LoginRequestEmployee,
                         db: Session = Depends(get_db)):
    """Employee login by employee ID

    Args:
        request (LoginRequestEmployee): Login request with the employee ID
        db (Session): Database session

    Raises:
        HTTPException: When no employee has this ID

    Returns:
        Token: Access token for successful authentication
    """
    return login_employee_logic(db, request)


@router.post("/login-admin", response_model=Token, status_code=status.HTTP_200_OK)
async def login_administrator(request: LoginRequestAdmin,
                              db: Session = Depends(get_db)):
    """Administrator login endpoint

    Args:
        request (LoginRequestAdmin): Login request with email and password
        db (Session): Database session

    Raises:
        HTTPException: When user not found, is not an admin, or credentials are incorrect

    Returns:
        Token: Access token for successful authentication
    """
    return login_administrator_logic(db, request)
