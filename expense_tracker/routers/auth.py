import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from expense_tracker.core.errors import ConflictError, InvalidCredentialsError
from expense_tracker.core.security import create_access_token, get_password_hash, verify_password
from expense_tracker.db.models import User
from expense_tracker.db.session import get_db
from expense_tracker.models.schemas import (
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    email = payload.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise ConflictError()

    user = User(
        username=payload.username,
        email=email,
        hashed_password=get_password_hash(payload.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email
        db.rollback()
        raise ConflictError()
    db.refresh(user)

    logger.info("Registered user id=%s", user.id)
    return {"success": True, "user": user}


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email.lower()).first()
    if not user or not verify_password(payload.password, user.hashed_password):
        logger.info("Failed login attempt")
        raise InvalidCredentialsError()

    logger.info("User id=%s logged in", user.id)
    return {"token": create_access_token(user.id)}
