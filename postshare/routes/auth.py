from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import schemas, services
from ..database import get_db

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/signup",
    response_model=schemas.AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": schemas.ErrorResponse}},
)
def signup(payload: schemas.SignUpRequest, db: Session = Depends(get_db)):
    return services.signup(db, payload)


@router.post(
    "/login",
    response_model=schemas.AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": schemas.ErrorResponse}},
)
def login(payload: schemas.LoginRequest, db: Session = Depends(get_db)):
    return services.login(db, payload)
