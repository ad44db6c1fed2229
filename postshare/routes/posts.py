from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from .. import models, schemas, services
from ..auth import get_current_user
from ..database import get_db

router = APIRouter(
    prefix="/posts",
    tags=["posts"],
    responses={401: {"model": schemas.ErrorResponse}},
)


@router.post("", response_model=schemas.PostOut, status_code=status.HTTP_201_CREATED)
def create_post(
    post_in: schemas.PostCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return services.create_post(db, post_in.model_dump(), current_user.id)


@router.get("", response_model=List[schemas.PostOut])
def list_posts(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return services.list_posts(db)


# Declared before /{post_id} so "my-posts" is not parsed as an id.
@router.get("/my-posts", response_model=List[schemas.PostOut])
def list_my_posts(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return services.list_my_posts(db, current_user.id)


@router.get(
    "/{post_id}",
    response_model=schemas.PostOut,
    responses={404: {"model": schemas.ErrorResponse}},
)
def get_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return services.get_post(db, post_id)


@router.patch(
    "/{post_id}",
    response_model=schemas.PostOut,
    responses={
        403: {"model": schemas.ErrorResponse},
        404: {"model": schemas.ErrorResponse},
    },
)
def update_post(
    post_id: int,
    post_in: schemas.PostUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return services.update_post(db, post_id, post_in.changes(), current_user.id)


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        403: {"model": schemas.ErrorResponse},
        404: {"model": schemas.ErrorResponse},
    },
)
def delete_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    services.delete_post(db, post_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
