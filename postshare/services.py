"""
Use-case layer between the HTTP routes and the store.

Signup/login compose the store with the credential and token helpers in
``postshare.auth``. The post operations compose the store with the single
ownership rule, :func:`can_mutate`.
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from . import crud, models, schemas
from .auth import create_access_token, hash_password, verify_password
from .exceptions import ForbiddenError, NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)


# Authorization


def can_mutate(post: models.Post, acting_user_id: int) -> bool:
    """Only the author of a post may update or delete it."""
    return post.author_id == acting_user_id


# Auth


def _auth_response(user: models.User) -> schemas.AuthResponse:
    return schemas.AuthResponse(
        access_token=create_access_token(user),
        user=schemas.UserOut.model_validate(user),
    )


def signup(db: Session, payload: schemas.SignUpRequest) -> schemas.AuthResponse:
    user = crud.create_user(
        db,
        email=payload.email,
        password_hash=hash_password(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    logger.info("Registered user id=%s", user.id)
    return _auth_response(user)


def login(db: Session, payload: schemas.LoginRequest) -> schemas.AuthResponse:
    user = crud.get_user_by_email(db, payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.warning("Failed login attempt for %s", payload.email)
        raise UnauthorizedError("Invalid credentials")
    logger.info("User id=%s logged in", user.id)
    return _auth_response(user)


# Posts


def _get_existing_post(db: Session, post_id: int) -> models.Post:
    post = crud.get_post(db, post_id)
    if post is None:
        raise NotFoundError(f"Post with ID {post_id} not found")
    return post


def create_post(db: Session, fields: dict, caller_id: int) -> models.Post:
    post = crud.create_post(db, fields, author_id=caller_id)
    logger.info("User id=%s created post id=%s", caller_id, post.id)
    return post


def list_posts(db: Session) -> List[models.Post]:
    return crud.get_posts(db)


def list_my_posts(db: Session, caller_id: int) -> List[models.Post]:
    return crud.get_posts_by_author(db, caller_id)


def get_post(db: Session, post_id: int) -> models.Post:
    return _get_existing_post(db, post_id)


def update_post(db: Session, post_id: int, changes: dict, caller_id: int) -> models.Post:
    # Existence is checked before ownership: a missing id is always NotFound.
    post = _get_existing_post(db, post_id)
    if not can_mutate(post, caller_id):
        logger.warning("User id=%s tried to update post id=%s", caller_id, post_id)
        raise ForbiddenError("You can only update your own posts")

    updated = crud.update_post(db, post_id, changes)
    if updated is None:
        raise NotFoundError(f"Post with ID {post_id} not found after update")
    logger.info("User id=%s updated post id=%s", caller_id, post_id)
    return updated


def delete_post(db: Session, post_id: int, caller_id: int) -> None:
    post = _get_existing_post(db, post_id)
    if not can_mutate(post, caller_id):
        logger.warning("User id=%s tried to delete post id=%s", caller_id, post_id)
        raise ForbiddenError("You can only delete your own posts")

    if not crud.delete_post(db, post_id):
        raise NotFoundError(f"Post with ID {post_id} could not be deleted")
    logger.info("User id=%s deleted post id=%s", caller_id, post_id)
