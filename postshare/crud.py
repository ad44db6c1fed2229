from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from . import models
from .exceptions import ConflictError

UPDATABLE_POST_FIELDS = ("title", "content", "published")


# User CRUD


def create_user(
    db: Session,
    email: str,
    password_hash: str,
    first_name: str,
    last_name: str,
) -> models.User:
    """Create a new user.

    Raises:
        ConflictError: if a user with exactly this email already exists.
    """
    if get_user_by_email(db, email) is not None:
        raise ConflictError("User with this email already exists")

    user = models.User(
        email=email,
        password_hash=password_hash,
        first_name=first_name,
        last_name=last_name,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent signup for the same email.
        db.rollback()
        raise ConflictError("User with this email already exists") from exc

    db.refresh(user)
    return user


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    stmt = select(models.User).where(models.User.email == email)
    return db.execute(stmt).scalar_one_or_none()


def get_user_by_id(db: Session, user_id: int) -> Optional[models.User]:
    return db.get(models.User, user_id)


# Post CRUD


def _post_query():
    return select(models.Post).options(joinedload(models.Post.author))


def _newest_first(stmt):
    return stmt.order_by(models.Post.created_at.desc(), models.Post.id.desc())


def create_post(db: Session, fields: dict, author_id: int) -> models.Post:
    """Store a post owned by ``author_id``.

    Only the updatable columns are read from ``fields``; an author id in the
    input is never honoured.
    """
    values = {key: fields[key] for key in UPDATABLE_POST_FIELDS if key in fields}
    post = models.Post(**values, author_id=author_id)
    db.add(post)
    db.commit()
    db.refresh(post)
    return get_post(db, post.id)


def get_posts(db: Session) -> List[models.Post]:
    stmt = _newest_first(_post_query())
    return list(db.execute(stmt).scalars().unique().all())


def get_posts_by_author(db: Session, author_id: int) -> List[models.Post]:
    stmt = _newest_first(_post_query().where(models.Post.author_id == author_id))
    return list(db.execute(stmt).scalars().unique().all())


def get_post(db: Session, post_id: int) -> Optional[models.Post]:
    stmt = _post_query().where(models.Post.id == post_id)
    return db.execute(stmt).scalars().unique().one_or_none()


def get_post_by_author_and_id(
    db: Session, author_id: int, post_id: int
) -> Optional[models.Post]:
    stmt = _post_query().where(
        models.Post.id == post_id, models.Post.author_id == author_id
    )
    return db.execute(stmt).scalars().unique().one_or_none()


def update_post(db: Session, post_id: int, fields: dict) -> Optional[models.Post]:
    """Apply only the keys present in ``fields``; everything else is left as is."""
    post = db.get(models.Post, post_id)
    if post is None:
        return None

    for key in UPDATABLE_POST_FIELDS:
        if key in fields:
            setattr(post, key, fields[key])

    db.commit()
    db.refresh(post)
    return get_post(db, post.id)


def delete_post(db: Session, post_id: int) -> bool:
    """Delete a post by id.

    Returns:
        True if a post was deleted, False if the post did not exist.
    """
    post = db.get(models.Post, post_id)
    if post is None:
        return False

    db.delete(post)
    db.commit()
    return True
