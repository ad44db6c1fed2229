"""
Client session state and the reducer that evolves it.

State is immutable; every change goes through :func:`reduce` with one of the
action variants below.
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from ..schemas import PostOut, UserOut


@dataclass(frozen=True)
class SessionState:
    user: Optional[UserOut] = None
    posts: Tuple[PostOut, ...] = ()
    busy: bool = False
    last_error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


@dataclass(frozen=True)
class SetUser:
    user: Optional[UserOut]


@dataclass(frozen=True)
class SetPosts:
    posts: Tuple[PostOut, ...]


@dataclass(frozen=True)
class ReplacePost:
    post: PostOut


@dataclass(frozen=True)
class RemovePost:
    post_id: int


@dataclass(frozen=True)
class SetBusy:
    busy: bool


@dataclass(frozen=True)
class SetError:
    message: str


@dataclass(frozen=True)
class ClearError:
    pass


@dataclass(frozen=True)
class Logout:
    pass


Action = Union[SetUser, SetPosts, ReplacePost, RemovePost, SetBusy, SetError, ClearError, Logout]


def reduce(state: SessionState, action: Action) -> SessionState:
    if isinstance(action, SetUser):
        return replace(state, user=action.user)
    if isinstance(action, SetPosts):
        return replace(state, posts=tuple(action.posts))
    if isinstance(action, ReplacePost):
        # Whole-object replacement, never a field merge.
        return replace(
            state,
            posts=tuple(
                action.post if post.id == action.post.id else post for post in state.posts
            ),
        )
    if isinstance(action, RemovePost):
        return replace(
            state, posts=tuple(post for post in state.posts if post.id != action.post_id)
        )
    if isinstance(action, SetBusy):
        return replace(state, busy=action.busy)
    if isinstance(action, SetError):
        return replace(state, last_error=action.message)
    if isinstance(action, ClearError):
        return replace(state, last_error=None)
    if isinstance(action, Logout):
        return SessionState()
    raise TypeError(f"Unknown action: {action!r}")
