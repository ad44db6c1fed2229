"""
Client session: keeps the local view of the user and posts in step with the API.

Every trigger that talks to the server follows one protocol: clear the error,
mark the session busy, make exactly one API call, then either apply the
smallest state change the response implies or record the failure message and
re-raise. Busy is cleared whichever way the call ends. Becoming authenticated
through login or signup schedules one refresh of all posts; ``start`` does the
same for a restored session.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from pydantic import ValidationError

from ..schemas import AuthResponse, PostOut, UserOut
from .api import ApiClient, ApiError
from .state import (
    Action,
    ClearError,
    Logout,
    RemovePost,
    ReplacePost,
    SessionState,
    SetBusy,
    SetError,
    SetPosts,
    SetUser,
    reduce,
)
from .storage import TOKEN_KEY, USER_KEY, CredentialStore

logger = logging.getLogger(__name__)

Listener = Callable[[SessionState], None]


class PostsSession:
    def __init__(self, api: ApiClient, store: CredentialStore):
        self._api = api
        self._store = store
        self._state = SessionState()
        self._listeners: List[Listener] = []
        # Bumped on logout; responses from an older generation are discarded.
        self._generation = 0
        self._lock = asyncio.Lock()
        self._refresh_pending = False

    @property
    def state(self) -> SessionState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new state after every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _dispatch(self, action: Action) -> None:
        previous = self._state
        self._state = reduce(previous, action)
        if not previous.is_authenticated and self._state.is_authenticated:
            self._refresh_pending = True
        for listener in list(self._listeners):
            listener(self._state)

    async def _run_effects(self) -> None:
        if not self._refresh_pending:
            return
        self._refresh_pending = False
        await self._refresh_quietly()

    async def _refresh_quietly(self) -> None:
        # Follow-up refreshes report failures through last_error only.
        try:
            await self.refresh_all()
        except ApiError as exc:
            logger.warning("Automatic post refresh failed: %s", exc.message)

    async def _call(
        self,
        generation: int,
        call: Callable[[], Awaitable[Any]],
        apply: Callable[[Any], None],
    ) -> Any:
        self._dispatch(ClearError())
        self._dispatch(SetBusy(True))
        try:
            try:
                result = await call()
            except ApiError as exc:
                if generation == self._generation:
                    self._dispatch(SetError(exc.message))
                raise

            if generation != self._generation:
                logger.info("Discarding a response that completed after logout")
                return result

            apply(result)
            return result
        finally:
            if generation == self._generation and self._state.busy:
                self._dispatch(SetBusy(False))

    async def _trigger(
        self,
        call: Callable[[], Awaitable[Any]],
        apply: Callable[[Any], None],
    ) -> Any:
        generation = self._generation
        async with self._lock:
            if generation != self._generation:
                logger.info("Dropping a request queued before logout")
                return None
            return await self._call(generation, call, apply)

    # Startup / teardown

    def restore(self) -> bool:
        """
        Restore the session from stored credentials.

        Both the token and a parseable user record must be present; anything
        less is treated as logged out and whatever was stored is purged.
        """
        token = self._store.get_item(TOKEN_KEY)
        user_json = self._store.get_item(USER_KEY)
        user: Optional[UserOut] = None
        if token and user_json:
            try:
                user = UserOut.model_validate_json(user_json)
            except ValidationError:
                logger.warning("Stored user record is invalid")

        if user is None:
            if token or user_json:
                logger.info("Purging incomplete stored credentials")
            self._store.clear_credentials()
            return False

        self._dispatch(SetUser(user))
        # Restoring loads no posts by itself; start() owns the follow-up refresh.
        self._refresh_pending = False
        return True

    async def start(self) -> bool:
        restored = self.restore()
        if restored:
            await self._refresh_quietly()
        return restored

    def logout(self) -> None:
        self._generation += 1
        self._refresh_pending = False
        self._store.clear_credentials()
        self._dispatch(Logout())

    # Auth triggers

    def _authenticated(self, response: AuthResponse) -> None:
        self._store.save_credentials(
            response.access_token, response.user.model_dump_json(by_alias=True)
        )
        self._dispatch(SetUser(response.user))

    async def login(self, email: str, password: str) -> Optional[AuthResponse]:
        response = await self._trigger(
            lambda: self._api.login(email, password), self._authenticated
        )
        await self._run_effects()
        return response

    async def signup(
        self, email: str, password: str, first_name: str, last_name: str
    ) -> Optional[AuthResponse]:
        response = await self._trigger(
            lambda: self._api.signup(email, password, first_name, last_name),
            self._authenticated,
        )
        await self._run_effects()
        return response

    # Post triggers

    def _set_posts(self, posts: Iterable[PostOut]) -> None:
        self._dispatch(SetPosts(tuple(posts)))

    async def refresh_all(self) -> Optional[List[PostOut]]:
        return await self._trigger(self._api.get_all_posts, self._set_posts)

    async def refresh_mine(self) -> Optional[List[PostOut]]:
        return await self._trigger(self._api.get_my_posts, self._set_posts)

    async def create_post(
        self, title: str, content: str, published: bool = True
    ) -> Optional[PostOut]:
        generation = self._generation
        post = await self._trigger(
            lambda: self._api.create_post(title, content, published), lambda _: None
        )
        # The list carries computed fields, so reload it rather than merging.
        if post is not None and generation == self._generation:
            await self._refresh_quietly()
        return post

    async def update_post(
        self,
        post_id: int,
        title: Optional[str] = None,
        content: Optional[str] = None,
        published: Optional[bool] = None,
    ) -> Optional[PostOut]:
        return await self._trigger(
            lambda: self._api.update_post(post_id, title, content, published),
            lambda post: self._dispatch(ReplacePost(post)),
        )

    async def delete_post(self, post_id: int) -> None:
        await self._trigger(
            lambda: self._api.delete_post(post_id),
            lambda _: self._dispatch(RemovePost(post_id)),
        )

    # Utilities

    def clear_errors(self) -> None:
        self._dispatch(ClearError())

    def set_initial_posts(self, posts: Iterable[PostOut]) -> None:
        self._set_posts(posts)
