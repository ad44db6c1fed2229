"""HTTP client for the posts API."""

import logging
from typing import Any, Callable, List, Optional

import httpx
from pydantic import TypeAdapter

from ..config import settings
from ..schemas import AuthResponse, PostOut

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]

_post_list = TypeAdapter(List[PostOut])


class ApiError(Exception):
    """Any failed API call: a non-2xx response, an unusable body, or the server being unreachable."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _error_message(response: httpx.Response) -> str:
    fallback = f"HTTP error! status: {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return fallback


class ApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self._token_provider = token_provider or (lambda: None)
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_url,
            transport=transport,
            timeout=timeout if timeout is not None else settings.client_timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _headers(self, require_auth: bool) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if require_auth:
            token = self._token_provider()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
        require_auth: bool = True,
        parse: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        """
        Send one request and return ``parse`` applied to the decoded JSON body.

        Without ``parse`` the body is ignored (DELETE answers with an empty one).
        A body that is not JSON, or that ``parse`` rejects, raises ``ApiError``
        with the response's status code.
        """
        try:
            response = await self._client.request(
                method, path, json=json, headers=self._headers(require_auth)
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(0, "Unable to reach the server") from exc

        if response.is_error:
            raise ApiError(response.status_code, _error_message(response))

        if parse is None:
            return None
        try:
            # pydantic's ValidationError is a ValueError, as is a JSON decode error.
            return parse(response.json())
        except ValueError as exc:
            logger.warning(
                "%s %s returned an unusable %s body: %s",
                method,
                path,
                response.headers.get("content-type", "untyped"),
                exc,
            )
            raise ApiError(response.status_code, "Invalid response from server") from exc

    # Auth endpoints

    async def signup(
        self, email: str, password: str, first_name: str, last_name: str
    ) -> AuthResponse:
        return await self._request(
            "POST",
            "/auth/signup",
            json={
                "email": email,
                "password": password,
                "firstName": first_name,
                "lastName": last_name,
            },
            require_auth=False,
            parse=AuthResponse.model_validate,
        )

    async def login(self, email: str, password: str) -> AuthResponse:
        return await self._request(
            "POST",
            "/auth/login",
            json={"email": email, "password": password},
            require_auth=False,
            parse=AuthResponse.model_validate,
        )

    # Posts endpoints

    async def get_all_posts(self) -> List[PostOut]:
        return await self._request("GET", "/posts", parse=_post_list.validate_python)

    async def get_my_posts(self) -> List[PostOut]:
        return await self._request("GET", "/posts/my-posts", parse=_post_list.validate_python)

    async def get_post(self, post_id: int) -> PostOut:
        return await self._request("GET", f"/posts/{post_id}", parse=PostOut.model_validate)

    async def create_post(self, title: str, content: str, published: bool = True) -> PostOut:
        return await self._request(
            "POST",
            "/posts",
            json={"title": title, "content": content, "published": published},
            parse=PostOut.model_validate,
        )

    async def update_post(
        self,
        post_id: int,
        title: Optional[str] = None,
        content: Optional[str] = None,
        published: Optional[bool] = None,
    ) -> PostOut:
        changes: dict[str, Any] = {}
        if title is not None:
            changes["title"] = title
        if content is not None:
            changes["content"] = content
        if published is not None:
            changes["published"] = published
        return await self._request(
            "PATCH", f"/posts/{post_id}", json=changes, parse=PostOut.model_validate
        )

    async def delete_post(self, post_id: int) -> None:
        await self._request("DELETE", f"/posts/{post_id}")
