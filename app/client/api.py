from typing import Any, Dict, List, Optional, Sequence

import httpx

from app.client.identity import LocalIdentity
from app.logger import get_logger

logger = get_logger("client.api")


class ApiError(Exception):
    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return f"Request failed: {response.reason_phrase}"
    if isinstance(data, dict) and data.get("detail"):
        return str(data["detail"])
    return f"Request failed: {response.reason_phrase}"


def _drop_none(params: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in params.items() if value is not None}


class SakeReviewClient:
    """Thin wrapper over the HTTP API.

    ``http`` is any ``httpx.Client`` whose base URL points at the service,
    including FastAPI's ``TestClient``.
    """

    def __init__(self, http: httpx.Client, identity: Optional[LocalIdentity] = None):
        self.http = http
        self.identity = identity

    def _headers(self) -> Dict[str, str]:
        if self.identity:
            return {"X-User-Id": self.identity.user_id}
        return {}

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self.http.request(method, path, headers=self._headers(), **kwargs)
        if response.status_code >= 400:
            message = _error_message(response)
            logger.debug(f"{method} {path} failed with {response.status_code}: {message}")
            raise ApiError(response.status_code, message)
        return response.json()

    # Users

    def register(self, name: str) -> LocalIdentity:
        user = self._request("POST", "/api/users", json={"name": name})
        self.identity = LocalIdentity(user_id=user["id"], user_name=user["name"])
        return self.identity

    def get_users(self) -> List[dict]:
        return self._request("GET", "/api/users")

    # Breweries

    def get_breweries(self) -> List[dict]:
        return self._request("GET", "/api/breweries")

    def get_brewery(self, brewery_id: int) -> dict:
        return self._request("GET", f"/api/breweries/{brewery_id}")

    def get_brewery_notes(self, brewery_id: int) -> List[dict]:
        return self._request("GET", f"/api/breweries/{brewery_id}/notes")

    def create_brewery_note(self, brewery_id: int, content: str) -> dict:
        return self._request("POST", f"/api/breweries/{brewery_id}/notes", json={"content": content})

    def update_brewery_note(self, brewery_id: int, note_id: int, content: str) -> dict:
        return self._request("PUT", f"/api/breweries/{brewery_id}/notes/{note_id}", json={"content": content})

    def delete_brewery_note(self, brewery_id: int, note_id: int) -> None:
        self._request("DELETE", f"/api/breweries/{brewery_id}/notes/{note_id}")

    def add_custom_sake(self, brewery_id: int, **fields) -> dict:
        return self._request("POST", f"/api/breweries/{brewery_id}/sakes", json=fields)

    # Sakes and reviews

    def search_sakes(
        self,
        q: Optional[str] = None,
        category: Optional[str] = None,
        is_limited: bool = False,
        has_paid_tasting: bool = False,
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> dict:
        params = _drop_none(
            {
                "q": q or None,
                "category": category,
                "isLimited": "true" if is_limited else None,
                "hasPaidTasting": "true" if has_paid_tasting else None,
                "cursor": cursor,
                "limit": limit,
            }
        )
        return self._request("GET", "/api/sakes", params=params)

    def get_sake(self, sake_id: int) -> dict:
        return self._request("GET", f"/api/sakes/{sake_id}")

    def update_sake(self, sake_id: int, **fields) -> dict:
        return self._request("PUT", f"/api/sakes/{sake_id}", json=fields)

    def create_review(
        self, sake_id: int, rating: int, tags: Sequence[str] = (), comment: Optional[str] = None
    ) -> dict:
        body = _drop_none({"rating": rating, "tags": list(tags), "comment": comment})
        return self._request("POST", f"/api/sakes/{sake_id}/reviews", json=body)

    def update_review(
        self, sake_id: int, review_id: int, rating: int, tags: Sequence[str] = (), comment: Optional[str] = None
    ) -> dict:
        body = _drop_none({"rating": rating, "tags": list(tags), "comment": comment})
        return self._request("PUT", f"/api/sakes/{sake_id}/reviews/{review_id}", json=body)

    def delete_review(self, sake_id: int, review_id: int) -> None:
        self._request("DELETE", f"/api/sakes/{sake_id}/reviews/{review_id}")

    def get_reviews(
        self,
        sort: Optional[str] = None,
        tags: Sequence[str] = (),
        user_id: Optional[str] = None,
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> dict:
        params = _drop_none(
            {
                "sort": sort,
                "tags": ",".join(tags) if tags else None,
                "userId": user_id,
                "cursor": cursor,
                "limit": limit,
            }
        )
        return self._request("GET", "/api/reviews", params=params)

    def get_review(self, review_id: int) -> dict:
        return self._request("GET", f"/api/reviews/{review_id}")

    # Timeline

    def get_timeline(self, cursor: Optional[str] = None, limit: Optional[int] = None) -> dict:
        return self._request("GET", "/api/timeline", params=_drop_none({"cursor": cursor, "limit": limit}))

    # Bookmarks

    def get_bookmarks(self) -> List[dict]:
        return self._request("GET", "/api/bookmarks")

    def add_bookmark(self, sake_id: int) -> dict:
        return self._request("POST", "/api/bookmarks", json={"sakeId": sake_id})

    def remove_bookmark(self, sake_id: int) -> None:
        self._request("DELETE", f"/api/bookmarks/{sake_id}")
