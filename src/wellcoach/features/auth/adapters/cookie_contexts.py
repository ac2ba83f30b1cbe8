"""Cookie contexts for the three identity client variants.

Each context exposes the same get/set/delete surface; they differ only in
where writes go:

- ``BrowserCookieContext`` keeps an in-memory jar, writes land immediately.
- ``ServerCookieContext`` writes straight onto a known response.
- ``MiddlewareCookieContext`` records writes as ``CookieMutation`` values for
  whoever builds the final response.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from starlette.responses import Response

from ..entities.cookies import CookieMutation, CookieMutationLog

logger = logging.getLogger(__name__)


def _set_cookie_name(raw_value: bytes) -> str:
    return raw_value.decode("latin-1").split("=", 1)[0].strip()


def _existing_cookie_names(response: Response) -> set:
    return {
        _set_cookie_name(value)
        for key, value in response.raw_headers
        if key.lower() == b"set-cookie"
    }


def _remove_set_cookie(response: Response, name: str) -> None:
    response.raw_headers[:] = [
        (key, value)
        for key, value in response.raw_headers
        if not (key.lower() == b"set-cookie" and _set_cookie_name(value) == name)
    ]


def apply_cookie_mutations(
    response: Response,
    mutations: Iterable[CookieMutation],
    *,
    keep_existing: bool = False,
) -> List[str]:
    """Apply cookie mutations onto a response as Set-Cookie headers.
    
    Mutations are applied in production order with one header per cookie
    name (the last write wins). A Set-Cookie already on the response for the
    same name is replaced, unless ``keep_existing`` is set because the
    response's own cookies were written after ``mutations`` were produced.
    
    Returns:
        Names of the cookies written to the response
    """
    collapsed = CookieMutationLog(list(mutations)).collapse()
    existing = _existing_cookie_names(response)
    applied = []
    
    for mutation in collapsed:
        if mutation.name in existing:
            if keep_existing:
                logger.debug(f"Response already sets cookie {mutation.name}, keeping it")
                continue
            _remove_set_cookie(response, mutation.name)
        response.set_cookie(mutation.name, mutation.value, **mutation.attributes)
        applied.append(mutation.name)
    
    return applied


def _deletion(name: str, attributes: Dict[str, Any]) -> CookieMutation:
    attributes = dict(attributes)
    attributes["max_age"] = 0
    return CookieMutation(name=name, value="", attributes=attributes)


class BrowserCookieContext:
    """Client-side cookie jar."""
    
    def __init__(self, cookies: Optional[Mapping[str, str]] = None):
        self._jar: Dict[str, str] = dict(cookies or {})
    
    def get(self, name: str) -> Optional[str]:
        return self._jar.get(name)
    
    def get_all(self) -> Dict[str, str]:
        return dict(self._jar)
    
    def set(self, name: str, value: str, **attributes: Any) -> None:
        if attributes.get("max_age") == 0:
            self._jar.pop(name, None)
        else:
            self._jar[name] = value
    
    def delete(self, name: str, **attributes: Any) -> None:
        self._jar.pop(name, None)


class ServerCookieContext:
    """Cookie context for route handlers that already hold their response."""
    
    def __init__(self, request_cookies: Mapping[str, str], response: Response):
        self._cookies: Dict[str, str] = dict(request_cookies)
        self._response = response
    
    @property
    def response(self) -> Response:
        return self._response
    
    def get(self, name: str) -> Optional[str]:
        return self._cookies.get(name)
    
    def get_all(self) -> Dict[str, str]:
        return dict(self._cookies)
    
    def set(self, name: str, value: str, **attributes: Any) -> None:
        self._cookies[name] = value
        apply_cookie_mutations(
            self._response, [CookieMutation(name=name, value=value, attributes=dict(attributes))]
        )
    
    def delete(self, name: str, **attributes: Any) -> None:
        self._cookies.pop(name, None)
        apply_cookie_mutations(self._response, [_deletion(name, attributes)])


class MiddlewareCookieContext:
    """Cookie context that defers every write.
    
    Reads reflect earlier writes so a refresh followed by a lookup sees the
    renewed token, but nothing touches a response until the recorded
    mutations are applied with ``apply_cookie_mutations``.
    """
    
    def __init__(self, request_cookies: Mapping[str, str]):
        self._cookies: Dict[str, str] = dict(request_cookies)
        self.pending = CookieMutationLog()
    
    def get(self, name: str) -> Optional[str]:
        return self._cookies.get(name)
    
    def get_all(self) -> Dict[str, str]:
        return dict(self._cookies)
    
    def set(self, name: str, value: str, **attributes: Any) -> None:
        if attributes.get("max_age") == 0:
            self._cookies.pop(name, None)
        else:
            self._cookies[name] = value
        self.pending.record(CookieMutation(name=name, value=value, attributes=dict(attributes)))
    
    def delete(self, name: str, **attributes: Any) -> None:
        self._cookies.pop(name, None)
        self.pending.record(_deletion(name, attributes))
    
    def mutations(self) -> List[CookieMutation]:
        """Mutations in the order they were produced."""
        return list(self.pending)
