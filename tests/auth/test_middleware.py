"""Tests for SessionSyncMiddleware cookie propagation and route guarding."""

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from wellcoach.features.auth.middleware import SessionSyncMiddleware
from wellcoach.features.auth.services.route_guard import RouteGuard
from wellcoach.features.auth.services.session_synchronizer import SessionSynchronizer


def cookie_header(cookies):
    return {"Cookie": "; ".join(f"{name}={value}" for name, value in cookies.items())}


def set_cookies(response):
    """Map cookie name to its Set-Cookie header."""
    return {
        header.split("=", 1)[0]: header
        for header in response.headers.get_list("set-cookie")
    }


@pytest.fixture
def app(client_factory, settings):
    app = FastAPI()
    app.add_middleware(
        SessionSyncMiddleware,
        synchronizer=SessionSynchronizer(client_factory),
        route_guard=RouteGuard.from_settings(settings),
    )
    
    @app.get("/dashboard")
    async def dashboard(request: Request):
        return {"user": request.state.user.to_dict()}
    
    @app.get("/")
    async def home(request: Request):
        user = request.state.user
        return {"user": user.to_dict() if user else None}
    
    @app.get("/rotate")
    async def rotate(request: Request):
        response = JSONResponse({"ok": True})
        response.set_cookie(settings.access_token_cookie, "written-by-handler")
        return response
    
    @app.get("/health")
    async def health(request: Request):
        return {"has_user": hasattr(request.state, "user")}
    
    @app.get("/health/live")
    async def health_live(request: Request):
        return {"has_user": hasattr(request.state, "user")}
    
    @app.get("/healthz-admin")
    async def healthz_admin(request: Request):
        return {"has_user": hasattr(request.state, "user")}
    
    @app.get("/statistics")
    async def statistics(request: Request):
        return {"has_user": hasattr(request.state, "user")}
    
    return app


@pytest.fixture
def client(app):
    return TestClient(app, follow_redirects=False)


class TestRouteGuarding:
    
    def test_no_valid_session_redirects_with_cleared_cookies(
        self, client, token_factory, access_cookie, refresh_cookie
    ):
        response = client.get("/dashboard", headers=cookie_header({
            access_cookie: token_factory("u1", expires_in=-60),
            refresh_cookie: "revoked",
        }))
        
        assert response.status_code == 307
        assert response.headers["location"] == "/login?next=%2Fdashboard"
        cookies = set_cookies(response)
        assert set(cookies) == {access_cookie, refresh_cookie}
        assert all("Max-Age=0" in header for header in cookies.values())
    
    def test_no_cookies_redirects_without_mutations(self, client):
        response = client.get("/dashboard/week")
        
        assert response.status_code == 307
        assert response.headers["location"] == "/login?next=%2Fdashboard%2Fweek"
        assert set_cookies(response) == {}
    
    def test_valid_session_reaches_handler(self, client, fake_provider, access_cookie, refresh_cookie):
        user_id = fake_provider.add_user("coach@example.com")
        tokens = fake_provider.issue(user_id)
        
        response = client.get("/dashboard", headers=cookie_header({
            access_cookie: tokens.access_token, refresh_cookie: tokens.refresh_token,
        }))
        
        assert response.status_code == 200
        assert response.json() == {"user": {"id": user_id, "email": "coach@example.com"}}
        assert set_cookies(response) == {}
    
    def test_refreshed_session_reaches_protected_page_with_new_cookies(
        self, client, fake_provider, token_factory, access_cookie, refresh_cookie
    ):
        user_id = fake_provider.add_user("coach@example.com")
        old_refresh = fake_provider.issue(user_id).refresh_token
        
        response = client.get("/dashboard", headers=cookie_header({
            access_cookie: token_factory(user_id, expires_in=-60), refresh_cookie: old_refresh,
        }))
        
        assert response.status_code == 200
        cookies = set_cookies(response)
        assert set(cookies) == {access_cookie, refresh_cookie}
        assert old_refresh not in cookies[refresh_cookie]
        assert "HttpOnly" in cookies[access_cookie]
    
    def test_public_page_still_gets_clearing_mutations(self, client, access_cookie, refresh_cookie):
        response = client.get("/", headers=cookie_header({access_cookie: "x", refresh_cookie: "y"}))
        
        assert response.status_code == 200
        assert response.json() == {"user": None}
        assert set(set_cookies(response)) == {access_cookie, refresh_cookie}
    
    def test_hostile_expiry_claim_does_not_break_public_page(
        self, client, claims_token_factory, access_cookie
    ):
        response = client.get("/", headers=cookie_header({
            access_cookie: claims_token_factory(sub="x", exp="soon"),
        }))
        
        assert response.status_code == 200
        assert response.json() == {"user": None}
    
    @pytest.mark.parametrize("exp", ["soon", 10**20])
    def test_hostile_expiry_claim_redirects_from_protected_page(
        self, client, claims_token_factory, access_cookie, exp
    ):
        response = client.get("/dashboard", headers=cookie_header({
            access_cookie: claims_token_factory(sub="x", exp=exp),
        }))
        
        assert response.status_code == 307
        assert response.headers["location"] == "/login?next=%2Fdashboard"


class TestCookiePropagation:
    
    def test_handler_cookie_wins_over_refresh(
        self, client, fake_provider, token_factory, access_cookie, refresh_cookie
    ):
        user_id = fake_provider.add_user("coach@example.com")
        old_refresh = fake_provider.issue(user_id).refresh_token
        
        response = client.get("/rotate", headers=cookie_header({
            access_cookie: token_factory(user_id, expires_in=-60), refresh_cookie: old_refresh,
        }))
        
        cookies = set_cookies(response)
        assert cookies[access_cookie].startswith(f"{access_cookie}=written-by-handler")
        assert refresh_cookie in cookies
        assert len(response.headers.get_list("set-cookie")) == 2
    
    def test_exempt_paths_skip_session_sync(self, client, fake_provider, access_cookie):
        response = client.get("/health", headers=cookie_header({access_cookie: "x"}))
        
        assert response.json() == {"has_user": False}
        assert fake_provider.calls == []
    
    def test_exempt_path_covers_nested_segments(self, client, fake_provider):
        response = client.get("/health/live")
        
        assert response.json() == {"has_user": False}
        assert fake_provider.calls == []
    
    @pytest.mark.parametrize("path", ["/healthz-admin", "/statistics"])
    def test_exempt_prefix_does_not_cover_sibling_paths(
        self, client, fake_provider, access_cookie, refresh_cookie, path
    ):
        user_id = fake_provider.add_user("coach@example.com")
        tokens = fake_provider.issue(user_id)
        
        response = client.get(path, headers=cookie_header({
            access_cookie: tokens.access_token, refresh_cookie: tokens.refresh_token,
        }))
        
        assert response.json() == {"has_user": True}
        assert "userinfo" in fake_provider.calls
