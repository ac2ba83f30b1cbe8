"""Tests for cookie mutations and the three cookie contexts."""

from starlette.responses import Response

from wellcoach.features.auth.adapters.cookie_contexts import (
    BrowserCookieContext,
    MiddlewareCookieContext,
    ServerCookieContext,
    apply_cookie_mutations,
)
from wellcoach.features.auth.entities.cookies import (
    CookieMutation,
    CookieMutationLog,
    SessionCookiePolicy,
)


def set_cookie_headers(response: Response):
    return response.headers.getlist("set-cookie")


def header_for(response: Response, name: str) -> str:
    matching = [h for h in set_cookie_headers(response) if h.startswith(f"{name}=")]
    assert len(matching) == 1, matching
    return matching[0]


class TestCookieMutationLog:
    """Ordering and last-write-wins collapsing."""
    
    def test_collapse_keeps_last_write_per_name(self):
        log = CookieMutationLog()
        log.record(CookieMutation("a", "1"))
        log.record(CookieMutation("b", "1"))
        log.record(CookieMutation("a", "2"))
        
        collapsed = log.collapse()
        
        assert [(m.name, m.value) for m in collapsed] == [("b", "1"), ("a", "2")]
        assert len(log) == 3
    
    def test_empty_log_is_falsy(self):
        assert not CookieMutationLog()
        assert CookieMutationLog([CookieMutation("a", "1")])
    
    def test_repr_hides_token_value(self):
        mutation = CookieMutation("wc-access-token", "eyJsecret")
        assert "eyJsecret" not in repr(mutation)
    
    def test_deletion_is_max_age_zero(self):
        policy = SessionCookiePolicy()
        assert CookieMutation("a", "", policy.clearing_attributes()).is_deletion
        assert not CookieMutation("a", "x", policy.attributes(max_age=60)).is_deletion


class TestSessionCookiePolicy:
    
    def test_attributes_are_httponly_lax_root_path(self):
        attributes = SessionCookiePolicy(secure=False).attributes(max_age=300)
        assert attributes == {
            "path": "/",
            "httponly": True,
            "secure": False,
            "samesite": "lax",
            "max_age": 300,
        }
    
    def test_from_settings_uses_cookie_prefix(self, settings):
        policy = SessionCookiePolicy.from_settings(settings)
        assert policy.access_token_cookie == "wc-access-token"
        assert policy.refresh_token_cookie == "wc-refresh-token"
        assert policy.secure is False


class TestApplyCookieMutations:
    
    def test_one_header_per_cookie_name(self):
        response = Response()
        applied = apply_cookie_mutations(response, [
            CookieMutation("token", "old", {"path": "/"}),
            CookieMutation("token", "new", {"path": "/"}),
        ])
        
        assert applied == ["token"]
        assert header_for(response, "token").startswith("token=new")
    
    def test_replaces_cookie_already_on_response(self):
        response = Response()
        response.set_cookie("token", "stale")
        
        apply_cookie_mutations(response, [CookieMutation("token", "fresh", {"path": "/"})])
        
        assert header_for(response, "token").startswith("token=fresh")
    
    def test_keep_existing_leaves_later_writes_alone(self):
        response = Response()
        response.set_cookie("token", "from-handler")
        
        applied = apply_cookie_mutations(
            response,
            [CookieMutation("token", "from-refresh"), CookieMutation("other", "x")],
            keep_existing=True,
        )
        
        assert applied == ["other"]
        assert header_for(response, "token").startswith("token=from-handler")
        assert header_for(response, "other").startswith("other=x")
    
    def test_deletion_sets_max_age_zero(self):
        response = Response()
        apply_cookie_mutations(response, [CookieMutation("token", "", {"max_age": 0, "path": "/"})])
        assert "Max-Age=0" in header_for(response, "token")


class TestMiddlewareCookieContext:
    """Writes are captured, never applied."""
    
    def test_reads_reflect_captured_writes(self):
        context = MiddlewareCookieContext({"a": "1", "b": "2"})
        
        context.set("a", "updated", path="/")
        context.delete("b", path="/")
        
        assert context.get("a") == "updated"
        assert context.get("b") is None
        assert context.get_all() == {"a": "updated"}
    
    def test_mutations_in_production_order(self):
        context = MiddlewareCookieContext({})
        context.set("a", "1")
        context.set("b", "2")
        context.delete("a")
        
        mutations = context.mutations()
        
        assert [m.name for m in mutations] == ["a", "b", "a"]
        assert mutations[-1].is_deletion
    
    def test_does_not_mutate_incoming_mapping(self):
        incoming = {"a": "1"}
        MiddlewareCookieContext(incoming).set("a", "2")
        assert incoming == {"a": "1"}


class TestServerCookieContext:
    
    def test_writes_go_straight_to_response(self):
        response = Response()
        context = ServerCookieContext({"a": "1"}, response)
        
        context.set("a", "2", path="/", httponly=True)
        
        assert context.get("a") == "2"
        assert header_for(response, "a").startswith("a=2")
    
    def test_delete_replaces_earlier_write(self):
        response = Response()
        context = ServerCookieContext({}, response)
        context.set("a", "2", path="/")
        
        context.delete("a", path="/")
        
        assert context.get("a") is None
        assert "Max-Age=0" in header_for(response, "a")


class TestBrowserCookieContext:
    
    def test_jar_updates_immediately(self):
        context = BrowserCookieContext({"a": "1"})
        
        context.set("b", "2")
        context.set("a", "", max_age=0)
        
        assert context.get_all() == {"b": "2"}
