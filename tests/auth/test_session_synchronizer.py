"""Tests for SessionSynchronizer."""

import pytest

from wellcoach.features.auth.services.session_synchronizer import SessionSynchronizer


class TestSessionSynchronizer:
    
    @pytest.mark.asyncio
    async def test_anonymous_request(self, client_factory):
        result = await SessionSynchronizer(client_factory).refresh({"theme": "dark"})
        
        assert result.user is None
        assert not result.authenticated
        assert result.mutations == []
        assert result.cookies == {"theme": "dark"}
    
    @pytest.mark.asyncio
    async def test_refresh_returns_mutations_as_values(
        self, client_factory, fake_provider, token_factory, access_cookie, refresh_cookie
    ):
        user_id = fake_provider.add_user("client@example.com")
        refresh_token = fake_provider.issue(user_id).refresh_token
        incoming = {access_cookie: token_factory(user_id, expires_in=-60), refresh_cookie: refresh_token}
        
        result = await SessionSynchronizer(client_factory).refresh(incoming)
        
        assert result.authenticated
        assert [m.name for m in result.mutations] == [access_cookie, refresh_cookie]
        assert result.cookies[refresh_cookie] == result.mutations[1].value
        # Incoming cookies are never modified in place
        assert incoming[refresh_cookie] == refresh_token
    
    @pytest.mark.asyncio
    async def test_invalid_session_returns_clearing_mutations(
        self, client_factory, access_cookie, refresh_cookie
    ):
        result = await SessionSynchronizer(client_factory).refresh({
            access_cookie: "stale", refresh_cookie: "stale",
        })
        
        assert result.user is None
        assert {m.name for m in result.mutations} == {access_cookie, refresh_cookie}
        assert all(m.is_deletion for m in result.mutations)
        assert result.cookies == {}
    
    @pytest.mark.asyncio
    async def test_provider_unreachable_produces_no_mutations(
        self, client_factory, fake_provider, access_cookie, refresh_cookie
    ):
        user_id = fake_provider.add_user("client@example.com")
        tokens = fake_provider.issue(user_id)
        fake_provider.unreachable = True
        
        result = await SessionSynchronizer(client_factory).refresh({
            access_cookie: tokens.access_token, refresh_cookie: tokens.refresh_token,
        })
        
        assert result.user is None
        assert result.mutations == []
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("exp", ["soon", 10**20])
    async def test_hostile_expiry_claim_means_logged_out(
        self, client_factory, claims_token_factory, access_cookie, exp
    ):
        result = await SessionSynchronizer(client_factory).refresh({
            access_cookie: claims_token_factory(sub="x", exp=exp),
        })
        
        assert result.user is None
        assert result.mutations
        assert all(m.is_deletion for m in result.mutations)
