"""Tests for the single-write-token registry."""

import pytest

from localip_pub.services.auth import TokenAuthenticator
from localip_pub.services.tokens import TokenMode, TokenPayload
from localip_pub.services.write_tokens import WriteTokenConflictError, WriteTokenRegistry


@pytest.fixture()
def registry(repo, codec, state) -> WriteTokenRegistry:
    return WriteTokenRegistry(state, TokenAuthenticator(repo, codec, state), codec)


def test_issue_registers_a_write_token(registry, make_address, codec, state) -> None:
    make_address("home")
    token = registry.issue("home")
    payload = codec.verify(token)
    assert payload is not None and payload.mode is TokenMode.WRITE
    assert state.write_tokens.get("home") == token
    assert registry.is_current("home", token)


def test_second_issue_conflicts(registry, make_address) -> None:
    make_address("home")
    registry.issue("home")
    with pytest.raises(WriteTokenConflictError):
        registry.issue("home")


def test_dead_registered_token_is_replaced(registry, make_address, state) -> None:
    make_address("home")
    state.write_tokens.put("home", "no-longer-valid")
    token = registry.issue("home")
    assert state.write_tokens.get("home") == token


def test_invalidate_then_issue_again(registry, make_address) -> None:
    make_address("home")
    token = registry.issue("home")
    assert registry.invalidate("home", token)
    assert not registry.invalidate("home", token)
    assert registry.issue("home") != ""


def test_invalidate_refuses_token_of_another_id(registry, make_address) -> None:
    make_address("home")
    make_address("work")
    token = registry.issue("work")
    assert not registry.invalidate("home", token)
    assert registry.is_current("work", token)


def test_invalidate_refuses_unregistered_token(registry, make_address, codec, clock) -> None:
    make_address("home")
    registry.issue("home")
    clock.advance(ms=5)
    other = codec.sign(TokenPayload("home", TokenMode.WRITE, clock()))
    assert not registry.invalidate("home", other)


def test_revoke_for_id(registry, make_address) -> None:
    make_address("home")
    token = registry.issue("home")
    registry.revoke_for_id("home")
    assert not registry.is_current("home", token)
