# tests/test_address_repo.py
"""Tests for the address repository."""

import pytest

from localip_pub.models.address import NEVER, AddressRecord


def _record(address_id: str = "home") -> AddressRecord:
    return AddressRecord(
        id=address_id,
        access_password_hash="a",
        master_password_hash="m",
        created_on=1_000,
    )


def test_insert_applies_defaults(repo) -> None:
    assert repo.insert(_record())
    record = repo.get("home")
    assert record.ip_address == ""
    assert record.last_update == NEVER
    assert record.expiry == NEVER
    assert record.lifetime_reference == 1_000


def test_insert_duplicate_returns_false(repo) -> None:
    assert repo.insert(_record())
    assert not repo.insert(_record())
    assert repo.get("home") is not None


def test_update_and_delete(repo) -> None:
    repo.insert(_record())
    assert repo.update("home", ip_address="203.0.113.5", last_update=2_000)
    record = repo.get("home")
    assert record.endpoint == "203.0.113.5"
    assert record.lifetime_reference == 2_000

    assert repo.delete("home")
    assert not repo.delete("home")
    assert not repo.update("home", ip_address="203.0.113.6")


def test_update_rejects_unknown_fields(repo) -> None:
    repo.insert(_record())
    with pytest.raises(ValueError):
        repo.update("home", created_on=5)


def test_delete_if_expired(repo) -> None:
    record = _record()
    record.expiry = 5_000
    repo.insert(record)
    repo.insert(_record("forever"))

    assert not repo.delete_if_expired("home", 5_000)
    assert not repo.delete_if_expired("forever", 10**15)
    assert repo.delete_if_expired("home", 5_001)
    assert repo.get("home") is None
    assert repo.get("forever") is not None
