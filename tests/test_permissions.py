"""
Tests for the permission index, the permission grantor and the history log.
"""
import pytest

from navigator_wallet.history import HistoryLog
from navigator_wallet.models import (
    HistoricEventType,
    Keychain,
    Network,
    Permission,
)
from navigator_wallet.permissions import (
    PermissionGrantor,
    find_permission,
    grant,
    permissions_by_key,
    resolve_identity,
)

PASSPHRASE = "correct-seed"


@pytest.fixture
def keychain(identity):
    return Keychain(identities=[identity])


@pytest.fixture
def permission(identity, network):
    return Permission(
        domain="dapp.io",
        network=network,
        public_key=identity.public_key,
        fields=["email"],
    )


@pytest.fixture
async def unlocked(cycle, session):
    session.unlock(PASSPHRASE)
    await cycle.bootstrap(PASSPHRASE)
    return cycle


class TestFindPermission:

    def test_exact_match(self, permission, network):
        assert find_permission("dapp.io", network, [permission]) is permission

    def test_no_match_is_none(self, permission, network):
        assert find_permission("evil.io", network, [permission]) is None
        assert find_permission("dapp.io", Network(host="x", port=1), [permission]) is None
        assert find_permission("dapp.io", network, []) is None


class TestPermissionsByKey:

    def test_keyed_by_public_key(self, permission, network):
        other = Permission(domain="dapp.io", network=network, public_key="OTHER")
        granted = permissions_by_key("dapp.io", network, [permission, other])
        assert set(granted) == {permission.public_key, "OTHER"}

    def test_newest_grant_wins(self, permission, network):
        newer = permission.model_copy(update={"fields": ["email", "phone"]})
        granted = permissions_by_key("dapp.io", network, [newer, permission])
        assert granted[permission.public_key] is newer

    def test_other_domain_ignored(self, permission, network):
        assert permissions_by_key("evil.io", network, [permission]) == {}


class TestResolveIdentity:

    def test_projects_granted_fields(self, permission, keychain):
        view = resolve_identity(permission, keychain)
        assert view.fields == {"email": "alice@example.com"}
        assert view.account == {"name": "alice", "authority": "active"}

    def test_identity_removed(self, permission):
        assert resolve_identity(permission, Keychain()) is None


class TestGrant:

    def test_grant_twice_leaves_one(self, permission, keychain):
        assert grant(permission, keychain) is True
        again = permission.model_copy(update={"timestamp": permission.timestamp + 1})
        assert grant(again, keychain) is False
        assert [p.checksum for p in keychain.permissions] == [permission.checksum]

    def test_different_fields_is_a_new_grant(self, permission, keychain):
        grant(permission, keychain)
        wider = permission.model_copy(update={"fields": ["email", "country"]})
        assert grant(wider, keychain) is True
        assert keychain.permissions[0] is wider

    async def test_grantor_persists_deduplicated(self, unlocked, permission):
        grantor = PermissionGrantor(unlocked)
        assert await grantor.add_permissions([permission, permission]) == 1
        assert await grantor.add_permissions([permission]) == 0
        vault = await unlocked.load()
        assert len(vault.keychain.permissions) == 1
        assert vault.keychain.permissions[0].checksum == permission.checksum


class TestHistoryLog:

    async def test_append_newest_first(self, unlocked):
        history = HistoryLog(unlocked)
        await history.append(HistoricEventType.ADDED_NETWORK, {"domain": "a.io"})
        await history.append(HistoricEventType.PROVIDED_IDENTITY, {"domain": "b.io"})

        vault = await unlocked.load()
        assert [h.type for h in vault.histories] == [
            HistoricEventType.PROVIDED_IDENTITY,
            HistoricEventType.ADDED_NETWORK,
        ]
        assert vault.histories[1].data == {"domain": "a.io"}

    async def test_existing_entries_untouched(self, unlocked):
        history = HistoryLog(unlocked)
        first = await history.append(HistoricEventType.ADDED_NETWORK)
        await history.append(HistoricEventType.SIGNED_TRANSACTION)
        vault = await unlocked.load()
        assert vault.histories[-1] == first
