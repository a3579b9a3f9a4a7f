"""Permission index: which domain may see which identity, on which network.

A missing permission is not an error, it means the caller has to ask the
user before anything is disclosed.
"""
import logging
from typing import Iterable, Optional

from .models import IdentityView, Keychain, Network, Permission
from .vault.updater import UpdateCycle

logger = logging.getLogger("navigator.wallet")


def find_permission(
    domain: str,
    network: Network,
    permissions: Iterable[Permission]
) -> Optional[Permission]:
    """Exact match on domain and network, no wildcards."""
    return next(
        (p for p in permissions if p.matches(domain, network)), None
    )


def permissions_by_key(
    domain: str,
    network: Network,
    permissions: Iterable[Permission]
) -> dict[str, Permission]:
    """Permissions of a domain on a network, keyed by public key.

    Permissions are kept newest first, so the newest grant for a key wins.
    """
    granted: dict[str, Permission] = {}
    for permission in permissions:
        if permission.matches(domain, network):
            granted.setdefault(permission.public_key, permission)
    return granted


def resolve_identity(
    permission: Permission,
    keychain: Keychain
) -> Optional[IdentityView]:
    """Project the identity a permission points to onto its granted fields."""
    identity = keychain.find_identity(permission.public_key)
    if identity is None:
        return None
    return identity.as_only_required_fields(permission.fields, permission.network)


def grant(permission: Permission, keychain: Keychain) -> bool:
    """Insert ``permission`` unless one with the same checksum exists."""
    if keychain.has_permission(permission.checksum):
        return False
    keychain.permissions.insert(0, permission)
    return True


class PermissionGrantor:
    """Writes new permissions to the stored vault, deduplicated."""

    def __init__(self, cycle: UpdateCycle):
        self._cycle = cycle

    async def add_permissions(self, permissions: Iterable[Permission]) -> int:
        """Grant each permission, return how many were new."""
        added = 0
        async with self._cycle.transaction() as vault:
            for permission in permissions:
                if grant(permission, vault.keychain):
                    added += 1
                    logger.info(
                        "Permission granted: domain=%s network=%s public_key=%s",
                        permission.domain,
                        permission.network.unique_key,
                        permission.public_key,
                    )
        return added
