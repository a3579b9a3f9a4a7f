"""
Vault Key Rotation — Re-encryption of private keys on passphrase change.

Every field-encrypted private key is opened with the old passphrase and
sealed again with the new one. The rotation is all-or-nothing: a key that
does not open with the old passphrase aborts it before anything is saved.
The operation is idempotent for keys stored in cleartext, which are simply
encrypted under the new passphrase.

Security Note:
    Plaintext exists in memory only during re-encryption of each key.
    Never log plaintext or ciphertext values.
"""
import logging

from ..models import Vault

logger = logging.getLogger("navigator.wallet")


def reencrypt_vault(vault: Vault, old_passphrase: str, new_passphrase: str) -> dict:
    """Re-encrypt every private key in ``vault`` in place.

    Args:
        vault: Opened Vault whose private keys are encrypted under
            ``old_passphrase``.
        old_passphrase: Passphrase the keys are currently encrypted with.
        new_passphrase: Passphrase to encrypt them with.

    Returns:
        Stats dict with keys: total, keypairs, identities.

    Raises:
        DecryptionError: If a private key does not open with old_passphrase.
    """
    stats = {"total": 0, "keypairs": 0, "identities": 0}
    holders = (
        [("keypairs", k) for k in vault.keychain.keypairs]
        + [("identities", i) for i in vault.keychain.identities]
    )
    logger.info("Starting key rotation for %d private key(s)", len(holders))
    rotated = []
    for kind, holder in holders:
        # decrypt everything first, nothing is touched if one key fails
        holder_copy = holder.model_copy()
        holder_copy.decrypt(old_passphrase)
        rotated.append((kind, holder, holder_copy))

    for kind, holder, holder_copy in rotated:
        holder_copy.encrypt(new_passphrase)
        holder.private_key = holder_copy.private_key
        stats[kind] += 1
        stats["total"] += 1

    logger.info("Key rotation complete: %s", stats)
    return stats
