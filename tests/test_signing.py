"""
Tests for secp256k1 signing helpers.
"""
import pytest

from navigator_wallet.signing import (
    CURVE_ORDER,
    generate_private_key,
    is_valid_private,
    public_key_of,
    sign,
    verify,
)


class TestPrivateKeys:

    def test_generated_key_is_valid(self):
        assert is_valid_private(generate_private_key())

    @pytest.mark.parametrize("candidate", [
        "",
        "not-a-key",
        "00" * 32,
        f"{CURVE_ORDER:064x}",
        "ab" * 31,
        "zz" * 32,
        None,
    ])
    def test_invalid_keys(self, candidate):
        assert is_valid_private(candidate) is False

    def test_public_key_is_compressed(self):
        public = public_key_of(generate_private_key())
        assert len(public) == 66
        assert public[:2] in ("02", "03")

    def test_public_key_of_invalid(self):
        with pytest.raises(ValueError):
            public_key_of("not-a-key")


class TestSignatures:

    def test_sign_and_verify(self):
        private = generate_private_key()
        public = public_key_of(private)
        signature = sign("dapp.io", private)
        assert verify("dapp.io", signature, public)
        assert verify(b"dapp.io", signature, public)

    def test_other_key_does_not_verify(self):
        signature = sign("dapp.io", generate_private_key())
        assert not verify("dapp.io", signature, public_key_of(generate_private_key()))

    def test_garbage_signature(self):
        public = public_key_of(generate_private_key())
        assert verify("dapp.io", "zz", public) is False
