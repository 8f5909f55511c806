"""
Unit tests for EIP-2612 permit signing.

Tests cover:
- Signature splitting and v normalization
- Domain and message construction
- Name fallback, unsupported signers and user rejection
"""

import logging

import pytest

from nadfun.exceptions import NetworkError, UnsupportedOperationError, UserCancelledError
from nadfun.token.permit import PERMIT_TYPES, PermitSigner, split_signature

from conftest import CONTRACTS, TEST_ADDRESS, FakeSigner, addr

TOKEN = addr(0xBEEF)
SPENDER = CONTRACTS["bonding_curve_router"]


class TestSplitSignature:
    def test_split_components(self):
        v, r, s = split_signature(b"\x01" * 32 + b"\x02" * 32 + b"\x1c")
        assert (v, r, s) == (28, b"\x01" * 32, b"\x02" * 32)

    def test_normalizes_low_v(self):
        assert split_signature(b"\x00" * 64 + b"\x00")[0] == 27
        assert split_signature(b"\x00" * 64 + b"\x01")[0] == 28

    def test_rejects_wrong_length(self):
        with pytest.raises(ValueError):
            split_signature(b"\x00" * 64)


class TestPermitSigner:
    @pytest.mark.asyncio
    async def test_generate_reads_nonce_and_signs(self, chain_config, fake_chain, fake_signer):
        fake_chain.set_call(TOKEN, "name", "Test Token")
        fake_chain.set_call(TOKEN, "nonces", 7)

        permit = await PermitSigner(chain_config, fake_chain, fake_signer).generate(
            TOKEN, SPENDER, 1000, 1_800_000_000
        )

        assert permit.nonce == 7
        assert permit.v == 27
        assert permit.r == b"\x11" * 32
        assert permit.s == b"\x22" * 32

        request = fake_signer.typed_data_requests[0]
        assert request["primary_type"] == "Permit"
        assert request["types"] == PERMIT_TYPES
        assert request["domain"] == {
            "name": "Test Token",
            "version": "1",
            "chainId": 10143,
            "verifyingContract": TOKEN,
        }
        assert request["message"] == {
            "owner": TEST_ADDRESS,
            "spender": SPENDER,
            "value": 1000,
            "nonce": 7,
            "deadline": 1_800_000_000,
        }

    @pytest.mark.asyncio
    async def test_name_failure_falls_back_with_warning(self, chain_config, fake_chain, fake_signer, caplog):
        fake_chain.set_call(TOKEN, "name", NetworkError("name() reverted"))

        with caplog.at_level(logging.WARNING):
            await PermitSigner(chain_config, fake_chain, fake_signer).sign(
                TEST_ADDRESS, SPENDER, 1, 0, 1, TOKEN
            )

        assert fake_signer.typed_data_requests[0]["domain"]["name"] == ""
        assert any("empty domain name" in r.message for r in caplog.records)

    @pytest.mark.asyncio
    async def test_signer_without_typed_data(self, chain_config, fake_chain):
        class TxOnlySigner:
            address = TEST_ADDRESS

            def sign_transaction(self, tx):
                return b""

        with pytest.raises(UnsupportedOperationError):
            await PermitSigner(chain_config, fake_chain, TxOnlySigner()).sign(
                TEST_ADDRESS, SPENDER, 1, 0, 1, TOKEN
            )

    @pytest.mark.asyncio
    async def test_not_implemented_maps_to_unsupported(self, chain_config, fake_chain):
        fake_chain.set_call(TOKEN, "name", "T")
        signer = FakeSigner(error=NotImplementedError())
        with pytest.raises(UnsupportedOperationError):
            await PermitSigner(chain_config, fake_chain, signer).sign(
                TEST_ADDRESS, SPENDER, 1, 0, 1, TOKEN
            )

    @pytest.mark.asyncio
    async def test_user_rejection(self, chain_config, fake_chain):
        fake_chain.set_call(TOKEN, "name", "T")
        signer = FakeSigner(error=RuntimeError("User rejected the request"))
        with pytest.raises(UserCancelledError):
            await PermitSigner(chain_config, fake_chain, signer).sign(
                TEST_ADDRESS, SPENDER, 1, 0, 1, TOKEN
            )

    @pytest.mark.asyncio
    async def test_other_signing_errors_propagate(self, chain_config, fake_chain):
        fake_chain.set_call(TOKEN, "name", "T")
        signer = FakeSigner(error=RuntimeError("hardware wallet locked"))
        with pytest.raises(RuntimeError):
            await PermitSigner(chain_config, fake_chain, signer).sign(
                TEST_ADDRESS, SPENDER, 1, 0, 1, TOKEN
            )
