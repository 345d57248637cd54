"""Tests for the controller side of pair-verify."""

import os

import nacl.signing
import pytest

from airpair.pairing import LongTermIdentity, ProtocolError
from airpair.pairing.keys import EphemeralKeyPair, verify_signature
from airpair.pairing.verify import (
    HapClient,
    build_verify_finish,
    build_verify_request,
    compute_shared,
    decrypt_signature,
    encrypt_signature,
    sign_transcript,
)
from .test_vectors import (
    CONTROLLER_SEED_HEX,
    KEYSTREAM_OFFSET_0_HEX,
    KEYSTREAM_OFFSET_64_HEX,
    ZERO_SECRET_HEX,
)


@pytest.fixture
def identity():
    return LongTermIdentity.from_seed(bytes.fromhex(CONTROLLER_SEED_HEX))


class TestVerifyRequest:

    def test_layout(self, identity) -> None:
        request, ephemeral = build_verify_request(identity)
        assert len(request) == 68
        assert request[:4] == b"\x01\x00\x00\x00"
        assert request[4:36] == ephemeral.public
        assert request[36:68] == identity.public

    def test_fresh_ephemeral_each_time(self, identity) -> None:
        _, first = build_verify_request(identity)
        _, second = build_verify_request(identity)
        assert first.public != second.public

    def test_finish_layout(self) -> None:
        enc = os.urandom(64)
        assert build_verify_finish(enc) == b"\x00\x00\x00\x00" + enc

    def test_compute_shared(self) -> None:
        a = EphemeralKeyPair.generate()
        b = EphemeralKeyPair.generate()
        assert compute_shared(a.private, b.public) == compute_shared(b.private, a.public)


class TestTranscriptSignature:

    def test_signature_over_ordered_keys(self, identity) -> None:
        ours = EphemeralKeyPair.generate().public
        theirs = EphemeralKeyPair.generate().public
        signature = sign_transcript(identity, ours, theirs)
        nacl.signing.VerifyKey(identity.public).verify(ours + theirs, signature)
        assert not verify_signature(identity.public, theirs + ours, signature)

    @pytest.mark.parametrize("which", [0, 1])
    def test_single_bit_flip_breaks_signature(self, identity, which) -> None:
        keys = [EphemeralKeyPair.generate().public, EphemeralKeyPair.generate().public]
        signature = sign_transcript(identity, keys[0], keys[1])
        flipped = bytearray(keys[which])
        flipped[5] ^= 0x01
        keys[which] = bytes(flipped)
        assert not verify_signature(identity.public, keys[0] + keys[1], signature)


class TestSignatureWrapping:

    def test_unprimed_keystream(self) -> None:
        enc = encrypt_signature(bytes.fromhex(ZERO_SECRET_HEX), b"", bytes(64))
        assert enc.hex() == KEYSTREAM_OFFSET_0_HEX

    def test_primed_keystream_starts_at_transcript_length(self) -> None:
        enc = encrypt_signature(bytes.fromhex(ZERO_SECRET_HEX), os.urandom(64), bytes(64))
        assert enc.hex() == KEYSTREAM_OFFSET_64_HEX

    @pytest.mark.parametrize("length", [0, 1, 15, 16, 17, 64, 100])
    def test_round_trip(self, length) -> None:
        secret = os.urandom(32)
        transcript = os.urandom(length)
        signature = os.urandom(64)
        enc = encrypt_signature(secret, transcript, signature)
        assert len(enc) == 64
        assert decrypt_signature(secret, transcript, enc) == signature

    def test_priming_mismatch_garbles_signature(self) -> None:
        secret = os.urandom(32)
        signature = os.urandom(64)
        enc = encrypt_signature(secret, bytes(64), signature)
        assert decrypt_signature(secret, bytes(32), enc) != signature


class TestHapClient:

    def test_finish_before_request(self, identity) -> None:
        client = HapClient(identity)
        with pytest.raises(ProtocolError):
            client.verify_finish(os.urandom(96))

    def test_short_response(self, identity) -> None:
        client = HapClient(identity)
        client.verify_request()
        with pytest.raises(ProtocolError):
            client.verify_finish(os.urandom(95))

    def test_finish_encrypts_after_accessory_signature(self, identity) -> None:
        client = HapClient(identity)
        request = client.verify_request()
        accessory = EphemeralKeyPair.generate()
        accessory_data = os.urandom(64)

        finish = client.verify_finish(accessory.public + accessory_data)

        shared = compute_shared(accessory.private, request[4:36])
        assert client.shared_key == shared
        assert finish[:4] == b"\x00\x00\x00\x00"
        signature = decrypt_signature(shared, accessory_data, finish[4:])
        assert verify_signature(identity.public, request[4:36] + accessory.public, signature)
