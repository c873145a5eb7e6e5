"""
Inclusion Proof Unit Tests
Tests for core/merkle/proof.py
"""
import pytest

from core.crypto.hashing import sha256
from core.merkle.proof import InclusionProof
from core.schemas.errors import MalformedProofError


def siblings(n: int) -> list[bytes]:
    return [sha256(f"s{i}".encode()) for i in range(n)]


class TestConstruction:
    """Tests for building proofs."""

    def test_empty_proof(self):
        proof = InclusionProof()
        assert len(proof) == 0
        assert list(proof) == []

    def test_of_keeps_order(self):
        s = siblings(3)
        proof = InclusionProof.of(s)
        assert proof.siblings == tuple(s)
        assert proof[1] == s[1]

    def test_accepts_bytearray(self):
        s = siblings(1)[0]
        proof = InclusionProof.of([bytearray(s)])
        assert proof[0] == s
        assert isinstance(proof[0], bytes)

    def test_wrong_size_sibling_raises(self):
        with pytest.raises(MalformedProofError) as exc_info:
            InclusionProof.of([siblings(1)[0], b"\x00" * 31])
        assert exc_info.value.details["position"] == 1

    def test_non_bytes_sibling_raises(self):
        with pytest.raises(MalformedProofError):
            InclusionProof.of(["00" * 32])

    def test_is_immutable(self):
        proof = InclusionProof.of(siblings(2))
        with pytest.raises(AttributeError):
            proof.siblings = ()


class TestHexSerialization:
    """Tests for the persisted hex form."""

    def test_to_hex_lowercase_ordered(self):
        s = siblings(3)
        assert InclusionProof.of(s).to_hex() == [x.hex() for x in s]

    def test_from_hex_roundtrip_preserves_order(self):
        proof = InclusionProof.of(siblings(4))
        assert InclusionProof.from_hex(proof.to_hex()) == proof

    def test_from_hex_accepts_bytes32_form(self):
        s = siblings(1)[0]
        assert InclusionProof.from_hex(["0x" + s.hex().upper()])[0] == s

    def test_from_hex_malformed_entry(self):
        good = siblings(1)[0].hex()
        with pytest.raises(MalformedProofError) as exc_info:
            InclusionProof.from_hex([good, "xyz"])
        assert exc_info.value.details["position"] == 1
        assert exc_info.value.code == "MALFORMED_PROOF"

    def test_from_hex_rejects_single_string(self):
        with pytest.raises(MalformedProofError):
            InclusionProof.from_hex(siblings(1)[0].hex())
