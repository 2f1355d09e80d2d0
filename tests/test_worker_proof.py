import base64
import json

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from tetcore.worker_proof import (
    ProofError,
    WorkerProof,
    hardware_id_sha256_hex,
    poc_infer,
    poe_execution_stub_b64,
    result_sha256_hex,
    task_sha256_hex,
    verify_ed25519,
    verify_poe_stub,
    verify_worker_proof,
    verify_worker_proof_full,
    worker_sign_message,
)

HARDWARE_ID = "f" * 64
MODEL = "poc-model"
INPUT = "hello quantum mesh"


def _pubkey_hex(sk):
    return sk.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw).hex()


def _make_proof(sk, model=MODEL, input_text=INPUT, hardware_id=HARDWARE_ID):
    output = poc_infer(input_text)
    task = task_sha256_hex(model, input_text)
    result = result_sha256_hex(output)
    sig = sk.sign(worker_sign_message(task, result, hardware_id))
    return WorkerProof(
        hardware_id_hex=hardware_id,
        task_sha256_hex=task,
        result_sha256_hex=result,
        output_text=output,
        ed25519_sig_b64=base64.b64encode(sig).decode(),
        poe_stub_b64=poe_execution_stub_b64(task, result),
    )


def test_hardware_id_is_stable_and_not_uuid_like():
    id1 = hardware_id_sha256_hex()
    id2 = hardware_id_sha256_hex()
    assert id1 == id2
    assert len(id1) == 64
    assert all(c in "0123456789abcdef" for c in id1)
    assert "-" not in id1


def test_poc_infer_is_deterministic_and_reports_byte_length():
    out = poc_infer("hello")
    assert out == poc_infer("hello")
    assert out.startswith("PoC:TET stub inference → ")
    assert out.endswith("… (5 bytes)")
    assert poc_infer("é").endswith("(2 bytes)")
    assert poc_infer("a") != poc_infer("b")


def test_task_hash_separates_model_and_input():
    assert task_sha256_hex("ab", "c") != task_sha256_hex("a", "bc")
    assert len(task_sha256_hex(MODEL, INPUT)) == 64


def test_result_hash_differs_from_task_hash_domain():
    assert result_sha256_hex("x") != task_sha256_hex("", "x")
    assert result_sha256_hex("x") == result_sha256_hex("x")


def test_worker_sign_message_joins_with_pipes():
    assert worker_sign_message("t", "r", "h") == b"t|r|h"


def test_poe_stub_payload_and_roundtrip():
    task = task_sha256_hex(MODEL, INPUT)
    result = result_sha256_hex("out")
    stub = poe_execution_stub_b64(task, result)
    payload = json.loads(base64.b64decode(stub))
    assert payload["scheme"] == "tet-zkp-poe-stub-v1"
    assert len(payload["commitment_sha256_hex"]) == 64
    verify_poe_stub(stub, task, result)


def test_poe_stub_rejects_mismatch():
    stub = poe_execution_stub_b64("a", "b")
    with pytest.raises(ProofError, match="commitment mismatch"):
        verify_poe_stub(stub, "a", "c")


def test_poe_stub_rejects_bad_base64():
    with pytest.raises(ProofError, match="invalid base64"):
        verify_poe_stub("!!!not-base64", "a", "b")


def test_poe_stub_rejects_bad_json():
    stub = base64.b64encode(b"{not json").decode()
    with pytest.raises(ProofError, match="poe: json"):
        verify_poe_stub(stub, "a", "b")


def test_poe_stub_rejects_missing_commitment():
    stub = base64.b64encode(b'{"scheme":"x"}').decode()
    with pytest.raises(ProofError, match="missing commitment"):
        verify_poe_stub(stub, "a", "b")


def test_verify_ed25519_roundtrip_and_rejection():
    sk = Ed25519PrivateKey.generate()
    msg = b"message"
    sig_b64 = base64.b64encode(sk.sign(msg)).decode()
    verify_ed25519(_pubkey_hex(sk), sig_b64, msg)
    with pytest.raises(ProofError, match="invalid ed25519 signature"):
        verify_ed25519(_pubkey_hex(sk), sig_b64, b"other")


def test_verify_ed25519_rejects_bad_key_and_sig_lengths():
    sk = Ed25519PrivateKey.generate()
    sig_b64 = base64.b64encode(sk.sign(b"m")).decode()
    with pytest.raises(ProofError):
        verify_ed25519("abcd", sig_b64, b"m")
    with pytest.raises(ProofError):
        verify_ed25519("zz" * 32, sig_b64, b"m")
    with pytest.raises(ProofError):
        verify_ed25519(_pubkey_hex(sk), base64.b64encode(b"short").decode(), b"m")


def test_full_proof_verifies():
    sk = Ed25519PrivateKey.generate()
    proof = _make_proof(sk)
    verify_worker_proof(_pubkey_hex(sk), proof)
    verify_worker_proof_full(_pubkey_hex(sk), MODEL, INPUT, proof)
    assert WorkerProof.from_dict(proof.to_dict()) == proof


def test_full_proof_rejects_task_mismatch():
    sk = Ed25519PrivateKey.generate()
    proof = _make_proof(sk)
    with pytest.raises(ProofError, match="task hash mismatch"):
        verify_worker_proof_full(_pubkey_hex(sk), "other-model", INPUT, proof)


def test_proof_rejects_tampered_output():
    sk = Ed25519PrivateKey.generate()
    proof = _make_proof(sk)
    tampered = WorkerProof.from_dict({**proof.to_dict(), "output_text": "forged"})
    with pytest.raises(ProofError, match="result hash mismatch"):
        verify_worker_proof(_pubkey_hex(sk), tampered)


def test_proof_rejects_wrong_signer():
    sk = Ed25519PrivateKey.generate()
    other = Ed25519PrivateKey.generate()
    proof = _make_proof(sk)
    with pytest.raises(ProofError, match="invalid ed25519 signature"):
        verify_worker_proof(_pubkey_hex(other), proof)


def test_proof_rejects_bad_poe():
    sk = Ed25519PrivateKey.generate()
    proof = _make_proof(sk)
    bad = WorkerProof.from_dict(
        {**proof.to_dict(), "poe_stub_b64": poe_execution_stub_b64("x", "y")}
    )
    with pytest.raises(ProofError, match="commitment mismatch"):
        verify_worker_proof(_pubkey_hex(sk), bad)


def test_from_dict_requires_all_fields():
    with pytest.raises(ProofError, match="missing field"):
        WorkerProof.from_dict({"hardware_id_hex": HARDWARE_ID})