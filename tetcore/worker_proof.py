"""Proof-of-Compute worker protocol: hashing, signing messages and proof verification.

Workers run a small deterministic inference and sign
``task_hash | result_hash | hardware_id`` with their Ed25519 key.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import platform
import socket
import uuid
from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

_POE_DOMAIN = b"ZK-PoE:v1:stub"
_POE_SCHEME = "tet-zkp-poe-stub-v1"


class ProofError(ValueError):
    """Raised when a worker proof, or a part of it, fails verification."""


@dataclass(frozen=True)
class WorkerProof:
    """A worker's signed claim that it produced ``output_text`` for a task."""

    hardware_id_hex: str
    task_sha256_hex: str
    result_sha256_hex: str
    output_text: str
    ed25519_sig_b64: str
    poe_stub_b64: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkerProof":
        values = {}
        for f in fields(cls):
            if f.name not in data:
                raise ProofError(f"missing field: {f.name}")
            value = data[f.name]
            if not isinstance(value, str):
                raise ProofError(f"field {f.name} must be a string")
            values[f.name] = value
        return cls(**values)


def _sha256_hex(*parts: bytes) -> str:
    h = hashlib.sha256()
    for part in parts:
        h.update(part)
    return h.hexdigest()


def _mac_address() -> str | None:
    node = uuid.getnode()
    # A set multicast bit means the node id was randomly generated, not read from hardware.
    if (node >> 40) & 1:
        return None
    return ":".join(f"{(node >> shift) & 0xFF:02X}" for shift in range(40, -1, -8))


def _os_version() -> str:
    system = platform.system()
    if system == "Linux":
        try:
            return platform.freedesktop_os_release().get("VERSION_ID", "")
        except OSError:
            return ""
    if system == "Darwin":
        return platform.mac_ver()[0]
    return platform.version()


def hardware_id_sha256_hex() -> str:
    """Best-effort device fingerprint: SHA-256 hex over MAC, host name, OS and kernel."""
    parts = []
    mac = _mac_address()
    if mac is not None:
        parts.append(f"mac={mac}")
    parts.append(f"host={socket.gethostname()}")
    parts.append(f"os={_os_version()}")
    parts.append(f"kernel={platform.release()}")
    return _sha256_hex(b"tet-hardware-id:v1", "|".join(parts).encode())


def poc_infer(input_text: str) -> str:
    """Deterministic pseudo-inference output used for proof-of-compute."""
    data = input_text.encode()
    digest = hashlib.sha256(b"tet-poc-infer:v1" + data).digest()
    return f"PoC:TET stub inference → {digest[:8].hex()}… ({len(data)} bytes)"


def task_sha256_hex(model: str, input_text: str) -> str:
    return _sha256_hex(b"tet-ai-task:v1", model.encode(), b"\x00", input_text.encode())


def result_sha256_hex(output: str) -> str:
    return _sha256_hex(b"tet-ai-result:v1", output.encode())


def worker_sign_message(task_sha256_hex: str, result_sha256_hex: str, hardware_id_hex: str) -> bytes:
    """Bytes a worker signs: ``task|result|hardware``."""
    return b"|".join(
        (task_sha256_hex.encode(), result_sha256_hex.encode(), hardware_id_hex.encode())
    )


def _poe_commitment(task_sha256_hex: str, result_sha256_hex: str) -> str:
    return _sha256_hex(_POE_DOMAIN, task_sha256_hex.encode(), result_sha256_hex.encode())


def poe_execution_stub_b64(task_sha256_hex: str, result_sha256_hex: str) -> str:
    """Base64 JSON commitment binding task and result hashes."""
    payload = {
        "scheme": _POE_SCHEME,
        "commitment_sha256_hex": _poe_commitment(task_sha256_hex, result_sha256_hex),
    }
    raw = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode()
    return base64.b64encode(raw).decode("ascii")


def verify_poe_stub(poe_stub_b64: str, task_sha256_hex: str, result_sha256_hex: str) -> None:
    try:
        raw = base64.b64decode(poe_stub_b64.encode(), validate=True)
    except (binascii.Error, ValueError):
        raise ProofError("poe: invalid base64") from None
    try:
        value = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as exc:
        raise ProofError(f"poe: json: {exc}") from None
    got = value.get("commitment_sha256_hex") if isinstance(value, dict) else None
    if not isinstance(got, str):
        raise ProofError("poe: missing commitment")
    if got != _poe_commitment(task_sha256_hex, result_sha256_hex):
        raise ProofError("poe: commitment mismatch")


def verify_ed25519(pubkey_hex: str, sig_b64: str, message: bytes) -> None:
    """Verify a detached Ed25519 signature given a hex public key and base64 signature."""
    try:
        pk_bytes = bytes.fromhex(pubkey_hex.strip())
    except ValueError:
        raise ProofError("invalid ed25519 pubkey hex") from None
    if len(pk_bytes) != 32:
        raise ProofError(f"ed25519 pubkey must be 32 bytes (got {len(pk_bytes)})")
    try:
        sig = base64.b64decode(sig_b64.strip().encode(), validate=True)
    except (binascii.Error, ValueError):
        raise ProofError("invalid ed25519 signature base64") from None
    if len(sig) != 64:
        raise ProofError(f"ed25519 signature must be 64 bytes (got {len(sig)})")
    try:
        key = Ed25519PublicKey.from_public_bytes(pk_bytes)
        key.verify(sig, message)
    except ValueError:
        raise ProofError("invalid ed25519 pubkey") from None
    except InvalidSignature:
        raise ProofError("invalid ed25519 signature") from None


def verify_worker_proof(ed25519_pubkey_hex: str, proof: WorkerProof) -> None:
    """Check result hash, worker signature and PoE commitment."""
    if result_sha256_hex(proof.output_text) != proof.result_sha256_hex:
        raise ProofError("result hash mismatch")
    message = worker_sign_message(
        proof.task_sha256_hex, proof.result_sha256_hex, proof.hardware_id_hex
    )
    verify_ed25519(ed25519_pubkey_hex, proof.ed25519_sig_b64, message)
    verify_poe_stub(proof.poe_stub_b64, proof.task_sha256_hex, proof.result_sha256_hex)


def verify_worker_proof_full(
    ed25519_pubkey_hex: str, model: str, input_text: str, proof: WorkerProof
) -> None:
    """Full check: task hash against model and input, then everything in verify_worker_proof."""
    if task_sha256_hex(model, input_text) != proof.task_sha256_hex:
        raise ProofError("task hash mismatch")
    if result_sha256_hex(proof.output_text) != proof.result_sha256_hex:
        raise ProofError("result hash mismatch")
    verify_worker_proof(ed25519_pubkey_hex, proof)