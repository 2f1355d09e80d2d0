"""Verification engine: redundant worker outputs must hash identically before merge."""

from __future__ import annotations

import hashlib
from typing import Iterable, Sequence

from .worker_proof import result_sha256_hex


class VerificationError(ValueError):
    """Raised when redundant worker results cannot be reconciled."""


def verify_redundant_and_pick(shard_count: int, candidates: Sequence[Sequence[str]]) -> list[str]:
    """Return one canonical output per shard, only if every worker's result hash agrees."""
    if not candidates:
        raise VerificationError("no worker result sets")
    for outputs in candidates:
        if len(outputs) != shard_count:
            raise VerificationError(
                f"worker output len {len(outputs)} != shard_count {shard_count}"
            )

    canonical = []
    for i, shard_outputs in enumerate(zip(*candidates)):
        hashes = {result_sha256_hex(out) for out in shard_outputs}
        if len(hashes) != 1:
            raise VerificationError(
                f"shard {i}: worker result hash mismatch (verification failed)"
            )
        canonical.append(shard_outputs[0])
    return canonical


def verify_single_worker(outputs: Iterable[str]) -> list[str]:
    """Single-worker path: outputs are accepted as they are."""
    return list(outputs)


def hash_set_idempotency(job_id: str, execution_root_hex: str) -> str:
    h = hashlib.sha256(b"tet-job-seal:v1")
    h.update(job_id.encode())
    h.update(execution_root_hex.encode())
    return h.hexdigest()