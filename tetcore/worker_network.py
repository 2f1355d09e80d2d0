"""In-memory registry of worker network nodes and network snapshots."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from typing import Any, Iterator


def now_ms() -> int:
    """Current Unix time in milliseconds."""
    return time.time_ns() // 1_000_000


@dataclass
class WorkerEntry:
    wallet: str
    hardware_id_hex: str
    ed25519_pubkey_hex: str
    x25519_pubkey_b64: str | None
    tflops_est: float
    last_seen_ms: int


@dataclass
class WorkerRegistry:
    by_wallet: dict[str, WorkerEntry] = field(default_factory=dict)

    def upsert(self, entry: WorkerEntry) -> None:
        self.by_wallet[entry.wallet] = entry

    def heartbeat(
        self,
        wallet: str,
        hardware_id_hex: str,
        ed25519_pubkey_hex: str,
        x25519_pubkey_b64: str | None,
        tflops_est: float,
    ) -> None:
        """Record a heartbeat; raises ValueError when a required field is blank."""
        w = wallet.strip()
        if not w:
            raise ValueError("wallet required")
        hw = hardware_id_hex.strip()
        if not hw:
            raise ValueError("hardware_id_hex required")
        pk = ed25519_pubkey_hex.strip()
        if not pk:
            raise ValueError("ed25519_pubkey_hex required")
        x25519 = x25519_pubkey_b64.strip() if x25519_pubkey_b64 is not None else ""
        self.upsert(
            WorkerEntry(
                wallet=w,
                hardware_id_hex=hw,
                ed25519_pubkey_hex=pk,
                x25519_pubkey_b64=x25519 or None,
                # NaN and negatives both clamp to zero.
                tflops_est=tflops_est if tflops_est > 0.0 else 0.0,
                last_seen_ms=now_ms(),
            )
        )

    def get_by_hardware(self, hardware_id_hex: str) -> WorkerEntry | None:
        want = hardware_id_hex.strip()
        return next(
            (e for e in self.by_wallet.values() if e.hardware_id_hex == want), None
        )

    def _active(self, ttl_ms: int) -> Iterator[WorkerEntry]:
        t = now_ms()
        return (e for e in self.by_wallet.values() if max(0, t - e.last_seen_ms) <= ttl_ms)

    def active_count(self, ttl_ms: int) -> int:
        """Number of workers whose last heartbeat is within ``ttl_ms``."""
        return sum(1 for _ in self._active(ttl_ms))

    def total_tflops(self, ttl_ms: int) -> float:
        return sum((e.tflops_est for e in self._active(ttl_ms)), 0.0)

    def remove_wallet(self, wallet: str) -> None:
        """Remove a worker entry by wallet id (used for stake/slash revocation)."""
        w = wallet.strip()
        if w:
            self.by_wallet.pop(w, None)


@dataclass(frozen=True)
class NetworkPowerSnapshot:
    total_compute_tflops: float
    active_worker_nodes: int
    community_stevemon_earned_micro: int
    total_burned_micro: int
    tet_price_usd: float
    total_supply_micro: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NetworkStats:
    """Public tokenomics and demand snapshot for dashboards."""

    total_compute_tflops: float
    active_worker_nodes: int
    community_stevemon_earned_micro: int
    total_burned_micro: int
    genesis_1k_claimed: int
    genesis_guardians_filled: int
    genesis_guardians_total: int
    tet_price_usd: float
    tet_presale_usd: float
    total_supply_micro: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)