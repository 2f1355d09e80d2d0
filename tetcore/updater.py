"""Signed update manifests.

Defines a verifiable manifest format for rolling out protocol upgrades; nothing is
downloaded or applied here.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey


class UpdateError(Exception):
    """Base class for update manifest errors."""


class InvalidSignatureError(UpdateError):
    def __init__(self) -> None:
        super().__init__("invalid signature")


class InvalidKeyError(UpdateError):
    def __init__(self) -> None:
        super().__init__("invalid key")


@dataclass(frozen=True)
class UpdateManifest:
    v: int
    channel: str  # "stable" or "beta"
    version: str
    published_unix_ms: int
    url: str
    sha256_hex: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UpdateManifest":
        try:
            return cls(
                v=int(data["v"]),
                channel=str(data["channel"]),
                version=str(data["version"]),
                published_unix_ms=int(data["published_unix_ms"]),
                url=str(data["url"]),
                sha256_hex=str(data["sha256_hex"]),
            )
        except KeyError as exc:
            raise ValueError(f"missing field: {exc.args[0]}") from None


def verify_manifest_ed25519(
    verifying_key_bytes: bytes, signature_bytes: bytes, manifest_bytes: bytes
) -> None:
    """Verify an Ed25519 signature over raw manifest bytes."""
    if len(verifying_key_bytes) != 32:
        raise InvalidKeyError()
    try:
        key = Ed25519PublicKey.from_public_bytes(bytes(verifying_key_bytes))
    except ValueError:
        raise InvalidKeyError() from None
    if len(signature_bytes) != 64:
        raise InvalidSignatureError()
    try:
        key.verify(bytes(signature_bytes), bytes(manifest_bytes))
    except InvalidSignature:
        raise InvalidSignatureError() from None