"""Local model files for heavy worker inference: locations, status and download.

Downloads are started explicitly (user consent) and report progress through
:func:`model_status_v1`.
"""

from __future__ import annotations

import os
import sys
import threading
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any

import httpx
import psutil

_DEFAULT_MODEL_REPO = "QuantFactory/Meta-Llama-3-8B-Instruct-GGUF"
_DEFAULT_MODEL_FILENAME = "Meta-Llama-3-8B-Instruct-Q4_K_M.gguf"
_DEFAULT_TOKENIZER_REPO = "meta-llama/Meta-Llama-3-8B"
_DEFAULT_MODEL_DIR = "tet_models"
_TOKENIZER_FILENAME = "tokenizer.json"
_LOW_RAM_BYTES = 8 * 1024 * 1024 * 1024
_GIB = 1024.0 * 1024.0 * 1024.0


class ModelDownloadError(RuntimeError):
    """Raised when a model or tokenizer download fails."""


@dataclass(frozen=True)
class ModelStatus:
    """Snapshot of the local model files and any download in progress."""

    v: int
    ready: bool
    downloading: bool
    model_repo: str
    model_filename: str
    model_path: str
    tokenizer_repo: str
    tokenizer_path: str
    total_bytes: int | None
    downloaded_bytes: int
    error: str | None

    def to_dict(self) -> dict[str, Any]:
        """Serialise, leaving out ``total_bytes`` and ``error`` when unset."""
        data = asdict(self)
        for optional in ("total_bytes", "error"):
            if data[optional] is None:
                del data[optional]
        return data


@dataclass
class _DownloadState:
    downloading: bool = False
    total_bytes: int | None = None
    downloaded_bytes: int = 0
    error: str | None = None


_state = _DownloadState()
_state_lock = threading.Lock()


def _reset_download_state() -> None:
    global _state
    with _state_lock:
        _state = _DownloadState()


def _snapshot() -> _DownloadState:
    with _state_lock:
        return replace(_state)


def _env(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


def model_repo() -> str:
    return _env("TET_HEAVY_MODEL_REPO", _DEFAULT_MODEL_REPO)


def model_filename() -> str:
    return _env("TET_HEAVY_MODEL_GGUF", _DEFAULT_MODEL_FILENAME)


def tokenizer_repo() -> str:
    return _env("TET_HEAVY_TOKENIZER_REPO", _DEFAULT_TOKENIZER_REPO)


def model_dir() -> Path:
    return Path(_env("TET_HEAVY_MODEL_DIR", _DEFAULT_MODEL_DIR))


def model_path_on_disk() -> Path:
    return model_dir() / model_filename()


def tokenizer_path_on_disk() -> Path:
    return model_dir() / _TOKENIZER_FILENAME


def hf_resolve_url(repo: str, filename: str) -> str:
    """URL of ``filename`` on the main branch of a Hugging Face repository."""
    return f"https://huggingface.co/{repo}/resolve/main/{filename}"


def warn_if_low_ram() -> bool:
    """Print a warning to stderr when less than 8 GiB of RAM is available; return whether it did."""
    available = psutil.virtual_memory().available
    if available >= _LOW_RAM_BYTES:
        return False
    rule = "=" * 63
    print(rule, file=sys.stderr)
    print("INSUFFICIENT RAM FOR HIGH-TIER AI INFERENCE.", file=sys.stderr)
    print(f"available_ram_gb≈{available / _GIB:.2f}", file=sys.stderr)
    print("Proceeding anyway (use at your own risk).", file=sys.stderr)
    print(rule, file=sys.stderr)
    return True


async def model_status_v1() -> ModelStatus:
    st = _snapshot()
    model_path = model_path_on_disk()
    tok_path = tokenizer_path_on_disk()
    ready = (
        model_path.exists() and tok_path.exists() and not st.downloading and st.error is None
    )
    try:
        on_disk = model_path.stat().st_size
    except OSError:
        on_disk = 0
    return ModelStatus(
        v=1,
        ready=ready,
        downloading=st.downloading,
        model_repo=model_repo(),
        model_filename=model_filename(),
        model_path=str(model_path),
        tokenizer_repo=tokenizer_repo(),
        tokenizer_path=str(tok_path),
        total_bytes=st.total_bytes,
        downloaded_bytes=st.downloaded_bytes if st.downloading else max(on_disk, st.downloaded_bytes),
        error=st.error,
    )


async def _head_content_length(client: httpx.AsyncClient, url: str) -> int | None:
    try:
        resp = await client.head(url)
    except httpx.HTTPError:
        return None
    if not resp.is_success:
        return None
    try:
        return int(resp.headers["content-length"])
    except (KeyError, ValueError):
        return None


async def _download_with_progress(client: httpx.AsyncClient, url: str, dst: Path) -> None:
    tmp = dst.with_suffix(".partial")
    try:
        async with client.stream("GET", url) as resp:
            if not resp.is_success:
                raise ModelDownloadError(f"download failed HTTP {resp.status_code}")
            dst.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("wb") as fh:
                async for chunk in resp.aiter_bytes():
                    fh.write(chunk)
                    with _state_lock:
                        _state.downloaded_bytes += len(chunk)
        tmp.replace(dst)
    except httpx.HTTPError as exc:
        raise ModelDownloadError(f"download GET: {exc}") from exc
    except OSError as exc:
        raise ModelDownloadError(f"write: {exc}") from exc


def _fail(message: str) -> None:
    with _state_lock:
        _state.downloading = False
        _state.error = message


async def start_model_download() -> None:
    """Download the tokenizer, then the model; a no-op if a download is already running."""
    with _state_lock:
        if _state.downloading:
            return
        _state.downloading = True
        _state.downloaded_bytes = 0
        _state.total_bytes = None
        _state.error = None

    model_url = hf_resolve_url(model_repo(), model_filename())
    tok_url = hf_resolve_url(tokenizer_repo(), _TOKENIZER_FILENAME)
    model_dst = model_path_on_disk()
    tok_dst = tokenizer_path_on_disk()

    timeout = httpx.Timeout(30.0, read=None)
    async with httpx.AsyncClient(follow_redirects=True, timeout=timeout) as client:
        total = await _head_content_length(client, model_url)
        with _state_lock:
            _state.total_bytes = total

        try:
            await _download_with_progress(client, tok_url, tok_dst)
        except ModelDownloadError as exc:
            _fail(f"tokenizer download failed: {exc}")
            raise
        try:
            await _download_with_progress(client, model_url, model_dst)
        except ModelDownloadError as exc:
            _fail(f"model download failed: {exc}")
            raise

    with _state_lock:
        _state.downloading = False
        _state.error = None