# tetcore

`tetcore` is the worker-side toolkit for a distributed compute network. It covers:

- **Proof of compute** (`tetcore.worker_proof`): task and result hashes, the message a worker
  signs, the proof-of-execution commitment, and verification of a signed `WorkerProof`.
- **Redundant verification** (`tetcore.verification`): merge shard outputs from several workers
  only when every worker produced the same result hash.
- **Worker registry** (`tetcore.worker_network`): an in-memory registry of worker nodes kept up
  to date by heartbeats, with active-node and compute totals.
- **Signed update manifests** (`tetcore.updater`): Ed25519 verification of update manifests.
- **Model storage** (`tetcore.model_store`): where the local inference model and tokenizer live,
  their download status, and a download with progress reporting.

## Installation

```
pip install tetcore
```

For running the test suite:

```
pip install "tetcore[test]"
pytest
```

## Proof of compute

```python
import base64

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from tetcore.worker_proof import (
    ProofError,
    WorkerProof,
    hardware_id_sha256_hex,
    poc_infer,
    poe_execution_stub_b64,
    result_sha256_hex,
    task_sha256_hex,
    verify_worker_proof_full,
    worker_sign_message,
)

worker_key = Ed25519PrivateKey.generate()
hardware_id_hex = hardware_id_sha256_hex()

output = poc_infer("2 + 2")
task_hash = task_sha256_hex("poc-model", "2 + 2")
result_hash = result_sha256_hex(output)
message = worker_sign_message(task_hash, result_hash, hardware_id_hex)

proof = WorkerProof(
    hardware_id_hex=hardware_id_hex,
    task_sha256_hex=task_hash,
    result_sha256_hex=result_hash,
    output_text=output,
    ed25519_sig_b64=base64.b64encode(worker_key.sign(message)).decode(),
    poe_stub_b64=poe_execution_stub_b64(task_hash, result_hash),
)

pubkey_hex = worker_key.public_key().public_bytes_raw().hex()
verify_worker_proof_full(pubkey_hex, "poc-model", "2 + 2", proof)  # returns None
```

`verify_worker_proof_full` raises `ProofError` when the task hash, result hash, signature or
proof-of-execution commitment does not match. `verify_worker_proof` does the same checks
without the task hash; `verify_poe_stub` and `verify_ed25519` check the single parts.
`WorkerProof.to_dict()` and `WorkerProof.from_dict()` convert a proof to and from a plain
dictionary.

`hardware_id_sha256_hex()` gives a SHA-256 hex identifier for the current machine, built from
its MAC address (when one can be read), host name, operating-system version and kernel release.

## Redundant verification

```python
from tetcore.verification import VerificationError, verify_redundant_and_pick

merged = verify_redundant_and_pick(2, [["a", "b"], ["a", "b"]])
# ["a", "b"]

verify_redundant_and_pick(1, [["a"], ["x"]])  # raises VerificationError
```

An empty list of candidates, or a worker whose output count differs from the shard count, is
also rejected. `verify_single_worker(outputs)` accepts one worker's outputs as they are, and
`hash_set_idempotency(job_id, execution_root_hex)` gives the seal hash for a finished job.

## Worker registry

```python
from tetcore.worker_network import WorkerRegistry

registry = WorkerRegistry()
registry.heartbeat("wallet-1", "00" * 32, "11" * 32, None, 12.5)
registry.get_by_hardware("00" * 32)   # the WorkerEntry, or None
registry.active_count(60_000)         # nodes seen in the last minute
registry.total_tflops(60_000)
registry.remove_wallet("wallet-1")
```

A heartbeat with a blank wallet, hardware id or public key raises `ValueError`; a negative
compute estimate is stored as zero. `NetworkPowerSnapshot` and `NetworkStats` are plain
records of network totals with a `to_dict()` for serialisation.

## Update manifests

`UpdateManifest` holds a manifest's version, channel, publish time, URL and SHA-256.
`verify_manifest_ed25519(verifying_key_bytes, signature_bytes, manifest_bytes)` returns quietly
for a good signature and raises `InvalidKeyError` or `InvalidSignatureError` (both
`UpdateError`) otherwise.

## Model storage

The model location is configured through environment variables:

| Variable                   | Meaning                              | Default                                      |
|----------------------------|--------------------------------------|----------------------------------------------|
| `TET_HEAVY_MODEL_REPO`     | repository holding the model file    | `QuantFactory/Meta-Llama-3-8B-Instruct-GGUF` |
| `TET_HEAVY_MODEL_GGUF`     | model file name                      | `Meta-Llama-3-8B-Instruct-Q4_K_M.gguf`       |
| `TET_HEAVY_TOKENIZER_REPO` | repository holding `tokenizer.json`  | `meta-llama/Meta-Llama-3-8B`                 |
| `TET_HEAVY_MODEL_DIR`      | local directory for both files       | `tet_models`                                 |

Both `model_status_v1()` and `start_model_download()` are coroutines.

```python
import asyncio

from tetcore.model_store import model_status_v1, start_model_download

asyncio.run(start_model_download())
status = asyncio.run(model_status_v1())
status.to_dict()
```

`model_status_v1()` reports whether both files are present and ready, whether a download is
running, and how many bytes have arrived. `start_model_download()` fetches the tokenizer and
then the model from `hf_resolve_url(repo, filename)`, writing each to a `.partial` file that is
renamed into place once complete; it does nothing if a download is already running. Failures
are recorded in the status and raised as `ModelDownloadError`. `warn_if_low_ram()` prints a
warning to standard error when less than 8 GiB of memory is available and returns whether it
did.

## What the package does not do

- It has no wallets: no mnemonic phrases, no key derivation and no hybrid-signature messages.
- It does not run model inference; `tetcore.model_store` only locates and downloads the files.
- It has no ledger, no HTTP server and no command-line program. The registry lives in memory
  only and is lost when the process ends.