"""Worker-side toolkit: proof of compute, redundant verification, worker registry, update manifests and model storage."""

__version__ = "0.1.0"