[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tetcore"
version = "0.1.0"
description = "Worker-side toolkit for a compute network: proof-of-compute hashing and verification, redundant result checks, a worker registry, signed update manifests and local model storage."
requires-python = ">=3.10"
keywords = [
    "distributed-computing",
    "proof-of-compute",
    "ed25519",
    "worker",
    "verification",
    "update-manifest",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
    "Topic :: Security :: Cryptography",
]
dependencies = [
    "cryptography>=41",
    "httpx>=0.25",
    "psutil>=5.9",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "pytest-asyncio>=0.23",
    "respx>=0.20",
]

[tool.hatch.build.targets.wheel]
packages = ["tetcore"]

[tool.hatch.build.targets.sdist]
include = ["tetcore", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP", "SIM"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
ignore_missing_imports = true
