[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mempal"
version = "0.3.1"
description = "Project memory helpers for coding agents: partner session peek, a file-based cowork inbox, conversation ingest helpers and an HTTP embeddings client."
requires-python = ">=3.10"
keywords = ["memory", "agents", "embeddings", "jsonl", "cowork", "transcripts"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: POSIX",
    "Typing :: Typed",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "httpx",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mempal"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
