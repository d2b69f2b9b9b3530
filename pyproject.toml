[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "walletbot"
version = "0.1.0"
description = "Wallet bookkeeping from hashtag-formatted chat messages, with per-chat balances stored in SQLite"
requires-python = ">=3.10"
dependencies = []
keywords = ["chat", "bot", "wallet", "bookkeeping", "balance", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Natural Language :: Chinese (Simplified)",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
    "Topic :: Office/Business :: Financial :: Accounting",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["walletbot"]

[tool.pytest.ini_options]
addopts = "-ra"
