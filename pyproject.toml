[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cwcontracts"
version = "0.1.0"
description = "ICS-20 token transfer contract, escrow state and airdrop message types, with an in-memory chain environment"
requires-python = ">=3.10"
dependencies = []
keywords = ["escrow", "ics20", "ibc", "airdrop", "cw20", "smart-contracts"]
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
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cwcontracts"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
