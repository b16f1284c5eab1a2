[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "flashswap"
version = "0.1.0"
description = "Flash loans and flash swaps against constant-product pairs, run on an in-memory contract runtime"
requires-python = ">=3.10"
dependencies = []
keywords = ["flash-loan", "flash-swap", "amm", "uniswap", "smart-contract", "simulation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Office/Business :: Financial",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["flashswap"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
