[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wordrelay"
version = "0.1.0"
description = "Length-prefixed framing, JSON-over-HTTP messages and incremental HTTP and URL parsers for a small text relay protocol"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "parser", "json", "framing", "url", "protocol"]
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
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["wordrelay"]

[tool.pytest.ini_options]
addopts = "-ra"
