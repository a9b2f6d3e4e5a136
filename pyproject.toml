[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tracer"
version = "0.1.0"
description = "Unified session data model, markdown rendering, statistics and path helpers for AI coding agent session histories"
requires-python = ">=3.10"
dependencies = []
keywords = ["ai", "coding-agent", "session", "markdown", "history", "shell"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tracer"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
