[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "esdbkit"
version = "0.1.0"
description = "Data model, request building and response decoding for an event store database client"
requires-python = ">=3.10"
dependencies = []
keywords = ["event-sourcing", "event-store", "streams", "subscriptions", "database"]
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
    "Topic :: Database :: Front-Ends",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["esdbkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
