[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "queuebroker"
version = "0.1.0"
description = "A small in-memory message queue broker served over HTTP, with long-polling reads"
requires-python = ">=3.10"
dependencies = []
keywords = ["queue", "message broker", "long polling", "http", "in-memory"]
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
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
queuebroker = "queuebroker.server:main"

[tool.hatch.build.targets.wheel]
packages = ["queuebroker"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
