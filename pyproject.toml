[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "consume_alert"
version = "0.1.0"
description = "Parse card payment notices, classify spending by type and report consumption summaries."
requires-python = ">=3.10"
dependencies = [
    "requests",
]
keywords = ["expenses", "consumption", "card payments", "accounting", "chat bot"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Office/Business :: Financial :: Accounting",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["consume_alert"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
