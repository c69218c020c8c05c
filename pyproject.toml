[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cua"
version = "0.1.0.dev0"
description = "Computer use agent core: task memory, progressive summarization, a ReAct run loop and error types"
requires-python = ">=3.10"
keywords = [
    "automation",
    "desktop-automation",
    "agent",
    "react",
    "llm",
    "task-memory",
]
classifiers = [
    "Development Status :: 2 - Pre-Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]
dependencies = [
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[tool.hatch.build.targets.wheel]
packages = ["cua"]

[tool.hatch.build.targets.sdist]
include = [
    "cua",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
