[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "alexagent"
version = "0.1.0"
description = "Building blocks of a tool-driven ReAct agent: tool-call parsing and execution, streamed chat assembly, and conversation context management"
requires-python = ">=3.10"
dependencies = []
keywords = ["agent", "react", "llm", "tools", "context", "summarization", "tokenizer"]
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
    "Topic :: Software Development",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["alexagent"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
