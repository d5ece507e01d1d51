[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zeroplugins"
version = "0.1.0"
description = "Chat-bot plugin logic: sign-in scores, sleep tracking, wordle, tarot, diaries and picture stores"
requires-python = ">=3.10"
keywords = ["chatbot", "plugins", "wordle", "tarot", "sqlite"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Natural Language :: Chinese (Simplified)",
    "Topic :: Communications :: Chat",
]
dependencies = [
    "requests",
    "pillow",
    "lxml",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["zeroplugins"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
