[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "defusekit"
version = "0.1.0"
description = "Simulated bomb-defusal puzzle modules: wave matching, blast gauge and Morse code"
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "puzzle", "bomb-defusal", "simulation", "morse"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Puzzle Games",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
defusekit = "defusekit.board:main"

[tool.hatch.build.targets.wheel]
packages = ["defusekit"]

[tool.pytest.ini_options]
addopts = "-ra"
