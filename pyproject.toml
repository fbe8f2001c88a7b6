[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xvtools"
version = "0.1.0"
description = "Models of a small RISC-V teaching kernel's memory system, with a shell parser, grep, printf, a free-list allocator and core utilities"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "operating-system",
    "risc-v",
    "sv39",
    "page-table",
    "virtual-memory",
    "elf",
    "shell",
    "grep",
    "malloc",
    "teaching",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xv-grep = "xvtools.grep:main"
xv-cat = "xvtools.coreutils:cat_main"
xv-echo = "xvtools.coreutils:echo_main"
xv-wc = "xvtools.coreutils:wc_main"
xv-ln = "xvtools.coreutils:ln_main"
xv-mkdir = "xvtools.coreutils:mkdir_main"
xv-rm = "xvtools.coreutils:rm_main"

[tool.hatch.build.targets.wheel]
packages = ["xvtools"]

[tool.hatch.build.targets.sdist]
include = ["xvtools", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
