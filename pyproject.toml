[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "compilerkit"
version = "0.1.0"
description = "A two-pass SIC assembler, a lexer token reporter and the core of a three-address-code translator."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "assembler",
    "sic",
    "two-pass",
    "object-code",
    "lexer",
    "symbol-table",
    "three-address-code",
    "quadruples",
    "backpatching",
    "compiler",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Assemblers",
    "Topic :: Software Development :: Compilers",
    "Topic :: Education",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
compilerkit-asm = "compilerkit.assembler:main"

[tool.hatch.build.targets.wheel]
packages = ["compilerkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
