[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oslabs"
version = "0.1.0"
description = "Hands-on operating-system labs: processes, context switches, races, lock granularity, futexes, signals and file-system durability"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "operating-systems",
    "education",
    "concurrency",
    "processes",
    "context-switch",
    "futex",
    "signals",
    "filesystem",
    "linux",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: System :: Operating System",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
oslabs-processes = "oslabs.processes:main"
oslabs-context-switch = "oslabs.context_switch:main"
oslabs-concurrency = "oslabs.concurrency:main"
oslabs-finegrained = "oslabs.finegrained:main"
oslabs-mpmc = "oslabs.mpmc:main"
oslabs-lockfree = "oslabs.lockfree:main"
oslabs-sync-primitives = "oslabs.sync_primitives:main"
oslabs-signals-demand = "oslabs.signals_demand:main"
oslabs-fs-ops = "oslabs.fs_ops:main"
oslabs-crash-recovery = "oslabs.crash_recovery:main"

[tool.hatch.build.targets.wheel]
packages = ["oslabs"]

[tool.hatch.build.targets.sdist]
include = ["oslabs", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
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
