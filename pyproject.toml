[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "systemslabs"
version = "0.1.0"
description = "Cache simulator, bit-puzzle checker and heap allocator driver for systems programming exercises"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "cache-simulator",
    "matrix-transpose",
    "bit-manipulation",
    "ieee-754",
    "malloc",
    "allocator",
    "systems-programming",
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
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
csim = "systemslabs.csim:main"
fshow = "systemslabs.fshow:main"
ishow = "systemslabs.ishow:main"
btest = "systemslabs.btest:main"
mdriver = "systemslabs.mdriver:main"

[tool.hatch.build.targets.wheel]
packages = ["systemslabs"]

[tool.pytest.ini_options]
addopts = "-ra"
