[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "workpool"
version = "0.1.0"
description = "A small fixed-size thread pool with a bounded task queue and C11-style threading primitives"
requires-python = ">=3.10"
dependencies = []
keywords = ["thread pool", "threads", "task queue", "mutex", "condition variable", "async"]
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
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
workpool-demo = "workpool.app:main"

[tool.hatch.build.targets.wheel]
packages = ["workpool"]

[tool.pytest.ini_options]
addopts = "-ra"
