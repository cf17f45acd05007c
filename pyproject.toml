[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "osacop"
version = "0.1.0"
description = "Status feedback, restart handling and resource helpers for compute instances, host pools and cluster orders"
requires-python = ">=3.10"
dependencies = []
keywords = ["reconciler", "controller", "fulfillment", "compute-instance", "host-pool", "finalizer", "conditions"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["osacop"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
