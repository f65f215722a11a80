[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "routeweave"
version = "0.1.0"
description = "Composable, asynchronous request filters for building HTTP services"
requires-python = ">=3.10"
dependencies = [
    "brotli",
]
keywords = ["http", "filters", "routing", "web", "asyncio", "compression"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Framework :: AsyncIO",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["routeweave"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
