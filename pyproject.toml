[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "encointer"
version = "1.0.0"
description = "Community currency logic: meetup assignment, meetup validation, demurrage balances, fee conversion and a business bazaar"
requires-python = ">=3.10"
dependencies = []
keywords = ["community currency", "demurrage", "ceremonies", "meetups", "bazaar", "fixed-point"]
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
    "Topic :: Office/Business :: Financial",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["encointer"]

[tool.pytest.ini_options]
addopts = "-ra"
