[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "defconpanel"
version = "1.0.0"
description = "Controller for a DEFCON-style status light panel driven by monitoring problem counts"
requires-python = ">=3.10"
dependencies = []
keywords = ["defcon", "monitoring", "led", "status-panel", "state-machine"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
defconpanel = "defconpanel.app:main"

[tool.hatch.build.targets.wheel]
packages = ["defconpanel"]

[tool.pytest.ini_options]
addopts = "-ra"
