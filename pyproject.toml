[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hwsensors"
version = "0.1.0"
description = "Hardware sensor helpers: hwmon discovery, configuration parsing, threshold alarms and airflow (CFM) calculation"
requires-python = ">=3.10"
dependencies = []
keywords = ["hwmon", "sensors", "thresholds", "bmc", "sysfs", "airflow", "cfm"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Topic :: System :: Hardware",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["hwsensors"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
