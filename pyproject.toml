[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "otasim"
version = "0.1.0"
description = "Simulated dual-slot OTA firmware update with A/B metadata, signed images, flash and watchdog models"
requires-python = ">=3.10"
dependencies = []
keywords = ["ota", "bootloader", "firmware", "flash", "watchdog", "simulation", "embedded"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
otasim = "otasim.simulation:main"

[tool.hatch.build.targets.wheel]
packages = ["otasim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
