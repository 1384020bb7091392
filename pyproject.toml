[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "msxconverter"
version = "0.1.0"
description = "Convert MSX screen images, MSX BASIC programs and WBASS2 sources to PNG and plain text"
requires-python = ">=3.10"
keywords = ["msx", "retro", "basic", "wbass2", "screen5", "screen8", "png", "converter"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    "Topic :: System :: Emulators",
]
dependencies = [
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pillow",
]

[project.scripts]
msxconverter = "msxconverter.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["msxconverter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
