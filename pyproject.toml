[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nanostash"
version = "0.1.0"
description = "Glyph atlas packing, text layout and image cache keys for vector drawing"
requires-python = ">=3.10"
dependencies = []
keywords = ["font", "glyph", "atlas", "text", "skyline", "utf-8", "blur"]
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
    "Topic :: Text Processing :: Fonts",
    "Topic :: Multimedia :: Graphics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nanostash"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
