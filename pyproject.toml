[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rmfsched"
version = "0.1.0"
description = "Task plugins, robot task estimate and execution clients, and scheduler request nodes over an in-process message bus."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "scheduler",
    "robotics",
    "fleet",
    "tasks",
    "plugins",
    "estimation",
    "publish-subscribe",
]
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
    "Topic :: Office/Business :: Scheduling",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rmfsched"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
