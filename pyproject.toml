[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kaitoctl"
version = "0.1.0"
description = "Command-line tool for deploying, fine-tuning and monitoring AI models with Kaito workspaces on Kubernetes"
requires-python = ">=3.10"
keywords = ["kubernetes", "kubectl", "kaito", "ai", "inference", "fine-tuning", "gpu"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
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
dependencies = [
    "pyyaml>=6.0",
    "requests>=2.28",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
kubectl-kaito = "kaitoctl.cli:main"
kaito = "kaitoctl.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["kaitoctl"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
