[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cloudnuke"
version = "0.1.0"
description = "Find and delete AWS resources (S3 buckets, Secrets Manager secrets, EBS snapshots, SQS queues, transit gateways), filtered by age, tags and name rules."
requires-python = ">=3.11"
keywords = [
    "cloud",
    "aws",
    "cleanup",
    "s3",
    "sqs",
    "secrets-manager",
    "snapshots",
    "transit-gateway",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "pyyaml>=6.0",
    "termcolor>=2.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[tool.hatch.build.targets.wheel]
packages = ["cloudnuke"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true
