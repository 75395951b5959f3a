"""Find and delete AWS resources, filtered by age, tags and name rules."""

__version__ = "0.1.0"

__all__ = [
    "commands",
    "config",
    "errors",
    "resources",
    "s3",
    "secrets_manager",
    "snapshot",
    "sqs",
    "transit_gateway",
    "util",
]