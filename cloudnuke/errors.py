"""Errors raised by the command line."""


class InvalidFlagError(ValueError):
    """A command line flag was given a value it does not accept."""

    def __init__(self, name: str, value: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"Invalid value {value} for flag {name}")