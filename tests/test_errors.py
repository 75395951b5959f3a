from cloudnuke.errors import InvalidFlagError


def test_message_names_flag_and_value():
    error = InvalidFlagError("older-than", "abc")
    assert str(error) == "Invalid value abc for flag older-than"


def test_attributes_kept():
    error = InvalidFlagError("region", "mars-1")
    assert (error.name, error.value) == ("region", "mars-1")


def test_is_value_error():
    error = InvalidFlagError("region", "x")
    assert isinstance(error, ValueError)
    assert error.args and str(error) == "Invalid value x for flag region"
    assert error.name == "region"