import re

import pytest

from cloudnuke.config import (
    Config,
    ConfigError,
    Expression,
    get_config,
    load_config,
    should_include,
)


def write(tmp_path, text, name="config.yaml"):
    path = tmp_path / name
    path.write_text(text)
    return path


def test_garbage_is_empty(tmp_path):
    path = write(tmp_path, "foo:\n  bar: baz\nsomething:\n  - 1\n  - 2\n")
    assert get_config(path) == Config()


@pytest.mark.parametrize(
    "text",
    [
        "s3:\n  include:\n    names_regex: not-a-list\n",
        "s3:\n  - a\n  - b\n",
        "just a string\n",
        "s3:\n  include:\n    names_regex:\n      - '('\n",
        "s3: [unclosed\n",
    ],
)
def test_malformed_raises(tmp_path, text):
    with pytest.raises(ConfigError):
        get_config(write(tmp_path, text))


def test_empty_file(tmp_path):
    assert get_config(write(tmp_path, "")) == Config()


@pytest.mark.parametrize(
    "key",
    ["s3", "IAMUsers", "SecretsManager"],
)
def test_empty_sections(tmp_path, key):
    assert get_config(write(tmp_path, f"{key}:\n")) == Config()
    assert get_config(write(tmp_path, f"{key}:\n  include:\n  exclude:\n")) == Config()
    text = f"{key}:\n  include:\n    names_regex:\n  exclude:\n    names_regex: []\n"
    assert get_config(write(tmp_path, text)) == Config()


def test_s3_include_names(tmp_path):
    text = "s3:\n  include:\n    names_regex:\n      - ^alb-.*-access-logs$\n      - .*-prod-alb-.*\n"
    config = get_config(write(tmp_path, text))
    assert config != Config()
    assert len(config.s3.include_rule.names_regexp) == 2
    assert config.s3.exclude_rule.names_regexp == []


def test_s3_exclude_names(tmp_path):
    text = "s3:\n  exclude:\n    names_regex:\n      - public\n"
    config = get_config(write(tmp_path, text))
    assert config != Config()
    assert [e.regex.pattern for e in config.s3.exclude_rule.names_regexp] == ["public"]


def test_s3_filter_names(tmp_path):
    text = (
        "s3:\n  include:\n    names_regex:\n      - ^alb-\n"
        "  exclude:\n    names_regex:\n      - public\n"
    )
    config = get_config(write(tmp_path, text))
    assert len(config.s3.include_rule.names_regexp) == 1
    assert len(config.s3.exclude_rule.names_regexp) == 1


def test_iam_users_filter_names(tmp_path):
    text = (
        "IAMUsers:\n  include:\n    names_regex:\n      - ^alb-\n"
        "  exclude:\n    names_regex:\n      - public\n"
    )
    config = get_config(write(tmp_path, text))
    assert len(config.iam_users.include_rule.names_regexp) == 1
    assert len(config.iam_users.exclude_rule.names_regexp) == 1
    assert config.s3.include_rule.names_regexp == []


def test_secrets_manager_filter_names(tmp_path):
    text = (
        "SecretsManager:\n  include:\n    names_regex:\n      - ^my-\n"
        "  exclude:\n    names_regex:\n      - keep\n"
    )
    config = get_config(write(tmp_path, text))
    assert len(config.secrets_manager_secrets.include_rule.names_regexp) == 1
    assert len(config.secrets_manager_secrets.exclude_rule.names_regexp) == 1


def test_other_sections_are_read():
    config = load_config("NatGateway:\n  include:\n    names_regex: [nat]\nAccessAnalyzer:\n  exclude:\n    names_regex: [aa]\n")
    assert config.nat_gateway.include_rule.names_regexp[0].matches("my-nat-1")
    assert config.access_analyzer.exclude_rule.names_regexp[0].matches("aa")


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        get_config(tmp_path / "absent.yaml")


def test_should_include_allow_when_empty():
    assert should_include("test-open-vpn", [], []) is True
    assert should_include("test-open-vpn", None, None) is True


def test_should_include_exclude_when_matches():
    exclude = [Expression(re.compile(r"test.*"))]
    assert should_include("test-openvpn-123", [], exclude) is False
    assert should_include("tf-state-bucket", [], exclude) is True


def test_should_include_include_when_matches():
    include = [Expression(re.compile(r".*openvpn.*"))]
    assert should_include("test-openvpn-123", include, []) is True
    assert should_include("test-vpc-123", include, []) is False


def test_should_include_matches_include_and_exclude():
    include = [Expression(re.compile(r"test.*"))]
    exclude = [Expression(re.compile(r".*openvpn.*"))]
    assert should_include("test-eks-cluster-123", include, exclude) is True
    assert should_include("test-openvpn-123", include, exclude) is False
    assert should_include("terraform-tf-state", include, exclude) is False


def test_expression_matches_anywhere():
    expression = Expression.compile("vpn")
    assert expression.matches("my-vpn-box")
    assert not expression.matches("my-box")


def test_expression_compile_rejects_invalid():
    with pytest.raises(ConfigError):
        Expression.compile("[")