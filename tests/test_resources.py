import pytest

from cloudnuke.resources import (
    AwsAccountResources,
    AwsRegionResource,
    AwsResources,
    aws_error_code,
)


class FakeResources(AwsResources):
    resource_name = "fake"

    def __init__(self, ids):
        self.ids = ids
        self.nuked = []

    @property
    def resource_identifiers(self):
        return self.ids

    def nuke(self, session, identifiers):
        self.nuked.extend(identifiers)


class ClientErrorLike(Exception):
    def __init__(self, code):
        super().__init__(code)
        self.response = {"Error": {"Code": code, "Message": "boom"}}


class CodedError(Exception):
    def __init__(self, code):
        super().__init__(code)
        self.code = code


def test_base_cannot_be_instantiated():
    with pytest.raises(TypeError):
        AwsResources()


def test_region_resources_nuke_their_identifiers():
    region = AwsRegionResource([FakeResources(["a", "b"]), FakeResources(["c"])])
    for resources in region.resources:
        resources.nuke(object(), resources.resource_identifiers)
    assert [resources.nuked for resources in region.resources] == [["a", "b"], ["c"]]


def test_account_resources_group_by_region():
    fake = FakeResources(["x"])
    account = AwsAccountResources({"eu-west-1": AwsRegionResource([fake])})
    assert account.resources["eu-west-1"].resources[0].resource_identifiers == ["x"]
    assert AwsAccountResources().resources == {}


def test_aws_error_code_from_response():
    assert aws_error_code(ClientErrorLike("NoSuchTagSet")) == "NoSuchTagSet"


def test_aws_error_code_from_attribute():
    assert aws_error_code(CodedError("InvalidAction")) == "InvalidAction"


def test_aws_error_code_missing():
    assert aws_error_code(RuntimeError("plain")) is None