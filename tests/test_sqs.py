import time
from datetime import datetime, timedelta

import pytest

from cloudnuke.sqs import SqsQueue, get_all_sqs_queues, nuke_all_sqs_queues


class FakeSqsClient:
    def __init__(self, failing=()):
        self.queues = {}
        self.failing = set(failing)
        self.list_calls = []

    def create_queue(self, name, created=None):
        url = f"https://sqs.us-east-1.example.com/000000000000/{name}"
        stamp = created if created is not None else int(time.time())
        self.queues[url] = str(stamp)
        return url

    def list_queues(self, MaxResults, NextToken=None):
        self.list_calls.append((MaxResults, NextToken))
        urls = list(self.queues)
        start = int(NextToken or 0)
        end = start + MaxResults
        page = {"QueueUrls": urls[start:end]}
        if end < len(urls):
            page["NextToken"] = str(end)
        return page

    def get_queue_attributes(self, QueueUrl, AttributeNames):
        assert AttributeNames == ["CreatedTimestamp"]
        return {"Attributes": {"CreatedTimestamp": self.queues[QueueUrl]}}

    def delete_queue(self, QueueUrl):
        if QueueUrl in self.failing:
            raise RuntimeError(f"cannot delete {QueueUrl}")
        del self.queues[QueueUrl]


class FakeSession:
    region_name = "us-east-1"

    def __init__(self, client):
        self._client = client

    def client(self, name):
        assert name == "sqs"
        return self._client


def test_list_sqs_queues_with_pagination():
    client = FakeSqsClient()
    queue_list = [client.create_queue(f"cloud-nuke-test-{n}") for n in range(20)]
    session = FakeSession(client)

    one_hour_ago = datetime.now() - timedelta(hours=1)
    one_hour_from_now = datetime.now() + timedelta(hours=1)

    urls = get_all_sqs_queues(session, "us-east-1", one_hour_ago)
    for queue in queue_list:
        assert queue not in urls

    urls = get_all_sqs_queues(session, "us-east-1", one_hour_from_now)
    for queue in queue_list:
        assert queue in urls
    assert len(client.list_calls) >= 2
    assert all(max_results == 10 for max_results, _ in client.list_calls)


def test_nuke_sqs_queue():
    client = FakeSqsClient()
    session = FakeSession(client)
    queue_url = client.create_queue("cloud-nuke-test-abc")
    one_hour_from_now = datetime.now() + timedelta(hours=1)

    assert queue_url in get_all_sqs_queues(session, "us-east-1", one_hour_from_now)
    assert nuke_all_sqs_queues(session, [queue_url]) == [queue_url]
    assert queue_url not in get_all_sqs_queues(session, "us-east-1", one_hour_from_now)


def test_nuke_sqs_skips_failures():
    client = FakeSqsClient()
    good = client.create_queue("good")
    bad = client.create_queue("bad")
    client.failing.add(bad)
    assert nuke_all_sqs_queues(FakeSession(client), [bad, good]) == [good]
    assert list(client.queues) == [bad]


def test_nuke_no_queues_returns_empty():
    assert nuke_all_sqs_queues(FakeSession(FakeSqsClient()), []) == []


def test_invalid_timestamp_raises():
    client = FakeSqsClient()
    url = client.create_queue("broken")
    client.queues[url] = "not-a-number"
    with pytest.raises(ValueError):
        get_all_sqs_queues(FakeSession(client), "us-east-1", datetime.now())


def test_sqs_queue_resource():
    client = FakeSqsClient()
    url = client.create_queue("q")
    resource = SqsQueue(queue_urls=[url])
    assert resource.resource_name == "sqs"
    assert resource.max_batch_size == 200
    assert resource.resource_identifiers == [url]
    resource.nuke(FakeSession(client), resource.resource_identifiers)
    assert client.queues == {}