"""Discovery and deletion of SQS queues."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from cloudnuke.resources import AwsResources, logger

_LIST_PAGE_SIZE = 10


@dataclass
class SqsQueue(AwsResources):
    """All SQS queues selected for deletion."""

    queue_urls: list[str] = field(default_factory=list)

    resource_name = "sqs"
    # Tentative batch size chosen so that AWS does not throttle.
    max_batch_size = 200

    @property
    def resource_identifiers(self) -> list[str]:
        return self.queue_urls

    def nuke(self, session: Any, identifiers: list[str]) -> None:
        nuke_all_sqs_queues(session, identifiers)


def _queue_urls(client: Any) -> Iterator[str]:
    request: dict[str, Any] = {"MaxResults": _LIST_PAGE_SIZE}
    while True:
        page = client.list_queues(**request)
        yield from page.get("QueueUrls", [])
        token = page.get("NextToken")
        if not token:
            return
        request["NextToken"] = token


def get_all_sqs_queues(session: Any, region: str, exclude_after: datetime) -> list[str]:
    """Return the URLs of queues created before exclude_after."""
    client = session.client("sqs")
    queues = list(_queue_urls(client))
    cutoff = int(exclude_after.timestamp())

    urls = []
    for queue_url in queues:
        attributes = client.get_queue_attributes(
            QueueUrl=queue_url, AttributeNames=["CreatedTimestamp"]
        )
        created_at = int(attributes["Attributes"]["CreatedTimestamp"])
        if cutoff > created_at:
            urls.append(queue_url)
    return urls


def nuke_all_sqs_queues(session: Any, urls: list[str]) -> list[str]:
    """Delete each queue, logging failures; return the URLs that were deleted."""
    region = session.region_name
    if not urls:
        logger.info("No SQS Queues to nuke in region %s", region)
        return []

    client = session.client("sqs")
    logger.info("Deleting all SQS Queues in region %s", region)
    deleted = []
    for url in urls:
        try:
            client.delete_queue(QueueUrl=url)
        except Exception as exc:
            logger.error("[Failed] %s", exc)
            continue
        deleted.append(url)
        logger.info("Deleted SQS Queue: %s", url)

    logger.info("[OK] %d SQS Queue(s) deleted in %s", len(deleted), region)
    return deleted