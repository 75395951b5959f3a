"""Discovery and deletion of EBS snapshots owned by the account."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from cloudnuke.resources import AwsResources, logger


@dataclass
class Snapshots(AwsResources):
    """All user owned snapshots selected for deletion."""

    snapshot_ids: list[str] = field(default_factory=list)

    resource_name = "snap"
    # Tentative batch size chosen so that AWS does not throttle.
    max_batch_size = 200

    @property
    def resource_identifiers(self) -> list[str]:
        return self.snapshot_ids

    def nuke(self, session: Any, identifiers: list[str]) -> None:
        nuke_all_snapshots(session, identifiers)


def _aware(moment: datetime) -> datetime:
    """Treat a naive datetime as local time so it compares with AWS timestamps."""
    return moment if moment.tzinfo is not None else moment.astimezone()


def get_all_snapshots(session: Any, region: str, exclude_after: datetime) -> list[str]:
    """Return the ids of owned snapshots started before exclude_after."""
    client = session.client("ec2")
    output = client.describe_snapshots(OwnerIds=["self"])
    cutoff = _aware(exclude_after)
    return [
        snapshot["SnapshotId"]
        for snapshot in output.get("Snapshots", [])
        if cutoff > _aware(snapshot["StartTime"])
    ]


def nuke_all_snapshots(session: Any, snapshot_ids: list[str]) -> list[str]:
    """Delete each snapshot, logging failures; return the ids that were deleted."""
    region = session.region_name
    if not snapshot_ids:
        logger.info("No Snapshots to nuke in region %s", region)
        return []

    client = session.client("ec2")
    logger.info("Deleting all Snapshots in region %s", region)
    deleted = []
    for snapshot_id in snapshot_ids:
        try:
            client.delete_snapshot(SnapshotId=snapshot_id)
        except Exception as exc:
            logger.error("[Failed] %s", exc)
            continue
        deleted.append(snapshot_id)
        logger.info("Deleted Snapshot: %s", snapshot_id)

    logger.info("[OK] %d Snapshot(s) terminated in %s", len(deleted), region)
    return deleted