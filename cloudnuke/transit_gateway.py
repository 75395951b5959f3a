"""Discovery and deletion of transit gateways, their route tables and VPC attachments."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from cloudnuke.resources import AwsResources, aws_error_code, logger

_GONE_STATES = frozenset({"deleted", "deleting"})
_ATTACHMENT_SETTLE_TIME = timedelta(seconds=180)


@dataclass
class TransitGatewaysVpcAttachment(AwsResources):
    """All transit gateway VPC attachments selected for deletion."""

    ids: list[str] = field(default_factory=list)

    resource_name = "transit-gateway-attachment"

    @property
    def resource_identifiers(self) -> list[str]:
        return self.ids

    def nuke(self, session: Any, identifiers: list[str]) -> None:
        nuke_all_transit_gateway_vpc_attachments(session, identifiers)


@dataclass
class TransitGatewaysRouteTables(AwsResources):
    """All transit gateway route tables selected for deletion."""

    ids: list[str] = field(default_factory=list)

    resource_name = "transit-gateway-route-table"

    @property
    def resource_identifiers(self) -> list[str]:
        return self.ids

    def nuke(self, session: Any, identifiers: list[str]) -> None:
        nuke_all_transit_gateway_route_tables(session, identifiers)


@dataclass
class TransitGateways(AwsResources):
    """All transit gateways selected for deletion."""

    ids: list[str] = field(default_factory=list)

    resource_name = "transit-gateway"

    @property
    def resource_identifiers(self) -> list[str]:
        return self.ids

    def nuke(self, session: Any, identifiers: list[str]) -> None:
        nuke_all_transit_gateway_instances(session, identifiers)


def _aware(moment: datetime) -> datetime:
    """Treat a naive datetime as local time so it compares with AWS timestamps."""
    return moment if moment.tzinfo is not None else moment.astimezone()


def sleep_with_message(duration: timedelta | float, message: str) -> None:
    """Log why we are waiting, then sleep for duration (a timedelta or seconds)."""
    seconds = duration.total_seconds() if isinstance(duration, timedelta) else float(duration)
    logger.info("Sleeping %ss: %s", seconds, message)
    time.sleep(seconds)


def _select(items: list[dict[str, Any]], id_key: str, exclude_after: datetime) -> list[str]:
    cutoff = _aware(exclude_after)
    return [
        item[id_key]
        for item in items
        if cutoff > _aware(item["CreationTime"]) and item.get("State") not in _GONE_STATES
    ]


def _delete_each(
    ids: list[str], delete: Any, label: str, region: str
) -> list[str]:
    deleted = []
    for resource_id in ids:
        try:
            delete(resource_id)
        except Exception as exc:
            logger.error("[Failed] %s", exc)
            continue
        deleted.append(resource_id)
        logger.info("Deleted %s: %s", label, resource_id)
    return deleted


def get_all_transit_gateway_instances(
    session: Any, region: str, exclude_after: datetime
) -> list[str]:
    """Return ids of live transit gateways created before exclude_after."""
    client = session.client("ec2")
    result = client.describe_transit_gateways()
    return _select(result.get("TransitGateways", []), "TransitGatewayId", exclude_after)


def nuke_all_transit_gateway_instances(session: Any, ids: list[str]) -> list[str]:
    """Delete each transit gateway, logging failures; return the ids deleted."""
    region = session.region_name
    if not ids:
        logger.info("No Transit Gateways to nuke in region %s", region)
        return []

    client = session.client("ec2")
    logger.info("Deleting all Transit Gateways in region %s", region)
    deleted = _delete_each(
        ids,
        lambda resource_id: client.delete_transit_gateway(TransitGatewayId=resource_id),
        "Transit Gateway",
        region,
    )
    logger.info("[OK] %d Transit Gateway(s) deleted in %s", len(deleted), region)
    return deleted


def get_all_transit_gateway_route_tables(
    session: Any, region: str, exclude_after: datetime
) -> list[str]:
    """Return ids of live, non-default route tables created before exclude_after."""
    client = session.client("ec2")
    # Default route tables go away together with their transit gateway.
    result = client.describe_transit_gateway_route_tables(
        Filters=[{"Name": "default-association-route-table", "Values": ["false"]}]
    )
    return _select(
        result.get("TransitGatewayRouteTables", []), "TransitGatewayRouteTableId", exclude_after
    )


def nuke_all_transit_gateway_route_tables(session: Any, ids: list[str]) -> list[str]:
    """Delete each route table, logging failures; return the ids deleted."""
    region = session.region_name
    if not ids:
        logger.info("No Transit Gateway Route Tables to nuke in region %s", region)
        return []

    client = session.client("ec2")
    logger.info("Deleting all Transit Gateway Route Tables in region %s", region)
    deleted = _delete_each(
        ids,
        lambda resource_id: client.delete_transit_gateway_route_table(
            TransitGatewayRouteTableId=resource_id
        ),
        "Transit Gateway Route Table",
        region,
    )
    logger.info("[OK] %d Transit Gateway Route Table(s) deleted in %s", len(deleted), region)
    return deleted


def get_all_transit_gateway_vpc_attachments(
    session: Any, region: str, exclude_after: datetime
) -> list[str]:
    """Return ids of live VPC attachments created before exclude_after."""
    client = session.client("ec2")
    result = client.describe_transit_gateway_vpc_attachments()
    return _select(
        result.get("TransitGatewayVpcAttachments", []),
        "TransitGatewayAttachmentId",
        exclude_after,
    )


def nuke_all_transit_gateway_vpc_attachments(session: Any, ids: list[str]) -> list[str]:
    """Delete each VPC attachment, then wait for the deletions to settle."""
    region = session.region_name
    if not ids:
        logger.info("No Transit Gateway Vpc Attachments to nuke in region %s", region)
        return []

    client = session.client("ec2")
    logger.info("Deleting all Transit Gateway Vpc Attachments in region %s", region)
    deleted = _delete_each(
        ids,
        lambda resource_id: client.delete_transit_gateway_vpc_attachment(
            TransitGatewayAttachmentId=resource_id
        ),
        "Transit Gateway Vpc Attachment",
        region,
    )

    sleep_with_message(
        _ATTACHMENT_SETTLE_TIME,
        "TransitGateway Vpc Attachments takes some time to create, "
        "and since there is no waiter available, we sleep instead.",
    )
    logger.info("[OK] %d Transit Gateway Vpc Attachment(s) deleted in %s", len(deleted), region)
    return deleted


def tg_is_available_in_region(session: Any, region: str) -> bool:
    """True if transit gateways are supported in the session's region."""
    client = session.client("ec2")
    try:
        client.describe_transit_gateways()
    except Exception as exc:
        if aws_error_code(exc) == "InvalidAction":
            return False
        raise
    return True