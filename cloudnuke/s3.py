"""Discovery and deletion of S3 buckets, including all their objects."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from cloudnuke.config import Config, should_include
from cloudnuke.resources import (
    AWS_RESOURCE_EXCLUSION_TAG_KEY,
    AwsResources,
    aws_error_code,
    logger,
)

ClientFactory = Callable[[str], Any]

_MAX_OBJECT_BATCH_SIZE = 1000
_VERIFY_DELETION_RETRIES = 3


class S3DeletionError(Exception):
    """One or more buckets could not be deleted."""

    def __init__(self, errors: list[BaseException], deleted_count: int) -> None:
        self.errors = errors
        self.deleted_count = deleted_count
        details = "; ".join(str(error) for error in errors)
        super().__init__(f"{len(errors)} error(s) occurred: {details}")


@dataclass
class S3Bucket:
    """What was learned about one bucket while deciding whether to nuke it."""

    name: str
    creation_date: datetime | None = None
    region: str = ""
    tags: list[dict[str, str]] = field(default_factory=list)
    error: BaseException | None = None
    is_valid: bool = False
    invalid_reason: str = ""


@dataclass
class S3Buckets(AwsResources):
    """All S3 buckets selected for deletion."""

    names: list[str] = field(default_factory=list)

    resource_name = "s3"
    # Tentative batch sizes chosen so that AWS does not throttle.
    max_batch_size = 500
    max_concurrent_get_size = 100
    object_max_batch_size = _MAX_OBJECT_BATCH_SIZE

    @property
    def resource_identifiers(self) -> list[str]:
        return self.names

    def nuke(self, session: Any, identifiers: list[str]) -> None:
        error: S3DeletionError | None = None
        try:
            deleted = nuke_all_s3_buckets(session, identifiers, self.object_max_batch_size)
        except S3DeletionError as exc:
            error = exc
            deleted = exc.deleted_count

        total = len(identifiers)
        region = session.region_name
        if deleted > 0:
            logger.info("[OK] - %d/%d - S3 bucket(s) deleted in %s", deleted, total, region)
        if deleted != total:
            logger.error(
                "[Failed] - %d/%d - S3 bucket(s) failed deletion in %s",
                total - deleted,
                total,
                region,
            )
        if error is not None:
            raise error


def _aware(moment: datetime) -> datetime:
    """Treat a naive datetime as local time so it compares with AWS timestamps."""
    return moment if moment.tzinfo is not None else moment.astimezone()


def get_s3_bucket_region(client: Any, bucket_name: str) -> str:
    """Return the region a bucket lives in."""
    result = client.get_bucket_location(Bucket=bucket_name)
    # The location constraint is empty for us-east-1.
    return result.get("LocationConstraint") or "us-east-1"


def get_s3_bucket_tags(client: Any, bucket_name: str) -> list[dict[str, str]]:
    """Return the tags of a bucket; the client must be in the bucket's region."""
    try:
        result = client.get_bucket_tagging(Bucket=bucket_name)
    except Exception as exc:
        if aws_error_code(exc) == "NoSuchTagSet":
            return []
        raise
    return [{"Key": tag["Key"], "Value": tag["Value"]} for tag in result.get("TagSet", [])]


def has_valid_tags(bucket_tags: Iterable[dict[str, str]]) -> bool:
    """False if the bucket carries the exclusion tag set to true."""
    return not any(
        tag.get("Key", "").lower() == AWS_RESOURCE_EXCLUSION_TAG_KEY
        and tag.get("Value", "").lower() == "true"
        for tag in bucket_tags
    )


def get_region_clients(regions: Iterable[str], client_factory: ClientFactory) -> dict[str, Any]:
    """Create one S3 client per target region."""
    clients = {}
    for region in regions:
        logger.debug("S3 - creating session - region %s", region)
        clients[region] = client_factory(region)
    return clients


def get_all_s3_buckets(
    session: Any,
    exclude_after: datetime,
    target_regions: Iterable[str],
    bucket_name_substr: str,
    batch_size: int,
    config_obj: Config,
    client_factory: ClientFactory | None = None,
) -> dict[str, list[str]]:
    """Return, per region, the names of buckets created before exclude_after."""
    if batch_size <= 0:
        raise ValueError(f"Invalid batchsize - {batch_size} - should be > 0")

    client = session.client("s3")
    buckets = client.list_buckets().get("Buckets", [])

    if client_factory is None:
        def client_factory(region: str) -> Any:
            return session.client("s3", region_name=region)

    region_clients = get_region_clients(target_regions, client_factory)

    names_per_region: dict[str, list[str]] = {}
    if not buckets:
        return names_per_region

    total = len(buckets)
    total_batches = math.ceil(total / batch_size)
    for batch_number, start in enumerate(range(0, total, batch_size), start=1):
        end = min(start + batch_size, total)
        logger.info(
            "Getting - %d-%d buckets of batch %d/%d", start + 1, end, batch_number, total_batches
        )
        batch_result = get_bucket_names_per_region(
            client,
            buckets[start:end],
            exclude_after,
            region_clients,
            bucket_name_substr,
            config_obj,
        )
        for region, names in batch_result.items():
            names_per_region.setdefault(region, []).extend(names)
    return names_per_region


def get_bucket_names_per_region(
    client: Any,
    target_buckets: Iterable[dict[str, Any]],
    exclude_after: datetime,
    region_clients: dict[str, Any],
    bucket_name_substr: str,
    config_obj: Config,
) -> dict[str, list[str]]:
    """Inspect the given buckets concurrently and group the valid ones by region."""
    candidates = []
    for bucket in target_buckets:
        name = bucket["Name"]
        if bucket_name_substr and bucket_name_substr not in name:
            logger.debug(
                "Skipping - Bucket %s - failed substring filter - %s", name, bucket_name_substr
            )
            continue
        candidates.append(bucket)

    names_per_region: dict[str, list[str]] = {}
    if not candidates:
        return names_per_region

    with ThreadPoolExecutor(max_workers=len(candidates)) as pool:
        futures = [
            pool.submit(
                get_bucket_info, client, bucket, exclude_after, region_clients, config_obj
            )
            for bucket in candidates
        ]
        # Report results as they arrive so skip messages show up promptly.
        for future in as_completed(futures):
            info = future.result()
            if info.error is not None:
                logger.warning(
                    "Skipping - Bucket %s - region - %s - error: %s",
                    info.name,
                    info.region,
                    info.error,
                )
                continue
            if not info.is_valid:
                logger.debug(
                    "Skipping - Bucket %s - region - %s - %s",
                    info.name,
                    info.region,
                    info.invalid_reason,
                )
                continue
            names_per_region.setdefault(info.region, []).append(info.name)
    return names_per_region


def get_bucket_info(
    client: Any,
    bucket: dict[str, Any],
    exclude_after: datetime,
    region_clients: dict[str, Any],
    config_obj: Config,
) -> S3Bucket:
    """Decide whether a bucket should be nuked, recording why not if it should not."""
    info = S3Bucket(name=bucket["Name"], creation_date=bucket.get("CreationDate"))

    try:
        info.region = get_s3_bucket_region(client, info.name)
    except Exception as exc:
        info.error = exc
        return info

    if info.region not in region_clients:
        info.invalid_reason = "Not in target region"
        return info

    try:
        info.tags = get_s3_bucket_tags(region_clients[info.region], info.name)
    except Exception as exc:
        info.error = exc
        return info
    if not has_valid_tags(info.tags):
        info.invalid_reason = "Matched tag filter"
        return info

    if info.creation_date is None or not _aware(exclude_after) > _aware(info.creation_date):
        info.invalid_reason = "Matched CreationDate filter"
        return info

    rules = config_obj.s3
    if not should_include(
        info.name, rules.include_rule.names_regexp, rules.exclude_rule.names_regexp
    ):
        info.invalid_reason = "Filtered by config file rules"
        return info

    info.is_valid = True
    return info


def _object_version_pages(client: Any, bucket_name: str, batch_size: int) -> Iterator[dict]:
    request: dict[str, Any] = {"Bucket": bucket_name, "MaxKeys": batch_size}
    while True:
        page = client.list_object_versions(**request)
        yield page
        if not page.get("IsTruncated"):
            return
        request["KeyMarker"] = page.get("NextKeyMarker")
        request["VersionIdMarker"] = page.get("NextVersionIdMarker")


def _object_pages(client: Any, bucket_name: str, batch_size: int) -> Iterator[dict]:
    request: dict[str, Any] = {"Bucket": bucket_name, "MaxKeys": batch_size}
    while True:
        page = client.list_objects_v2(**request)
        yield page
        if not page.get("IsTruncated"):
            return
        request["ContinuationToken"] = page.get("NextContinuationToken")


def empty_bucket(client: Any, bucket_name: str, is_versioned: bool, batch_size: int) -> None:
    """Delete every object, and for versioned buckets every version and deletion marker."""
    if is_versioned:
        for page_id, page in enumerate(
            _object_version_pages(client, bucket_name, batch_size), start=1
        ):
            versions = page.get("Versions", [])
            logger.debug(
                "Deleting page %d of object versions (%d objects) from bucket %s",
                page_id,
                len(versions),
                bucket_name,
            )
            try:
                delete_object_versions(client, bucket_name, versions)
            except Exception as exc:
                logger.error(
                    "Error deleting objects versions for page %d from bucket %s: %s",
                    page_id,
                    bucket_name,
                    exc,
                )
                raise
            logger.info(
                "[OK] - deleted page %d of object versions (%d objects) from bucket %s",
                page_id,
                len(versions),
                bucket_name,
            )

            markers = page.get("DeleteMarkers", [])
            logger.debug(
                "Deleting page %d of deletion markers (%d deletion markers) from bucket %s",
                page_id,
                len(markers),
                bucket_name,
            )
            try:
                delete_deletion_markers(client, bucket_name, markers)
            except Exception as exc:
                logger.error(
                    "Error deleting deletion markers for page %d from bucket %s: %s",
                    page_id,
                    bucket_name,
                    exc,
                )
                raise
            logger.info(
                "[OK] - deleted page %d of deletion markers (%d deletion markers) from bucket %s",
                page_id,
                len(markers),
                bucket_name,
            )
        return

    for page_id, page in enumerate(_object_pages(client, bucket_name, batch_size), start=1):
        contents = page.get("Contents", [])
        logger.debug(
            "Deleting object page %d (%d objects) from bucket %s",
            page_id,
            len(contents),
            bucket_name,
        )
        try:
            delete_objects(client, bucket_name, contents)
        except Exception as exc:
            logger.error(
                "Error deleting objects for page %d from bucket %s: %s", page_id, bucket_name, exc
            )
            raise
        logger.debug(
            "[OK] - deleted object page %d (%d objects) from bucket %s",
            page_id,
            len(contents),
            bucket_name,
        )


def _delete_identifiers(client: Any, bucket_name: str, identifiers: list[dict[str, str]]) -> None:
    client.delete_objects(
        Bucket=bucket_name,
        Delete={"Objects": identifiers, "Quiet": False},
    )


def delete_objects(client: Any, bucket_name: str, objects: list[dict[str, Any]]) -> None:
    """Delete unversioned objects from a bucket."""
    if not objects:
        logger.debug("No objects returned in page")
        return
    _delete_identifiers(client, bucket_name, [{"Key": obj["Key"]} for obj in objects])


def delete_object_versions(
    client: Any, bucket_name: str, object_versions: list[dict[str, Any]]
) -> None:
    """Delete specific object versions from a bucket."""
    if not object_versions:
        logger.debug("No object versions returned in page")
        return
    _delete_identifiers(
        client,
        bucket_name,
        [{"Key": obj["Key"], "VersionId": obj["VersionId"]} for obj in object_versions],
    )


def delete_deletion_markers(
    client: Any, bucket_name: str, deletion_markers: list[dict[str, Any]]
) -> None:
    """Delete deletion markers from a bucket."""
    if not deletion_markers:
        logger.debug("No deletion markers returned in page")
        return
    _delete_identifiers(
        client,
        bucket_name,
        [{"Key": obj["Key"], "VersionId": obj["VersionId"]} for obj in deletion_markers],
    )


def nuke_all_s3_bucket_objects(client: Any, bucket_name: str, batch_size: int) -> None:
    """Empty a bucket in pages of batch_size objects (between 1 and 1000)."""
    versioning = client.get_bucket_versioning(Bucket=bucket_name)
    is_versioned = versioning.get("Status") == "Enabled"

    if not 1 <= batch_size <= _MAX_OBJECT_BATCH_SIZE:
        raise ValueError(
            f"Invalid batchsize - {batch_size} - should be between 1 and {_MAX_OBJECT_BATCH_SIZE}"
        )

    logger.info("Emptying bucket %s", bucket_name)
    empty_bucket(client, bucket_name, is_versioned, batch_size)
    logger.info("[OK] - successfully emptied bucket %s", bucket_name)


def nuke_empty_s3_bucket(client: Any, bucket_name: str, verify_bucket_deletion: bool) -> None:
    """Delete an empty bucket, optionally waiting until the deletion has propagated."""
    client.delete_bucket(Bucket=bucket_name)
    if not verify_bucket_deletion:
        return

    # A single wait may not be long enough for S3, so it is retried a few times.
    last_error: BaseException | None = None
    for attempt in range(1, _VERIFY_DELETION_RETRIES + 1):
        logger.info(
            "Waiting until bucket (%s) deletion is propagated (attempt %d / %d)",
            bucket_name,
            attempt,
            _VERIFY_DELETION_RETRIES,
        )
        try:
            client.get_waiter("bucket_not_exists").wait(Bucket=bucket_name)
        except Exception as exc:
            last_error = exc
            logger.warning(
                "Error waiting for bucket (%s) deletion propagation (attempt %d / %d)",
                bucket_name,
                attempt,
                _VERIFY_DELETION_RETRIES,
            )
            logger.warning("Underlying error was: %s", exc)
            continue
        logger.info("Successfully detected bucket deletion.")
        return
    assert last_error is not None
    raise last_error


def nuke_all_s3_buckets(session: Any, bucket_names: list[str], object_batch_size: int) -> int:
    """Empty and delete each bucket; return how many were deleted.

    Raises S3DeletionError, carrying the deleted count, if any bucket failed.
    """
    region = session.region_name
    if not bucket_names:
        logger.info("No S3 Buckets to nuke in region %s", region)
        return 0

    client = session.client("s3")
    total = len(bucket_names)
    logger.info("Deleting - %d S3 Buckets in region %s", total, region)

    errors: list[BaseException] = []
    deleted = 0
    for position, bucket_name in enumerate(bucket_names, start=1):
        logger.debug("Deleting - %d/%d - Bucket: %s", position, total, bucket_name)

        try:
            nuke_all_s3_bucket_objects(client, bucket_name, object_batch_size)
        except Exception as exc:
            logger.error(
                "[Failed] - %d/%d - Bucket: %s - object deletion error - %s",
                position,
                total,
                bucket_name,
                exc,
            )
            errors.append(exc)
            continue

        try:
            nuke_empty_s3_bucket(client, bucket_name, True)
        except Exception as exc:
            logger.error(
                "[Failed] - %d/%d - Bucket: %s - bucket deletion error - %s",
                position,
                total,
                bucket_name,
                exc,
            )
            errors.append(exc)
            continue

        logger.info("[OK] - %d/%d - Bucket: %s - deleted", position, total, bucket_name)
        deleted += 1

    if errors:
        raise S3DeletionError(errors, deleted)
    return deleted