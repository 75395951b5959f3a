"""Discovery and deletion of Secrets Manager secrets."""

from __future__ import annotations

from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from cloudnuke.config import Config, should_include
from cloudnuke.resources import AwsResources, logger


class SecretsManagerDeletionError(Exception):
    """One or more secrets could not be deleted."""

    def __init__(self, errors: list[BaseException]) -> None:
        self.errors = errors
        details = "; ".join(str(error) for error in errors)
        super().__init__(f"{len(errors)} error(s) occurred: {details}")


@dataclass
class SecretsManagerSecrets(AwsResources):
    """All Secrets Manager secrets selected for deletion."""

    secret_ids: list[str] = field(default_factory=list)

    resource_name = "secretsmanager"
    # There is no bulk delete, so this many secrets are deleted in parallel;
    # kept small to avoid AWS throttling.
    max_batch_size = 10

    @property
    def resource_identifiers(self) -> list[str]:
        return self.secret_ids

    def nuke(self, session: Any, identifiers: list[str]) -> None:
        nuke_all_secrets_manager_secrets(session, identifiers)


def _aware(moment: datetime) -> datetime:
    """Treat a naive datetime as local time so it compares with AWS timestamps."""
    return moment if moment.tzinfo is not None else moment.astimezone()


def _secret_pages(client: Any) -> Iterator[dict[str, Any]]:
    request: dict[str, Any] = {}
    while True:
        page = client.list_secrets(**request)
        yield page
        token = page.get("NextToken")
        if not token:
            return
        request["NextToken"] = token


def get_all_secrets_manager_secrets(
    session: Any, exclude_after: datetime, config_obj: Config
) -> list[str]:
    """Return the ARNs of secrets last used (or created) before exclude_after."""
    client = session.client("secretsmanager")
    return [
        secret["ARN"]
        for page in _secret_pages(client)
        for secret in page.get("SecretList", [])
        if should_include_secret(secret, exclude_after, config_obj)
    ]


def should_include_secret(
    secret: dict[str, Any] | None, exclude_after: datetime, config_obj: Config
) -> bool:
    """Decide whether a secret passes the time filter and the config rules."""
    if secret is None:
        return False

    # The last access time is the reference; a secret never accessed uses its creation time.
    reference = secret.get("LastAccessedDate")
    if reference is None:
        reference = secret["CreatedDate"]
    if _aware(exclude_after) < _aware(reference):
        return False

    rules = config_obj.secrets_manager_secrets
    return should_include(
        secret.get("Name", ""),
        rules.include_rule.names_regexp,
        rules.exclude_rule.names_regexp,
    )


def _delete_secret(client: Any, secret_id: str) -> BaseException | None:
    try:
        client.delete_secret(SecretId=secret_id, ForceDeleteWithoutRecovery=True)
    except Exception as exc:
        return exc
    return None


def nuke_all_secrets_manager_secrets(session: Any, identifiers: list[str]) -> None:
    """Delete the given secrets concurrently; raise if any deletion failed."""
    region = session.region_name
    if not identifiers:
        logger.info("No Secrets Manager Secrets to nuke in region %s", region)
        return

    client = session.client("secretsmanager")
    logger.info("Deleting Secrets Manager secrets in region %s", region)
    with ThreadPoolExecutor(max_workers=len(identifiers)) as pool:
        results = list(pool.map(lambda secret_id: _delete_secret(client, secret_id), identifiers))

    errors = [error for error in results if error is not None]
    for error in errors:
        logger.error("[Failed] %s", error)
    if errors:
        raise SecretsManagerDeletionError(errors)