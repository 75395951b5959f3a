# cloudnuke

`cloudnuke` is a library for finding AWS resources in an account and deleting
them. It is meant for cleaning up test and sandbox accounts, where resources
pile up and cost money long after anyone needs them.

**Deleting is destructive and cannot be undone.** Every nuke function removes
resources permanently.

## Sessions and clients

The package does not create AWS sessions or clients itself. Every
`get_all_*` and `nuke_*` function takes a `session` object that you supply. It
must provide:

- `session.client(service_name)` and `session.client(service_name, region_name=...)`,
  returning a client whose methods take and return the usual AWS request and
  response dictionaries (for example `list_buckets()`, `describe_snapshots(OwnerIds=[...])`);
- `session.region_name`, used in log messages.

Errors raised by clients are inspected with `cloudnuke.resources.aws_error_code`,
which reads the code from `error.response["Error"]["Code"]` or from an
`error.code` attribute.

## What it covers

| Resource type                   | Class                          | Module                      | Finder / deleter |
|---------------------------------|--------------------------------|-----------------------------|------------------|
| S3 buckets (with all objects)   | `S3Buckets`                    | `cloudnuke.s3`              | `get_all_s3_buckets` / `nuke_all_s3_buckets` |
| Secrets Manager secrets         | `SecretsManagerSecrets`        | `cloudnuke.secrets_manager` | `get_all_secrets_manager_secrets` / `nuke_all_secrets_manager_secrets` |
| EBS snapshots owned by you      | `Snapshots`                    | `cloudnuke.snapshot`        | `get_all_snapshots` / `nuke_all_snapshots` |
| SQS queues                      | `SqsQueue`                     | `cloudnuke.sqs`             | `get_all_sqs_queues` / `nuke_all_sqs_queues` |
| Transit gateways                | `TransitGateways`              | `cloudnuke.transit_gateway` | `get_all_transit_gateway_instances` / `nuke_all_transit_gateway_instances` |
| Transit gateway route tables    | `TransitGatewaysRouteTables`   | `cloudnuke.transit_gateway` | `get_all_transit_gateway_route_tables` / `nuke_all_transit_gateway_route_tables` |
| Transit gateway VPC attachments | `TransitGatewaysVpcAttachment` | `cloudnuke.transit_gateway` | `get_all_transit_gateway_vpc_attachments` / `nuke_all_transit_gateway_vpc_attachments` |

Each resource class follows the `AwsResources` interface from
`cloudnuke.resources`: a `resource_name` (`"s3"`, `"secretsmanager"`, `"snap"`,
`"sqs"`, `"transit-gateway"`, ...), the `resource_identifiers` it holds, a
`max_batch_size`, and a `nuke(session, identifiers)` method. Resource
collections can be grouped per region in `AwsRegionResource` and per account in
`AwsAccountResources`.

```python
from datetime import datetime, timedelta
from cloudnuke.snapshot import Snapshots, get_all_snapshots

cutoff = datetime.now() - timedelta(hours=8)
ids = get_all_snapshots(session, session.region_name, cutoff)
Snapshots(snapshot_ids=ids).nuke(session, ids)
```

### How failures are reported

- Snapshots, SQS queues and transit gateway resources: each failed deletion is
  logged and skipped; the `nuke_all_*` function returns the identifiers that
  were deleted.
- Secrets Manager: secrets are deleted concurrently with
  `ForceDeleteWithoutRecovery`; if any deletion fails,
  `SecretsManagerDeletionError` is raised, carrying the list of errors.
- S3: each bucket is emptied (all objects; for versioned buckets all versions and
  deletion markers) in pages of the object batch size, which must be between 1
  and 1000, then deleted. The function waits for the deletion to be visible,
  trying the wait up to three times. `nuke_all_s3_buckets` returns the number
  of buckets deleted, or raises `S3DeletionError` carrying the errors and the
  `deleted_count`.
- Deleting transit gateway VPC attachments ends with a 180 second pause, since
  there is nothing to wait on for them.
- `tg_is_available_in_region` returns `False` when the region answers with
  `InvalidAction`.

## Filters

Resources are only selected when they pass every filter that applies:

- **Age.** Only resources created before the cut-off time are picked. Secrets
  use their last access time, or their creation time if never accessed.
  Naive datetimes are taken as local time.
  `cloudnuke.commands.parse_duration_param("8h")` gives the moment that lies a
  duration such as `10m`, `8h`, `1h30m` or `1.5h` before now;
  `cloudnuke.commands.parse_duration` returns the duration itself as a
  `timedelta`, and raises `ValueError` for text it cannot read (including the
  empty string).
- **Exclusion tag.** S3 buckets tagged `cloud-nuke-excluded` with the value
  `true` (compared without regard to case) are never selected
  (`cloudnuke.s3.has_valid_tags`).
- **Region.** `get_all_s3_buckets` only selects buckets in the target regions
  it is given, and can further filter on a substring of the bucket name.
- **Name rules.** A YAML file may list regular expressions that include or
  exclude S3 buckets and Secrets Manager secrets by name.

## Name rules

A config file looks like this:

```yaml
s3:
  include:
    names_regex:
      - ^alb-.*-access-logs$
      - .*-prod-alb-.*
  exclude:
    names_regex:
      - public

SecretsManager:
  exclude:
    names_regex:
      - ^keep-
```

The sections read are `s3`, `IAMUsers`, `SecretsManager`, `NatGateway` and
`AccessAnalyzer`, held in `Config` as `s3`, `iam_users`,
`secrets_manager_secrets`, `nat_gateway` and `access_analyzer`. Other keys are
ignored. Missing sections and empty lists mean "no rule". Load a file with
`get_config`, or a YAML string with `load_config`:

```python
from cloudnuke.config import get_config, should_include

config = get_config("nuke-rules.yaml")
rules = config.s3
should_include(
    "alb-123-access-logs",
    rules.include_rule.names_regexp,
    rules.exclude_rule.names_regexp,
)
```

An expression matches when it is found anywhere in the name. `should_include`
decides as follows:

1. No include and no exclude rules: the name is included.
2. Any exclude rule matches: the name is excluded.
3. No include rules: the name is included.
4. Otherwise the name is included only if an include rule matches.

A pattern that does not compile, or YAML of the wrong shape, raises
`ConfigError` when the config is loaded.

## Confirmation

`cloudnuke.commands.confirmation_prompt(prompt, max_prompts)` prints a warning
in bold red and asks for the word `nuke` (any case). Any other answer is
refused with a message, and after `max_prompts` refusals it returns `False`.

## Other helpers

- `cloudnuke.util.unique_id()` returns a random six-character base-62 id.
- `cloudnuke.errors.InvalidFlagError(name, value)` is a `ValueError` for a flag
  given a value it does not accept.
- All log messages go to the standard `logging` logger named `cloud-nuke`.

## What the package does not do

- There is no command line program: nothing to run from a shell, no
  `--region` or `--resource-type` options. Only the building blocks above are
  provided.
- It does not discover enabled regions, and it has no registry that runs every
  resource type across regions; you call each finder and deleter yourself.
- It does not cover other resource types (EC2 instances, volumes, load
  balancers, default VPCs and security groups, and so on).

## Running the tests

Install the `test` extra and run `pytest` from the project directory.