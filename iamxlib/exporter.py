"""
iamxlib.exporter — IAM user export pipeline.

Enumerates IAM users, then runs four independent sub-exports per user
(object, attached policies, inline policies, tags). Each sub-export is a
closed failure boundary: it returns a SubExportResult describing what was
written, what was empty and what failed, and never raises. The orchestrator
turns FAILED results into warning lines and moves on.

Imports from iamxlib.artifacts, iamxlib.aws_client, iamxlib.config and
iamxlib.directory. Zero dependency on utils.py.
"""

import json
import logging
import urllib.parse
from dataclasses import dataclass, field
from enum import Enum
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from iamxlib import artifacts
from iamxlib.aws_client import describe_aws_error
from iamxlib.config import ExportContext
from iamxlib.directory import ConfirmFn, ensure_directory, wipe_directory

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


class ExportCategory(Enum):
    OBJECT = "user object"
    ATTACHED_POLICIES = "attached policies"
    INLINE_POLICIES = "inline policies"
    INLINE_POLICY = "inline policy"
    TAGS = "tags"


class ExportStatus(Enum):
    WRITTEN = "written"
    EMPTY = "empty"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class SubExportResult:
    """Outcome of one sub-export (or one inline policy) for one user."""

    category: ExportCategory
    principal: str
    status: ExportStatus
    artifacts: List[Path] = field(default_factory=list)
    reason: Optional[str] = None
    policy_name: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status is ExportStatus.FAILED

    def describe_failure(self) -> str:
        scope = f"user {self.principal}"
        if self.policy_name:
            scope += f" policy {self.policy_name}"
        return f"Failed to export {self.category.value} for {scope}: {self.reason}"


@dataclass
class PrincipalExportResult:
    principal: str
    results: List[SubExportResult] = field(default_factory=list)

    @property
    def artifacts(self) -> List[Path]:
        return [path for result in self.results for path in result.artifacts]

    @property
    def failures(self) -> List[SubExportResult]:
        return [result for result in self.results if result.failed]


@dataclass
class ExportSummary:
    """Everything a run produced, in the order it was produced."""

    export_path: Path
    snapshot: Optional[Path] = None
    principals: List[PrincipalExportResult] = field(default_factory=list)

    @property
    def principal_count(self) -> int:
        return len(self.principals)

    @property
    def artifacts(self) -> List[Path]:
        written = [self.snapshot] if self.snapshot else []
        for principal in self.principals:
            written.extend(principal.artifacts)
        return written

    @property
    def failures(self) -> List[SubExportResult]:
        return [failure for principal in self.principals for failure in principal.failures]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def export_boundary(category: ExportCategory) -> Callable:
    """
    Decorator that turns any exception from a sub-export into a FAILED result.

    The wrapped function must take (context, user_name, ...) and return a
    SubExportResult.
    """
    def decorator(func: Callable[..., SubExportResult]) -> Callable[..., SubExportResult]:
        @wraps(func)
        def wrapper(context: ExportContext, user_name: str, *args, **kwargs) -> SubExportResult:
            try:
                return func(context, user_name, *args, **kwargs)
            except Exception as e:
                logger.debug("%s export failed for %s", category.value, user_name, exc_info=True)
                return SubExportResult(
                    category, user_name, ExportStatus.FAILED, reason=describe_aws_error(e)
                )
        return wrapper
    return decorator


def _paginate(client, operation: str, result_key: str, **kwargs) -> List[Any]:
    """Collect result_key across every page of a list operation."""
    if client.can_paginate(operation):
        items: List[Any] = []
        for page in client.get_paginator(operation).paginate(**kwargs):
            items.extend(page.get(result_key, []))
        return items
    return list(getattr(client, operation)(**kwargs).get(result_key, []))


def _decode_policy_document(document: Any) -> Any:
    # boto3 normally decodes policy documents; older paths return URL-encoded JSON
    if not isinstance(document, str):
        return document
    try:
        return json.loads(urllib.parse.unquote(document))
    except ValueError:
        return document


def _strip_metadata(response: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in response.items() if key != "ResponseMetadata"}


# ---------------------------------------------------------------------------
# Principal enumeration
# ---------------------------------------------------------------------------


def list_principals(iam_client) -> List[Dict[str, Any]]:
    """
    List every IAM user in the account, in service order.

    Errors propagate: without the user list no further work is possible.
    """
    return _paginate(iam_client, "list_users", "Users")


# ---------------------------------------------------------------------------
# Per-user sub-exports
# ---------------------------------------------------------------------------


@export_boundary(ExportCategory.OBJECT)
def export_user_object(context: ExportContext, user_name: str) -> SubExportResult:
    """Write user-<name>.json and, when set, the permissions boundary."""
    user = context.iam_client.get_user(UserName=user_name)["User"]

    written = [
        artifacts.write_artifact(
            context.export_path / artifacts.user_filename(user_name), user, artifacts.OBJECT_DEPTH
        )
    ]

    boundary = user.get("PermissionsBoundary") or {}
    if boundary.get("PermissionsBoundaryArn"):
        try:
            written.append(
                artifacts.write_artifact(
                    context.export_path / artifacts.permissions_boundary_filename(user_name),
                    boundary,
                    artifacts.BOUNDARY_DEPTH,
                )
            )
        except OSError as e:
            # user-<name>.json is already on disk and stays counted
            logger.debug("permissions boundary write failed for %s", user_name, exc_info=True)
            return SubExportResult(
                ExportCategory.OBJECT, user_name, ExportStatus.FAILED, written,
                reason=f"permissions boundary: {describe_aws_error(e)}",
            )

    return SubExportResult(ExportCategory.OBJECT, user_name, ExportStatus.WRITTEN, written)


@export_boundary(ExportCategory.ATTACHED_POLICIES)
def export_attached_policies(context: ExportContext, user_name: str) -> SubExportResult:
    policies = _paginate(
        context.iam_client, "list_attached_user_policies", "AttachedPolicies", UserName=user_name
    )
    if not policies:
        return SubExportResult(ExportCategory.ATTACHED_POLICIES, user_name, ExportStatus.EMPTY)

    path = artifacts.write_artifact(
        context.export_path / artifacts.attached_policies_filename(user_name),
        policies,
        artifacts.POLICY_DEPTH,
    )
    return SubExportResult(ExportCategory.ATTACHED_POLICIES, user_name, ExportStatus.WRITTEN, [path])


def export_inline_policy(context: ExportContext, user_name: str, policy_name: str) -> SubExportResult:
    """Write one inline policy. A failure is scoped to this policy name."""
    try:
        response = context.iam_client.get_user_policy(UserName=user_name, PolicyName=policy_name)
        policy = _strip_metadata(response)
        policy["PolicyDocument"] = _decode_policy_document(policy.get("PolicyDocument"))

        path = artifacts.write_artifact(
            context.export_path / artifacts.inline_policy_filename(user_name, policy_name),
            policy,
            artifacts.POLICY_DEPTH,
        )
    except Exception as e:
        logger.debug(
            "inline policy %s export failed for %s", policy_name, user_name, exc_info=True
        )
        return SubExportResult(
            ExportCategory.INLINE_POLICY, user_name, ExportStatus.FAILED,
            reason=describe_aws_error(e), policy_name=policy_name,
        )

    return SubExportResult(
        ExportCategory.INLINE_POLICY, user_name, ExportStatus.WRITTEN, [path], policy_name=policy_name
    )


def export_inline_policies(context: ExportContext, user_name: str) -> List[SubExportResult]:
    """
    Write one artifact per inline policy.

    Returns a single FAILED result if the listing call fails, a single EMPTY
    result if the user has no inline policies, and otherwise one result per
    policy name, each of which may fail independently.
    """
    try:
        policy_names = _paginate(
            context.iam_client, "list_user_policies", "PolicyNames", UserName=user_name
        )
    except Exception as e:
        return [
            SubExportResult(
                ExportCategory.INLINE_POLICIES, user_name, ExportStatus.FAILED,
                reason=describe_aws_error(e),
            )
        ]

    if not policy_names:
        return [SubExportResult(ExportCategory.INLINE_POLICIES, user_name, ExportStatus.EMPTY)]

    return [export_inline_policy(context, user_name, name) for name in policy_names]


@export_boundary(ExportCategory.TAGS)
def export_tags(context: ExportContext, user_name: str) -> SubExportResult:
    if not context.tags_supported:
        logger.debug("ListUserTags not available, skipping tags for %s", user_name)
        return SubExportResult(ExportCategory.TAGS, user_name, ExportStatus.SKIPPED)

    tags = _paginate(context.iam_client, "list_user_tags", "Tags", UserName=user_name)
    if not tags:
        return SubExportResult(ExportCategory.TAGS, user_name, ExportStatus.EMPTY)

    path = artifacts.write_artifact(
        context.export_path / artifacts.tags_filename(user_name), tags, artifacts.TAGS_DEPTH
    )
    return SubExportResult(ExportCategory.TAGS, user_name, ExportStatus.WRITTEN, [path])


def export_principal(context: ExportContext, principal: Dict[str, Any]) -> PrincipalExportResult:
    """
    Run all four sub-exports for one user and log any failures.

    Args:
        context: Export context
        principal: User record from list_principals()

    Returns:
        PrincipalExportResult: per-category results in export order
    """
    user_name = principal["UserName"]
    logger.info("[+] Exporting user: %s", user_name)

    outcome = PrincipalExportResult(user_name)
    outcome.results.append(export_user_object(context, user_name))
    outcome.results.append(export_attached_policies(context, user_name))
    outcome.results.extend(export_inline_policies(context, user_name))
    outcome.results.append(export_tags(context, user_name))

    for failure in outcome.failures:
        logger.warning(failure.describe_failure())

    return outcome


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


def run_export(
    context: ExportContext,
    erase_first: bool = False,
    force: bool = False,
    confirm: Optional[ConfirmFn] = None,
) -> ExportSummary:
    """
    Export every IAM user in the account to context.export_path.

    Args:
        context: Export context (profile, destination, IAM client, capabilities)
        erase_first: Empty the export directory before exporting
        force: Skip the erase confirmation
        confirm: Confirmation callable used when erasing without force

    Returns:
        ExportSummary: What was written and what failed

    Raises:
        OSError: if the export directory cannot be created
        botocore.exceptions.ClientError: if the user listing fails
    """
    ensure_directory(context.export_path)

    if erase_first:
        wipe_directory(context.export_path, forced=force, confirm=confirm)

    summary = ExportSummary(context.export_path)

    principals = list_principals(context.iam_client)
    if not principals:
        logger.warning("No IAM users found for profile %s", context.profile)
        return summary

    logger.info("Found %d IAM user(s)", len(principals))
    summary.snapshot = artifacts.write_artifact(
        context.export_path / artifacts.USERS_SNAPSHOT_FILENAME, principals, artifacts.SNAPSHOT_DEPTH
    )

    for principal in principals:
        summary.principals.append(export_principal(context, principal))

    logger.info(
        "Export complete: %d user(s), %d file(s) written to %s, %d failure(s)",
        summary.principal_count,
        len(summary.artifacts),
        context.export_path,
        len(summary.failures),
    )
    return summary
