"""Bucket policy statements granting CloudFront read access to build artifacts."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from fnmatch import fnmatchcase
from typing import Any

logger: logging.Logger = logging.getLogger(__name__)

POLICY_VERSION = "2012-10-17"
READ_STATEMENT_SID = "AllowCloudFrontOriginAccessIdentityRead"
READ_ACTION = "s3:GetObject"


class PolicyConflictError(RuntimeError):
    """Raised when an existing explicit deny would block the read grant."""


def object_read_statement(objects_arn: str, identity_iam_arn: str) -> dict[str, Any]:
    """Return the statement allowing the origin access identity to read ``objects_arn``.

    The principal uses the identity's IAM ARN, the form S3 stores OAI
    principals in, so the statement reads back unchanged from the live policy.
    """
    return {
        "Sid": READ_STATEMENT_SID,
        "Effect": "Allow",
        "Principal": {"AWS": identity_iam_arn},
        "Action": READ_ACTION,
        "Resource": objects_arn,
    }


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _principal_ids(principal: Any) -> set[str]:
    if principal == "*":
        return {"*"}
    if not isinstance(principal, dict):
        return set()
    return {
        str(identifier)
        for key in ("AWS", "CanonicalUser")
        for identifier in _as_list(principal.get(key))
    }


def _action_matches(patterns: list[Any]) -> bool:
    return any(fnmatchcase(READ_ACTION.lower(), str(p).lower()) for p in patterns)


def _resource_matches(patterns: list[Any], objects_arn: str) -> bool:
    return any(fnmatchcase(objects_arn, str(p)) for p in patterns)


def find_conflicting_deny(
    policy: dict[str, Any],
    statement: dict[str, Any],
    principal_aliases: Iterable[str] = (),
) -> dict[str, Any] | None:
    """Return the first unconditional Deny in ``policy`` that blocks ``statement``.

    A deny applies to the grantee when it names everyone, the statement's
    principal, or one of ``principal_aliases`` (e.g. the identity's canonical
    user id). Actions match case-insensitively with IAM wildcards. Conditional
    denies and ``Not*`` statements are not evaluated and never conflict.
    """
    grantee = {"*", *_principal_ids(statement["Principal"]), *principal_aliases}
    for existing in _as_list(policy.get("Statement")):
        if existing.get("Effect") != "Deny" or existing.get("Condition"):
            continue
        if "NotPrincipal" in existing or "NotAction" in existing or "NotResource" in existing:
            continue
        if not grantee.intersection(_principal_ids(existing.get("Principal"))):
            continue
        if not _action_matches(_as_list(existing.get("Action"))):
            continue
        if _resource_matches(_as_list(existing.get("Resource")), statement["Resource"]):
            return existing
    return None


def append_statement(
    existing_policy: str | None,
    statement: dict[str, Any],
    principal_aliases: Iterable[str] = (),
) -> str:
    """Append ``statement`` to a bucket policy document and return it as JSON.

    Statements already in the document are kept in order. A previous
    statement with the same ``Sid`` is replaced, so re-applying is a no-op.

    Raises:
        PolicyConflictError: The document explicitly denies the grant.
    """
    policy: dict[str, Any] = json.loads(existing_policy) if existing_policy else {}
    policy.setdefault("Version", POLICY_VERSION)

    conflict = find_conflicting_deny(policy, statement, principal_aliases)
    if conflict is not None:
        raise PolicyConflictError(
            f"Bucket policy statement {conflict.get('Sid', '<unnamed>')!r} "
            f"denies {READ_ACTION} on {statement['Resource']}"
        )

    kept = [s for s in _as_list(policy.get("Statement")) if s.get("Sid") != statement["Sid"]]
    policy["Statement"] = [*kept, statement]

    logger.debug(
        "bucket_policy_statement_appended",
        extra={"sid": statement["Sid"], "statement_count": len(policy["Statement"])},
    )
    return json.dumps(policy)
