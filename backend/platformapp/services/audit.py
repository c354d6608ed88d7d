from __future__ import annotations

import json
import logging
from typing import Optional, Dict, Any

from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction

from platformapp.constants import FAILED_SUFFIX
from platformapp.models import AuditLog

logger = logging.getLogger(__name__)

REDACT_KEYS = {"password", "new_password", "current_password", "token", "access", "refresh",
               "reset_password_token", "card", "cvv", "pin"}


def _sanitize(meta: Any) -> Any:
    if isinstance(meta, dict):
        return {
            k: "***" if str(k).lower() in REDACT_KEYS else _sanitize(v)
            for k, v in meta.items()
        }
    if isinstance(meta, (list, tuple)):
        return [_sanitize(v) for v in meta]
    return meta


def _json_safe(meta: Dict[str, Any]) -> Dict[str, Any]:
    # UUIDs, Decimals and datetimes out of serializers/model_to_dict
    return json.loads(json.dumps(meta, cls=DjangoJSONEncoder))


def request_origin(request) -> Dict[str, Optional[str]]:
    if request is None:
        return {"ip_address": None, "user_agent": None}
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    ip = forwarded.split(",")[0].strip() if forwarded else request.META.get("REMOTE_ADDR")
    agent = request.META.get("HTTP_USER_AGENT")
    return {"ip_address": ip or None, "user_agent": agent[:500] if agent else None}


def _actor_id(request) -> Optional[str]:
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return str(user.pk)
    return None


def record(*, tenant_id, action: str, resource: str, resource_id=None, user_id=None,
           metadata: Optional[Dict[str, Any]] = None, ip_address: Optional[str] = None,
           user_agent: Optional[str] = None) -> Optional[AuditLog]:
    """
    Append one audit entry. Never raises: a failed write is logged and dropped.
    Runs in its own savepoint so a failure cannot poison the caller's transaction.
    """
    try:
        with transaction.atomic():
            return AuditLog.objects.create(
                tenant_id=tenant_id,
                user_id=user_id,
                action=action[:80],
                resource=resource[:60],
                resource_id=str(resource_id)[:120] if resource_id else None,
                metadata=_json_safe(_sanitize(metadata or {})),
                ip_address=ip_address,
                user_agent=user_agent,
            )
    except Exception:
        logger.exception("Failed to write audit log %s for %s:%s", action, resource, resource_id)
        return None


def log_success(*, tenant_id, action: str, resource: str, resource_id=None, request=None,
                user_id=None, metadata: Optional[Dict[str, Any]] = None) -> Optional[AuditLog]:
    return record(
        tenant_id=tenant_id, action=action, resource=resource, resource_id=resource_id,
        user_id=user_id or _actor_id(request), metadata=metadata, **request_origin(request),
    )


def log_error(*, tenant_id, action: str, resource: str, error, resource_id=None, request=None,
              user_id=None, metadata: Optional[Dict[str, Any]] = None) -> Optional[AuditLog]:
    """Same as log_success with the action suffixed and the error captured."""
    meta = dict(metadata or {})
    if isinstance(error, BaseException):
        err = {"message": str(getattr(error, "detail", error))}
        code = getattr(error, "default_code", None)
        if code:
            err["code"] = code
    else:
        err = {"message": str(error)}
    meta["error"] = err
    return record(
        tenant_id=tenant_id, action=f"{action}{FAILED_SUFFIX}", resource=resource, resource_id=resource_id,
        user_id=user_id or _actor_id(request), metadata=meta, **request_origin(request),
    )


def log_update(*, tenant_id, action: str, resource: str, resource_id, before, after, request=None,
               user_id=None) -> Optional[AuditLog]:
    return log_success(
        tenant_id=tenant_id, action=action, resource=resource, resource_id=resource_id,
        request=request, user_id=user_id, metadata={"before": before, "after": after},
    )


def log_delete(*, tenant_id, action: str, resource: str, resource_id, deleted, request=None,
               user_id=None) -> Optional[AuditLog]:
    return log_success(
        tenant_id=tenant_id, action=action, resource=resource, resource_id=resource_id,
        request=request, user_id=user_id, metadata={"deletedData": deleted},
    )
