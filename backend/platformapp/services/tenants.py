from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from common.exceptions import Conflict
from platformapp.defaults import DEFAULT_SETTINGS
from platformapp.models import Tenant, TenantSettings

logger = logging.getLogger(__name__)


@transaction.atomic
def create_tenant(*, name: str, slug: str, is_active: bool = True) -> Tenant:
    """Create a tenant together with its default settings row."""
    if Tenant.objects.filter(slug=slug).exists():
        raise Conflict("Tenant slug already exists")
    try:
        with transaction.atomic():
            tenant = Tenant.objects.create(name=name, slug=slug, is_active=is_active)
    except IntegrityError:
        raise Conflict("Tenant slug already exists")

    TenantSettings.objects.create(tenant=tenant, company_name=name, **DEFAULT_SETTINGS)
    logger.info("Created tenant %s (%s)", tenant.slug, tenant.pk)
    return tenant


def deactivate_tenant(tenant: Tenant) -> Tenant:
    tenant.is_active = False
    tenant.save(update_fields=["is_active", "updated_at"])
    logger.info("Deactivated tenant %s", tenant.pk)
    return tenant
