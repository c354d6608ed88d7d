import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def check_low_stock(tenant_id, product_ids):
    """
    Flag products whose stock fell to or below their min_stock.
    Queued after orders commit and after manual stock edits.
    """
    # Import locally to avoid circular dependencies during app startup
    from platformapp.constants import AuditAction, AuditResource
    from platformapp.services import audit
    from .models import Product

    flagged = []
    qs = Product.objects.filter(tenant_id=tenant_id, pk__in=product_ids).low_stock()
    for product in qs:
        logger.warning("Low stock for product %s (%s): %s <= %s",
                       product.name, product.pk, product.stock, product.min_stock)
        audit.log_success(
            tenant_id=tenant_id, action=AuditAction.PRODUCT_LOW_STOCK, resource=AuditResource.PRODUCT,
            resource_id=product.pk,
            metadata={"name": product.name, "stock": product.stock, "min_stock": product.min_stock},
        )
        flagged.append(str(product.pk))
    return flagged


def queue_low_stock_check(tenant_id, product_ids):
    """Dispatch check_low_stock; a broker outage is logged, never raised."""
    try:
        check_low_stock.delay(str(tenant_id), [str(pid) for pid in product_ids])
    except Exception:
        logger.exception("Could not queue low stock check for tenant %s", tenant_id)
