"""
Celery tasks for order bookkeeping.

Tasks:
    - reconcile_order_totals: Periodic sweep repairing drifted subtotals/totals
    - generate_daily_order_report: Daily statistics for the previous day
"""
import logging
from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(Exception,),
    retry_backoff=True
)
def reconcile_order_totals(self):
    """
    Recompute every item subtotal and order total from the stored items.

    Totals only drift when rows are changed outside OrderService /
    OrderItemService (raw SQL, admin bulk edits).

    Returns:
        Dict with the number of orders corrected
    """
    from config.container import get_services

    corrected = get_services().orders.reconcile_totals()
    if corrected:
        logger.warning(f"[CELERY] Reconciled totals of {corrected} order(s)")
    else:
        logger.info("[CELERY] All order totals consistent")
    return {'corrected': corrected}


@shared_task
def generate_daily_order_report():
    """
    Generate daily order statistics report.

    Scheduled via Celery Beat for daily execution.
    """
    from config.container import get_services
    from django.utils import timezone
    from datetime import datetime, time, timedelta

    today = timezone.localdate()
    yesterday = today - timedelta(days=1)
    tz = timezone.get_current_timezone()

    stats = get_services().orders.statistics(
        start=timezone.make_aware(datetime.combine(yesterday, time.min), tz),
        end=timezone.make_aware(datetime.combine(today, time.min), tz),
    )

    report = f"""
    ===============================================
    DAILY ORDER REPORT - {yesterday}
    ===============================================
    Total Orders: {stats['total_orders']}
    Pending: {stats['pending_orders']}
    Processing: {stats['processing_orders']}
    Shipped: {stats['shipped_orders']}
    Delivered: {stats['delivered_orders']}
    Cancelled: {stats['cancelled_orders']}
    Total Revenue: ${stats['total_revenue']}
    Average Order: ${stats['avg_order_value']}
    ===============================================
    """

    logger.info(report)

    stats['total_revenue'] = str(stats['total_revenue'])
    stats['avg_order_value'] = str(stats['avg_order_value'])
    stats['date'] = yesterday.isoformat()
    return stats
