# storefront/services/notification_service.py
import asyncio
from decimal import Decimal
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict, List

import aiosmtplib

from storefront.celery_worker import celery_app
from storefront.utils import settings
from storefront.utils.logging import get_logger
from storefront.utils.retry import smtp_retry

logger = get_logger(__name__)


class NotificationService:
    """
    Order confirmations.
    Delivery runs in Celery, the caller only enqueues.
    """

    @staticmethod
    def send_order_confirmation(
        recipient: str,
        order_id: int,
        total: Decimal,
        items: List[Dict[str, Any]],
    ):
        """
        items: [{"name": ..., "quantity": ..., "price": Decimal}, ...]
        Decimals are sent as strings, the task payload is JSON.
        """
        payload = [
            {"name": i["name"], "quantity": i["quantity"], "price": str(i["price"])}
            for i in items
        ]
        return send_order_confirmation_task.delay(recipient, order_id, str(total), payload)


def render_confirmation(order_id: int, total: str, items: List[Dict[str, Any]]) -> str:
    lines = [
        "Thank you for your purchase! Your order has been created.",
        "",
        f"Order number: {order_id}",
        f"Order total: {Decimal(total):.2f}",
        "",
        "Items:",
    ]
    for item in items:
        price = Decimal(item["price"])
        lines.append(
            f"  {item['name']} x {item['quantity']} @ {price:.2f} = {price * item['quantity']:.2f}"
        )
    lines += ["", "We will let you know as soon as your order ships."]
    return "\n".join(lines)


def build_message(recipient: str, order_id: int, total: str, items: List[Dict[str, Any]]) -> MIMEMultipart:
    message = MIMEMultipart("alternative")
    message["From"] = settings.SMTP_FROM
    message["To"] = recipient
    message["Subject"] = f"Order confirmation #{order_id}"
    message.attach(MIMEText(render_confirmation(order_id, total, items), "plain", "utf-8"))
    return message


@smtp_retry()
def deliver(message: MIMEMultipart):
    return asyncio.run(
        aiosmtplib.send(
            message,
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER or None,
            password=settings.SMTP_PASSWORD or None,
            start_tls=settings.SMTP_START_TLS,
        )
    )


@celery_app.task(name="storefront.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(recipient: str, order_id: int, total: str, items: List[Dict[str, Any]]):
    """
    Sends the confirmation email. Without SMTP_HOST it only logs.
    """
    if not settings.SMTP_HOST:
        logger.info(f"[NOTIFICATION] {recipient}: order {order_id} confirmed, total {total}")
        return {"recipient": recipient, "order_id": order_id, "status": "logged"}

    deliver(build_message(recipient, order_id, total, items))
    logger.info(f"[NOTIFICATION] Confirmation for order {order_id} sent to {recipient}")

    return {"recipient": recipient, "order_id": order_id, "status": "sent"}
