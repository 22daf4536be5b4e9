# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysyłania powiadomień.
    Używa Celery do asynchronicznego przetwarzania.
    """

    @staticmethod
    def send_otp(phone: str, otp: str):
        send_otp_task.delay(phone, otp)

    @staticmethod
    def send_order_confirmation(user_id: int, order_id: int, payment_status: str):
        """
        Wysyła potwierdzenie zamówienia (COD albo opłacone online).
        """
        send_order_confirmation_task.delay(user_id, order_id, payment_status)


@celery_app.task(name="storefront.services.notification_service.send_otp_task")
def send_otp_task(phone: str, otp: str):
    """
    Celery task - docelowo WhatsApp Business API.
    Teraz tylko loguje.
    """
    logger.info(f"[OTP] Sending OTP {otp} to {phone}")
    return {"phone": phone, "status": "sent"}


@celery_app.task(name="storefront.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(user_id: int, order_id: int, payment_status: str):
    logger.info(f"[NOTIFICATION] User {user_id}: Order {order_id} confirmed ({payment_status})")
    return {"user_id": user_id, "order_id": order_id, "status": "sent"}
