"""Payment service - orchestrates payment gateways"""
import json
import logging
import time

from django.db import transaction
from django.utils import timezone

from ..models import Booking
from ..payment_gateways import PaymentError, GatewayError, RazorpayPaymentGateway, UpiPaymentGateway
from ..utils.constants import (
    BookingStatus, PaymentStatus, PaymentMethod, BusinessRules, NotificationType, NotificationPriority,
)
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

PAID_EVENTS = ('payment.captured', 'payment.authorized')


def is_closed(booking):
    return booking.status == BookingStatus.CANCELLED or booking.payment_status == PaymentStatus.REFUNDED


class BookingNotFoundError(PaymentError):
    status_code = 404


class PaymentForbiddenError(PaymentError):
    status_code = 403


class PaymentAlreadyCompletedError(PaymentError):
    status_code = 400


class PaymentAmountMismatchError(PaymentError):
    status_code = 400


class PaymentNotCapturedError(PaymentError):
    status_code = 400


class BookingCancelledError(PaymentError):
    status_code = 400


class PaymentReferenceMismatchError(PaymentError):
    status_code = 400


class PaymentService:
    """Service for payment operations"""

    def __init__(self, razorpay_gateway=None, upi_gateway=None):
        self.razorpay = razorpay_gateway or RazorpayPaymentGateway()
        self.upi = upi_gateway or UpiPaymentGateway()

    def get_booking(self, user, booking_id):
        try:
            booking = Booking.objects.select_related('property').get(id=booking_id)
        except (Booking.DoesNotExist, ValueError):
            raise BookingNotFoundError('Booking not found')
        if booking.user_id != user.id:
            raise PaymentForbiddenError('Unauthorized')
        return booking

    def _payable_booking(self, user, booking_id, amount=None):
        booking = self.get_booking(user, booking_id)
        if booking.payment_status == PaymentStatus.PAID:
            raise PaymentAlreadyCompletedError('Booking already paid')
        if is_closed(booking):
            raise BookingCancelledError('Booking is cancelled')

        if amount is None:
            return booking, float(booking.total_amount)

        try:
            amount = float(amount)
        except (TypeError, ValueError):
            raise PaymentError('Invalid amount')
        if amount <= 0:
            raise PaymentError('Invalid amount')
        if abs(amount - float(booking.total_amount)) > BusinessRules.PAYMENT_AMOUNT_TOLERANCE:
            raise PaymentAmountMismatchError('Amount does not match booking total')
        return booking, amount

    def create_order(self, user, booking_id, amount=None):
        booking, amount = self._payable_booking(user, booking_id, amount)
        order = self.razorpay.initiate_payment(booking, amount)
        booking.payment_id = order['order_id']
        booking.payment_method = PaymentMethod.RAZORPAY
        booking.save(update_fields=['payment_id', 'payment_method', 'updated_at'])
        return {**order, 'booking_id': booking.id}

    def create_payment_link(self, user, booking_id, amount=None):
        booking, amount = self._payable_booking(user, booking_id, amount)
        customer = {'name': booking.contact_name or user.get_full_name() or user.username}
        if booking.contact_email:
            customer['email'] = booking.contact_email
        if booking.contact_phone:
            customer['contact'] = booking.contact_phone

        link = self.razorpay.create_payment_link(booking, amount, customer=customer)
        booking.payment_id = link['payment_link_id']
        booking.save(update_fields=['payment_id', 'updated_at'])
        return {**link, 'booking_id': booking.id}

    @transaction.atomic
    def mark_paid(self, booking, payment_id, method=PaymentMethod.UPI, details=None):
        """Flip a booking to paid and confirmed, idempotent"""
        booking = Booking.objects.select_for_update().get(id=booking.id)
        if booking.payment_status == PaymentStatus.PAID:
            return booking, False
        if is_closed(booking):
            logger.warning(f'[PAYMENT] Ignoring payment {payment_id} for cancelled booking {booking.id}')
            return booking, False

        booking.payment_status = PaymentStatus.PAID
        booking.status = BookingStatus.CONFIRMED
        booking.payment_method = method
        booking.payment_details = {
            **(booking.payment_details or {}),
            **(details or {}),
            'payment_id': payment_id,
            'paid_at': timezone.now().isoformat(),
        }
        booking.save()

        notifications = NotificationService()
        notifications.create_notification(
            'Payment Successful',
            f'Payment of INR {booking.total_amount} for {booking.property.title} received. Your booking is confirmed.',
            user_id=booking.user_id,
            type=NotificationType.PAYMENT,
            priority=NotificationPriority.HIGH,
            link=f'/bookings/{booking.id}',
            metadata={'booking_id': booking.id, 'payment_id': payment_id},
        )
        notifications.create_notification(
            'Booking Paid',
            f'Booking {booking.id} for {booking.property.title} has been paid.',
            user_id=booking.property.owner_id,
            type=NotificationType.PAYMENT,
            metadata={'booking_id': booking.id},
        )
        logger.info(f'[PAYMENT] Booking {booking.id} marked paid ({method}, {payment_id})')
        return booking, True

    def verify_payment(self, user, booking_id, order_id, payment_id, signature):
        if not all([order_id, payment_id, signature]):
            raise PaymentError('Missing payment verification fields')

        booking, _ = self._payable_booking(user, booking_id)
        if order_id != booking.payment_id:
            raise PaymentReferenceMismatchError('Order does not belong to this booking')
        self.razorpay.verify_signature(order_id, payment_id, signature)

        payment = self.razorpay.fetch_payment(payment_id)
        if payment.get('order_id') != order_id:
            raise PaymentReferenceMismatchError('Payment does not belong to this order')
        if payment.get('status') not in ('captured', 'authorized'):
            raise PaymentNotCapturedError(f'Payment not completed (status: {payment.get("status")})')

        booking, _ = self.mark_paid(booking, payment_id, method=PaymentMethod.UPI, details={
            'order_id': order_id,
            'method': payment.get('method'),
            'vpa': payment.get('vpa'),
            'amount': (payment.get('amount') or 0) / 100,
        })
        return booking

    def payment_status(self, user, booking_id, order_id=None):
        """Status check used by the polling client"""
        booking = self.get_booking(user, booking_id)
        if booking.payment_status == PaymentStatus.PAID:
            return {'is_paid': True, 'payment_status': booking.payment_status, 'status': booking.status}

        # Only the reference stored on the booking is ever looked up
        payment_ref = booking.payment_id
        if not payment_ref or is_closed(booking) or (order_id and order_id != payment_ref):
            return {'is_paid': False, 'payment_status': booking.payment_status, 'status': booking.status}

        try:
            if payment_ref.startswith('upi_'):
                result = self.upi.check_status(payment_ref)
            else:
                result = self.razorpay.check_status(payment_ref)
        except GatewayError as e:
            logger.warning(f'[PAYMENT] Status check failed for booking {booking.id}: {e.message}')
            return {'is_paid': False, 'payment_status': booking.payment_status, 'status': booking.status}

        if result['paid']:
            booking, _ = self.mark_paid(
                booking, result.get('payment_id') or payment_ref, method=PaymentMethod.UPI,
                details={'gateway_status': result.get('status'), 'reference': payment_ref},
            )
        return {
            'is_paid': booking.payment_status == PaymentStatus.PAID,
            'payment_status': booking.payment_status,
            'status': booking.status,
            'gateway_status': result.get('status'),
        }

    def poll_until_paid(self, user, booking_id, interval=None, timeout=None, sleep=time.sleep, clock=time.monotonic):
        """Poll payment status until paid or the timeout elapses"""
        interval = interval if interval is not None else BusinessRules.PAYMENT_POLL_INTERVAL_SECONDS
        timeout = timeout if timeout is not None else BusinessRules.PAYMENT_POLL_TIMEOUT_SECONDS
        deadline = clock() + timeout

        while True:
            result = self.payment_status(user, booking_id)
            if result['is_paid'] or clock() >= deadline:
                return result
            sleep(interval)

    def handle_webhook(self, body, signature):
        payload = self.razorpay.handle_webhook(body, signature)
        try:
            event = json.loads(payload)
        except json.JSONDecodeError:
            raise PaymentError('Invalid payload')

        event_type = event.get('event')
        if event_type not in PAID_EVENTS:
            logger.info(f'[PAYMENT] Ignoring webhook event {event_type}')
            return {'received': True, 'handled': False}

        payment = event.get('payload', {}).get('payment', {}).get('entity', {})
        order_id = payment.get('order_id')
        booking = Booking.objects.filter(payment_id=order_id).first() if order_id else None
        if not booking:
            logger.warning(f'[PAYMENT] Webhook {event_type} for unknown order {order_id}')
            return {'received': True, 'handled': False}

        self.mark_paid(booking, payment.get('id'), method=PaymentMethod.UPI, details={
            'order_id': order_id,
            'method': payment.get('method'),
            'vpa': payment.get('vpa'),
            'source': 'webhook',
        })
        return {'received': True, 'handled': True, 'booking_id': booking.id}

    def upi_details(self, user, booking_id):
        booking, amount = self._payable_booking(user, booking_id)
        return {**self.upi.initiate_payment(booking, amount), 'booking_id': booking.id}

    def confirm_upi(self, user, booking_id, amount=None, upi_id=None, transaction_ref=None):
        """Payer-confirmed UPI transfer"""
        booking, _ = self._payable_booking(user, booking_id, amount)
        reference = self.upi.new_reference(booking)
        booking, _ = self.mark_paid(booking, reference, method=PaymentMethod.UPI, details={
            'upi_id': upi_id or 'qr_scan',
            'transaction_ref': transaction_ref or '',
            'source': 'manual',
        })
        booking.payment_id = reference
        booking.save(update_fields=['payment_id', 'updated_at'])
        return booking

    def upi_status(self, user, booking_id):
        booking = self.get_booking(user, booking_id)
        return {
            'booking_id': booking.id,
            'payment_status': booking.payment_status,
            'status': booking.status,
            'payment_id': booking.payment_id,
            'is_paid': booking.payment_status == PaymentStatus.PAID,
        }
