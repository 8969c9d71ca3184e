import logging
import time

import razorpay
from django.conf import settings
from razorpay.errors import BadRequestError, GatewayError as RazorpayGatewayError, ServerError, SignatureVerificationError

from ..utils.constants import BusinessRules
from .payment_gateway import (
    PaymentGateway, GatewayNotConfiguredError, GatewayAuthenticationError, GatewayError, InvalidSignatureError,
)

logger = logging.getLogger(__name__)

PAID_PAYMENT_STATES = ('captured', 'authorized')
PAID_LINK_STATES = ('paid', 'partially_paid')
PAID_ORDER_STATES = ('paid', 'attempted')
PAYMENT_LINK_PREFIX = 'plink_'


def to_paise(amount):
    return int(round(float(amount) * 100))


def build_receipt(booking_id):
    millis = str(int(time.time() * 1000))
    return f'bk_{str(booking_id)[:12]}_{millis[-8:]}'[:BusinessRules.RECEIPT_MAX_LENGTH]


class RazorpayPaymentGateway(PaymentGateway):

    def __init__(self, key_id=None, key_secret=None, webhook_secret=None):
        self.key_id = key_id or settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret or settings.RAZORPAY_KEY_SECRET
        self.webhook_secret = webhook_secret or settings.RAZORPAY_WEBHOOK_SECRET
        self._client = None

    @property
    def client(self):
        if not self.key_id or not self.key_secret:
            raise GatewayNotConfiguredError('Payment gateway not configured')
        if self._client is None:
            self._client = razorpay.Client(auth=(self.key_id, self.key_secret))
        return self._client

    def _call(self, action, *args, **kwargs):
        try:
            return action(*args, **kwargs)
        except BadRequestError as e:
            if 'authentication' in str(e).lower():
                logger.error(f'[PAYMENT] Razorpay authentication failed: {e}')
                raise GatewayAuthenticationError(
                    'Payment gateway authentication failed',
                    details='Check RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET',
                )
            raise GatewayError(str(e), status_code=400)
        except (ServerError, RazorpayGatewayError) as e:
            logger.error(f'[PAYMENT] Razorpay error: {e}')
            raise GatewayError(str(e))

    def _notes(self, booking):
        return {
            'bookingId': str(booking.id),
            'userId': str(booking.user_id),
            'propertyId': str(booking.property_id),
        }

    def initiate_payment(self, booking, amount):
        """Create a Razorpay order for the booking"""
        order = self._call(self.client.order.create, data={
            'amount': to_paise(amount),
            'currency': 'INR',
            'receipt': build_receipt(booking.id),
            'notes': self._notes(booking),
            'payment_capture': 1,
        })
        logger.info(f'[PAYMENT] Razorpay order {order["id"]} created for booking {booking.id}')
        return {
            'order_id': order['id'],
            'amount': order['amount'],
            'currency': order['currency'],
            'key_id': self.key_id,
        }

    def create_payment_link(self, booking, amount, customer=None):
        """Create a payment link, scanned as a UPI QR code by the client"""
        data = {
            'amount': to_paise(amount),
            'currency': 'INR',
            'accept_partial': False,
            'description': f'Booking {booking.id} - {booking.property.title}',
            'reference_id': build_receipt(booking.id),
            'notes': self._notes(booking),
            'upi_link': True,
        }
        if customer:
            data['customer'] = customer
        link = self._call(self.client.payment_link.create, data)
        logger.info(f'[PAYMENT] Payment link {link["id"]} created for booking {booking.id}')
        return {
            'payment_link_id': link['id'],
            'short_url': link.get('short_url'),
            'amount': link.get('amount'),
            'status': link.get('status'),
        }

    def verify_signature(self, order_id, payment_id, signature):
        try:
            self.client.utility.verify_payment_signature({
                'razorpay_order_id': order_id,
                'razorpay_payment_id': payment_id,
                'razorpay_signature': signature,
            })
        except SignatureVerificationError:
            raise InvalidSignatureError('Invalid payment signature')

    def fetch_payment(self, payment_id):
        return self._call(self.client.payment.fetch, payment_id)

    def check_status(self, payment_ref):
        if payment_ref.startswith(PAYMENT_LINK_PREFIX):
            return self._payment_link_status(payment_ref)
        return self._order_status(payment_ref)

    def _payment_link_status(self, link_id):
        link = self._call(self.client.payment_link.fetch, link_id)
        for payment in link.get('payments') or []:
            if payment.get('status') in PAID_PAYMENT_STATES + ('created',):
                return {'paid': True, 'status': payment.get('status'), 'payment_id': payment.get('payment_id')}

        if link.get('status') in PAID_LINK_STATES or (link.get('amount_paid') or 0) > 0:
            return {'paid': True, 'status': link.get('status'), 'payment_id': None}
        return {'paid': False, 'status': link.get('status'), 'payment_id': None}

    def _order_status(self, order_id):
        payments = self._call(self.client.order.payments, order_id)
        for payment in payments.get('items') or []:
            if payment.get('status') in PAID_PAYMENT_STATES + ('created',):
                return {
                    'paid': True,
                    'status': payment.get('status'),
                    'payment_id': payment.get('id'),
                    'method': payment.get('method'),
                    'vpa': payment.get('vpa'),
                }

        order = self._call(self.client.order.fetch, order_id)
        if order.get('status') in PAID_ORDER_STATES:
            return {'paid': True, 'status': order.get('status'), 'payment_id': None}
        return {'paid': False, 'status': order.get('status'), 'payment_id': None}

    def handle_webhook(self, body, signature):
        """Validate a webhook delivery and return the parsed event"""
        if not signature:
            raise InvalidSignatureError('Missing signature')
        if not self.webhook_secret:
            raise GatewayNotConfiguredError('Webhook secret not configured')

        payload = body.decode('utf-8') if isinstance(body, bytes) else body
        try:
            self.client.utility.verify_webhook_signature(payload, signature, self.webhook_secret)
        except SignatureVerificationError:
            raise InvalidSignatureError('Invalid signature')
        return payload
