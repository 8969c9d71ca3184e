"""Tests for payment service and gateways"""
import hashlib
import hmac
import json
from decimal import Decimal
from unittest import mock

from django.test import TestCase, override_settings

from ..payment_gateways import (
    PaymentError, GatewayError, GatewayNotConfiguredError, InvalidSignatureError,
    RazorpayPaymentGateway, UpiPaymentGateway,
)
from ..payment_gateways.razorpay_payment_gateway import build_receipt, to_paise
from ..services.payment_service import (
    PaymentService, BookingNotFoundError, PaymentForbiddenError, PaymentAlreadyCompletedError,
    PaymentAmountMismatchError, PaymentNotCapturedError, BookingCancelledError, PaymentReferenceMismatchError,
)
from ..services.booking_service import BookingService
from ..models import Booking, Notification
from ..utils.constants import BookingStatus, PaymentStatus, PaymentMethod, UserRole
from .helpers import make_user, make_property, make_booking


def sign(secret, message):
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


class RazorpayGatewayTest(TestCase):
    def setUp(self):
        self.gateway = RazorpayPaymentGateway(key_id='rzp_test_key', key_secret='secret', webhook_secret='hook')

    def test_to_paise(self):
        self.assertEqual(to_paise(Decimal('13000')), 1300000)
        self.assertEqual(to_paise(199.99), 19999)

    def test_receipt_fits_limit(self):
        receipt = build_receipt('1234567890123456789')
        self.assertTrue(receipt.startswith('bk_123456789012_'))
        self.assertLessEqual(len(receipt), 40)

    @override_settings(RAZORPAY_KEY_ID='', RAZORPAY_KEY_SECRET='')
    def test_unconfigured_client(self):
        gateway = RazorpayPaymentGateway()
        with self.assertRaises(GatewayNotConfiguredError):
            gateway.client

    def test_valid_payment_signature(self):
        signature = sign('secret', 'order_1|pay_1')
        self.gateway.verify_signature('order_1', 'pay_1', signature)

    def test_invalid_payment_signature(self):
        with self.assertRaises(InvalidSignatureError):
            self.gateway.verify_signature('order_1', 'pay_1', 'deadbeef')

    def test_webhook_signature(self):
        body = b'{"event": "payment.captured"}'
        payload = self.gateway.handle_webhook(body, sign('hook', body.decode()))
        self.assertEqual(payload, body.decode())

        with self.assertRaises(InvalidSignatureError):
            self.gateway.handle_webhook(body, '')
        with self.assertRaises(InvalidSignatureError):
            self.gateway.handle_webhook(body, sign('wrong', body.decode()))

    def test_order_status_from_payments(self):
        client = mock.MagicMock()
        client.order.payments.return_value = {'items': [{'id': 'pay_1', 'status': 'captured', 'method': 'upi', 'vpa': 'a@upi'}]}
        self.gateway._client = client

        status = self.gateway.check_status('order_1')
        self.assertTrue(status['paid'])
        self.assertEqual(status['payment_id'], 'pay_1')

    def test_order_status_unpaid(self):
        client = mock.MagicMock()
        client.order.payments.return_value = {'items': []}
        client.order.fetch.return_value = {'status': 'created'}
        self.gateway._client = client

        self.assertFalse(self.gateway.check_status('order_1')['paid'])

    def test_payment_link_status(self):
        client = mock.MagicMock()
        client.payment_link.fetch.return_value = {'status': 'created', 'amount_paid': 1300000, 'payments': []}
        self.gateway._client = client

        self.assertTrue(self.gateway.check_status('plink_1')['paid'])
        client.payment_link.fetch.assert_called_once_with('plink_1')


class UpiGatewayTest(TestCase):
    def test_upi_link(self):
        gateway = UpiPaymentGateway(vpa='secondhome@upi', payee_name='Second Home')
        link = gateway.build_upi_link(Decimal('13000'), 'Booking 5')
        self.assertEqual(link, 'upi://pay?pa=secondhome%40upi&pn=Second%20Home&am=13000.00&cu=INR&tn=Booking%205')


class PaymentServiceTest(TestCase):
    def setUp(self):
        self.razorpay = mock.MagicMock()
        self.upi = UpiPaymentGateway(vpa='secondhome@upi', payee_name='Second Home')
        self.service = PaymentService(razorpay_gateway=self.razorpay, upi_gateway=self.upi)

        self.owner = make_user('owner@example.com', role=UserRole.OWNER)
        self.student = make_user('student@example.com')
        self.prop = make_property(self.owner)
        self.booking = make_booking(self.student, self.prop)

    def test_create_order(self):
        self.razorpay.initiate_payment.return_value = {
            'order_id': 'order_1', 'amount': 1300000, 'currency': 'INR', 'key_id': 'rzp_test_key',
        }
        result = self.service.create_order(self.student, self.booking.id, amount=13000)

        self.assertEqual(result['order_id'], 'order_1')
        self.assertEqual(result['booking_id'], self.booking.id)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_id, 'order_1')
        self.assertEqual(self.booking.payment_method, PaymentMethod.RAZORPAY)

    def test_booking_errors(self):
        with self.assertRaises(BookingNotFoundError):
            self.service.create_order(self.student, 9999)
        with self.assertRaises(PaymentForbiddenError):
            self.service.create_order(self.owner, self.booking.id)

    def test_amount_validation(self):
        with self.assertRaises(PaymentAmountMismatchError):
            self.service.create_order(self.student, self.booking.id, amount=100)
        with self.assertRaises(PaymentError):
            self.service.create_order(self.student, self.booking.id, amount='abc')

    def test_already_paid(self):
        self.booking.payment_status = PaymentStatus.PAID
        self.booking.save()
        with self.assertRaises(PaymentAlreadyCompletedError):
            self.service.create_order(self.student, self.booking.id)

    def with_order(self, order_id='order_1'):
        self.booking.payment_id = order_id
        self.booking.save()

    def test_verify_payment_marks_paid(self):
        self.with_order()
        self.razorpay.fetch_payment.return_value = {
            'status': 'captured', 'order_id': 'order_1', 'method': 'upi', 'vpa': 'a@upi', 'amount': 1300000,
        }
        booking = self.service.verify_payment(self.student, self.booking.id, 'order_1', 'pay_1', 'sig')

        self.razorpay.verify_signature.assert_called_once_with('order_1', 'pay_1', 'sig')
        self.assertEqual(booking.payment_status, PaymentStatus.PAID)
        self.assertEqual(booking.status, BookingStatus.CONFIRMED)
        self.assertEqual(booking.payment_details['amount'], 13000)
        self.assertTrue(Notification.objects.filter(user=self.student, title='Payment Successful').exists())
        self.assertTrue(Notification.objects.filter(user=self.owner, title='Booking Paid').exists())

    def test_verify_payment_not_captured(self):
        self.with_order()
        self.razorpay.fetch_payment.return_value = {'status': 'failed', 'order_id': 'order_1'}
        with self.assertRaises(PaymentNotCapturedError):
            self.service.verify_payment(self.student, self.booking.id, 'order_1', 'pay_1', 'sig')

    def test_verify_payment_bad_signature(self):
        self.with_order()
        self.razorpay.verify_signature.side_effect = InvalidSignatureError('Invalid payment signature')
        with self.assertRaises(InvalidSignatureError):
            self.service.verify_payment(self.student, self.booking.id, 'order_1', 'pay_1', 'sig')
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, PaymentStatus.PENDING)

    def test_verify_rejects_order_of_another_booking(self):
        self.with_order('order_expensive')
        with self.assertRaises(PaymentReferenceMismatchError):
            self.service.verify_payment(self.student, self.booking.id, 'order_cheap', 'pay_1', 'sig')
        self.razorpay.verify_signature.assert_not_called()
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, PaymentStatus.PENDING)

    def test_verify_rejects_payment_from_another_order(self):
        self.with_order()
        self.razorpay.fetch_payment.return_value = {'status': 'captured', 'order_id': 'order_cheap', 'amount': 10000}
        with self.assertRaises(PaymentReferenceMismatchError):
            self.service.verify_payment(self.student, self.booking.id, 'order_1', 'pay_1', 'sig')
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, PaymentStatus.PENDING)

    def test_verify_already_paid(self):
        self.with_order()
        self.booking.payment_status = PaymentStatus.PAID
        self.booking.save()
        with self.assertRaises(PaymentAlreadyCompletedError):
            self.service.verify_payment(self.student, self.booking.id, 'order_1', 'pay_1', 'sig')

    def test_mark_paid_is_idempotent(self):
        _, changed = self.service.mark_paid(self.booking, 'pay_1')
        self.assertTrue(changed)
        _, changed = self.service.mark_paid(self.booking, 'pay_1')
        self.assertFalse(changed)
        self.assertEqual(Notification.objects.filter(title='Payment Successful').count(), 1)

    def test_status_without_reference(self):
        result = self.service.payment_status(self.student, self.booking.id)
        self.assertFalse(result['is_paid'])
        self.razorpay.check_status.assert_not_called()

    def test_status_marks_paid_from_gateway(self):
        self.booking.payment_id = 'order_1'
        self.booking.save()
        self.razorpay.check_status.return_value = {'paid': True, 'status': 'captured', 'payment_id': 'pay_1'}

        result = self.service.payment_status(self.student, self.booking.id)
        self.assertTrue(result['is_paid'])
        self.assertEqual(result['status'], BookingStatus.CONFIRMED)

    def test_status_survives_gateway_error(self):
        self.with_order()
        self.razorpay.check_status.side_effect = GatewayError('timeout')
        result = self.service.payment_status(self.student, self.booking.id, order_id='order_1')
        self.assertFalse(result['is_paid'])

    def test_status_ignores_client_supplied_upi_reference(self):
        result = self.service.payment_status(self.student, self.booking.id, order_id='upi_forged')

        self.assertFalse(result['is_paid'])
        self.razorpay.check_status.assert_not_called()
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, PaymentStatus.PENDING)
        self.assertEqual(self.booking.status, BookingStatus.PENDING)

    def test_status_ignores_foreign_order_id(self):
        self.with_order()
        result = self.service.payment_status(self.student, self.booking.id, order_id='order_other')

        self.assertFalse(result['is_paid'])
        self.razorpay.check_status.assert_not_called()

    def test_stored_upi_reference_is_never_paid_by_lookup(self):
        self.with_order('upi_1700000000000_1')
        result = self.service.payment_status(self.student, self.booking.id)

        self.assertFalse(result['is_paid'])
        self.assertFalse(self.upi.check_status('upi_1700000000000_1')['paid'])

    def test_poll_until_paid(self):
        self.booking.payment_id = 'order_1'
        self.booking.save()
        self.razorpay.check_status.side_effect = [
            {'paid': False, 'status': 'created', 'payment_id': None},
            {'paid': True, 'status': 'captured', 'payment_id': 'pay_1'},
        ]
        sleep = mock.Mock()

        result = self.service.poll_until_paid(self.student, self.booking.id, interval=3, timeout=60,
                                              sleep=sleep, clock=lambda: 0)
        self.assertTrue(result['is_paid'])
        sleep.assert_called_once_with(3)

    def test_poll_times_out(self):
        self.booking.payment_id = 'order_1'
        self.booking.save()
        self.razorpay.check_status.return_value = {'paid': False, 'status': 'created', 'payment_id': None}
        sleep = mock.Mock()

        result = self.service.poll_until_paid(self.student, self.booking.id, interval=3, timeout=5,
                                              sleep=sleep, clock=iter([0, 0, 10]).__next__)
        self.assertFalse(result['is_paid'])
        self.assertEqual(sleep.call_count, 1)

    def test_webhook_marks_booking_paid(self):
        self.booking.payment_id = 'order_1'
        self.booking.save()
        event = {'event': 'payment.captured', 'payload': {'payment': {'entity': {'id': 'pay_1', 'order_id': 'order_1'}}}}
        self.razorpay.handle_webhook.return_value = json.dumps(event)

        result = self.service.handle_webhook(b'{}', 'sig')
        self.assertTrue(result['handled'])
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, PaymentStatus.PAID)

    def cancel_paid_booking(self):
        self.service.confirm_upi(self.student, self.booking.id)
        BookingService().cancel_booking(Booking.objects.get(id=self.booking.id), self.student)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, PaymentStatus.REFUNDED)

    def test_status_after_cancel_stays_refunded(self):
        self.cancel_paid_booking()
        self.razorpay.check_status.return_value = {'paid': True, 'status': 'captured', 'payment_id': 'pay_1'}

        result = self.service.payment_status(self.student, self.booking.id)

        self.assertFalse(result['is_paid'])
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, PaymentStatus.REFUNDED)
        self.assertEqual(self.booking.status, BookingStatus.CANCELLED)

    def test_webhook_after_cancel_is_ignored(self):
        self.with_order()
        BookingService().cancel_booking(self.booking, self.student)
        event = {'event': 'payment.captured', 'payload': {'payment': {'entity': {'id': 'pay_1', 'order_id': 'order_1'}}}}
        self.razorpay.handle_webhook.return_value = json.dumps(event)

        self.service.handle_webhook(b'{}', 'sig')

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, BookingStatus.CANCELLED)
        self.assertEqual(self.booking.payment_status, PaymentStatus.PENDING)

    def test_cancelled_booking_cannot_be_paid(self):
        BookingService().cancel_booking(self.booking, self.student)
        with self.assertRaises(BookingCancelledError):
            self.service.create_order(self.student, self.booking.id)
        with self.assertRaises(BookingCancelledError):
            self.service.confirm_upi(self.student, self.booking.id)

    def test_webhook_ignores_other_events(self):
        self.razorpay.handle_webhook.return_value = json.dumps({'event': 'order.paid'})
        self.assertFalse(self.service.handle_webhook(b'{}', 'sig')['handled'])

    def test_upi_details(self):
        result = self.service.upi_details(self.student, self.booking.id)
        self.assertEqual(result['vpa'], 'secondhome@upi')
        self.assertEqual(result['amount'], 13000.0)

    def test_confirm_upi(self):
        booking = self.service.confirm_upi(self.student, self.booking.id, upi_id='asha@upi', transaction_ref='T123')

        self.assertEqual(booking.payment_status, PaymentStatus.PAID)
        self.assertTrue(booking.payment_id.startswith('upi_'))
        self.assertEqual(booking.payment_details['transaction_ref'], 'T123')
        self.assertTrue(self.service.upi_status(self.student, self.booking.id)['is_paid'])

    def test_confirm_upi_checks_amount(self):
        with self.assertRaises(PaymentAmountMismatchError):
            self.service.confirm_upi(self.student, self.booking.id, amount=1)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, PaymentStatus.PENDING)

        booking = self.service.confirm_upi(self.student, self.booking.id, amount='13000.00')
        self.assertEqual(booking.payment_status, PaymentStatus.PAID)
