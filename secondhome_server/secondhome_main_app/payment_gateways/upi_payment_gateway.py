import time
from urllib.parse import urlencode, quote

from django.conf import settings

from .payment_gateway import PaymentGateway

UPI_REFERENCE_PREFIX = 'upi_'


class UpiPaymentGateway(PaymentGateway):
    """Direct UPI transfer to the platform VPA, confirmed manually by the payer"""

    def __init__(self, vpa=None, payee_name=None):
        self.vpa = vpa or settings.UPI_VPA
        self.payee_name = payee_name or settings.UPI_PAYEE_NAME

    def build_upi_link(self, amount, note):
        params = {
            'pa': self.vpa,
            'pn': self.payee_name,
            'am': f'{float(amount):.2f}',
            'cu': 'INR',
            'tn': note,
        }
        return 'upi://pay?' + urlencode(params, quote_via=quote)

    def new_reference(self, booking):
        return f'{UPI_REFERENCE_PREFIX}{int(time.time() * 1000)}_{booking.id}'

    def initiate_payment(self, booking, amount):
        return {
            'upi_link': self.build_upi_link(amount, f'Booking {booking.id}'),
            'vpa': self.vpa,
            'payee_name': self.payee_name,
            'amount': float(amount),
        }

    def check_status(self, payment_ref):
        # Manual transfers carry no provider state, only the booking record can say paid
        return {'paid': False, 'status': 'manual', 'payment_id': None}
