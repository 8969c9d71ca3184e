from .payment_gateway import (
    PaymentGateway, PaymentError, GatewayNotConfiguredError, GatewayAuthenticationError,
    GatewayError, InvalidSignatureError,
)
from .razorpay_payment_gateway import RazorpayPaymentGateway
from .upi_payment_gateway import UpiPaymentGateway

__all__ = [
    'PaymentGateway', 'PaymentError', 'GatewayNotConfiguredError', 'GatewayAuthenticationError',
    'GatewayError', 'InvalidSignatureError', 'RazorpayPaymentGateway', 'UpiPaymentGateway',
]
