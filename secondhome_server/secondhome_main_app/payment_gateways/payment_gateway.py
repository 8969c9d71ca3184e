from abc import ABC, abstractmethod


class PaymentError(Exception):
    """Base payment failure carrying the HTTP status to report"""
    status_code = 400

    def __init__(self, message, status_code=None, details=None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class GatewayNotConfiguredError(PaymentError):
    status_code = 500


class GatewayAuthenticationError(PaymentError):
    status_code = 401


class GatewayError(PaymentError):
    status_code = 502


class InvalidSignatureError(PaymentError):
    status_code = 400


class PaymentGateway(ABC):
    @abstractmethod
    def initiate_payment(self, booking, amount):
        pass

    @abstractmethod
    def check_status(self, payment_ref):
        """Return {'paid': bool, 'status': str, 'payment_id': str|None, ...}"""
        pass
