"""Payment views - Razorpay checkout, payment links, UPI and webhooks"""
import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.authentication import JWTAuthentication

from ..payment_gateways import PaymentError
from ..serializers import BookingSerializer
from ..services import PaymentService

logger = logging.getLogger(__name__)


def error_response(e):
    body = {'error': e.message}
    if e.details:
        body['details'] = e.details
    return Response(body, status=e.status_code)


class PaymentViewSet(viewsets.ViewSet):
    authentication_classes = [JWTAuthentication]
    permission_classes = [IsAuthenticated]

    def _booking_id(self, request):
        return (
            request.data.get('bookingId') or request.data.get('booking_id')
            or request.query_params.get('bookingId') or request.query_params.get('booking_id')
        )

    @action(detail=False, methods=['post'], url_path='razorpay/order')
    def create_order(self, request):
        booking_id = self._booking_id(request)
        if not booking_id:
            return Response({'error': 'bookingId is required'}, status=status.HTTP_400_BAD_REQUEST)
        try:
            order = PaymentService().create_order(request.user, booking_id, request.data.get('amount'))
        except PaymentError as e:
            return error_response(e)
        return Response(order, status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'], url_path='razorpay/payment-link')
    def create_payment_link(self, request):
        booking_id = self._booking_id(request)
        if not booking_id:
            return Response({'error': 'bookingId is required'}, status=status.HTTP_400_BAD_REQUEST)
        try:
            link = PaymentService().create_payment_link(request.user, booking_id, request.data.get('amount'))
        except PaymentError as e:
            return error_response(e)
        return Response(link, status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'], url_path='razorpay/verify')
    def verify(self, request):
        try:
            booking = PaymentService().verify_payment(
                request.user,
                self._booking_id(request),
                request.data.get('razorpay_order_id'),
                request.data.get('razorpay_payment_id'),
                request.data.get('razorpay_signature'),
            )
        except PaymentError as e:
            return error_response(e)
        return Response({'success': True, 'booking': BookingSerializer(booking).data}, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'], url_path='status')
    def payment_status(self, request):
        booking_id = self._booking_id(request)
        if not booking_id:
            return Response({'error': 'bookingId is required'}, status=status.HTTP_400_BAD_REQUEST)
        try:
            result = PaymentService().payment_status(request.user, booking_id, request.query_params.get('orderId'))
        except PaymentError as e:
            return error_response(e)
        return Response(result, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'], url_path='upi/details')
    def upi_details(self, request):
        try:
            details = PaymentService().upi_details(request.user, self._booking_id(request))
        except PaymentError as e:
            return error_response(e)
        return Response(details, status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'], url_path='upi/confirm')
    def upi_confirm(self, request):
        try:
            booking = PaymentService().confirm_upi(
                request.user,
                self._booking_id(request),
                amount=request.data.get('amount'),
                upi_id=request.data.get('upiId'),
                transaction_ref=request.data.get('transactionRef'),
            )
        except PaymentError as e:
            return error_response(e)
        return Response({'success': True, 'booking': BookingSerializer(booking).data}, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'], url_path='upi/status')
    def upi_status(self, request):
        try:
            result = PaymentService().upi_status(request.user, self._booking_id(request))
        except PaymentError as e:
            return error_response(e)
        return Response(result, status=status.HTTP_200_OK)


@csrf_exempt
@require_POST
def razorpay_webhook(request):
    signature = request.META.get('HTTP_X_RAZORPAY_SIGNATURE')
    try:
        result = PaymentService().handle_webhook(request.body, signature)
    except PaymentError as e:
        logger.warning(f'[PAYMENT] Webhook rejected: {e.message}')
        return JsonResponse({'error': e.message}, status=e.status_code)
    return JsonResponse(result, status=200)
