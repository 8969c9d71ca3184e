"""Authentication views - email/phone OTP, registration, login and profile"""
from django.conf import settings
from django.utils.crypto import constant_time_compare
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.authentication import JWTAuthentication

from ..serializers import ProfileSerializer, BankAccountSerializer
from ..services import AuthService
from ..services.auth_service import get_profile
from ..utils.constants import OTPPurpose
from ..utils.validators import is_truthy


def result_response(result, success_status=status.HTTP_200_OK):
    """Translate a service result dict into a Response"""
    if not result.get('success'):
        return Response({'error': result['error']}, status=result.get('status_code', status.HTTP_400_BAD_REQUEST))
    body = {k: v for k, v in result.items() if k != 'status_code'}
    return Response(body, status=result.get('status_code', success_status))


class AuthViewSet(viewsets.ViewSet):
    permission_classes = [AllowAny]
    authentication_classes = [JWTAuthentication]

    @action(detail=False, methods=['post'], url_path='send-otp')
    def send_otp(self, request):
        result = AuthService().send_email_otp(
            request.data.get('email'),
            purpose=request.data.get('type', OTPPurpose.REGISTRATION),
            user_type=request.data.get('userType'),
        )
        return result_response(result)

    @action(detail=False, methods=['post'], url_path='verify-otp')
    def verify_otp(self, request):
        result = AuthService().verify_email_otp(
            request.data.get('email'),
            request.data.get('otp'),
            purpose=request.data.get('type', OTPPurpose.REGISTRATION),
        )
        return result_response(result)

    @action(detail=False, methods=['post'], url_path='send-phone-otp')
    def send_phone_otp(self, request):
        result = AuthService().send_phone_otp(
            request.data.get('phone'),
            purpose=request.data.get('type', OTPPurpose.PHONE_VERIFICATION),
            user=request.user,
        )
        return result_response(result)

    @action(detail=False, methods=['post'], url_path='verify-phone-otp')
    def verify_phone_otp(self, request):
        result = AuthService().verify_phone_otp(
            request.data.get('phone'),
            request.data.get('otp'),
            purpose=request.data.get('type', OTPPurpose.PHONE_VERIFICATION),
            user=request.user,
        )
        return result_response(result)

    @action(detail=False, methods=['post'], url_path='register')
    def register(self, request):
        result = AuthService().register_with_otp(
            request.data.get('name'),
            request.data.get('email'),
            request.data.get('password'),
            request.data.get('otp'),
            phone=request.data.get('phone'),
            is_property_owner=is_truthy(request.data.get('isPropertyOwner')),
        )
        return result_response(result, success_status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'], url_path='login')
    def login(self, request):
        result = AuthService().login(request.data.get('email'), request.data.get('password'))
        return result_response(result)

    @action(detail=False, methods=['post'], url_path='check-email')
    def check_email(self, request):
        return Response(AuthService().check_email(request.data.get('email')), status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'], url_path='reset-password')
    def reset_password(self, request):
        result = AuthService().reset_password(
            request.data.get('email'), request.data.get('newPassword'), code=request.data.get('otp'),
        )
        return result_response(result)

    @action(detail=False, methods=['post'], url_path='bootstrap-admin')
    def bootstrap_admin(self, request):
        expected = settings.ADMIN_SEED_TOKEN
        if expected and not constant_time_compare(request.headers.get('X-Admin-Seed-Token', ''), expected):
            return Response({'error': 'Unauthorized'}, status=status.HTTP_401_UNAUTHORIZED)

        result = AuthService().bootstrap_admin()
        return result_response(result)


class ProfileView(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]
    authentication_classes = [JWTAuthentication]

    @action(detail=False, methods=['get', 'patch'], url_path='me')
    def me(self, request):
        profile = get_profile(request.user)
        if request.method == 'GET':
            return Response(ProfileSerializer(profile).data)

        serializer = ProfileSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get', 'put'], url_path='bank-account')
    def bank_account(self, request):
        profile = get_profile(request.user)
        if not profile.is_owner:
            return Response({'error': 'Only property owners can manage payout details'},
                            status=status.HTTP_403_FORBIDDEN)
        if request.method == 'GET':
            return Response(BankAccountSerializer(profile).data)

        serializer = BankAccountSerializer(profile, data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({'message': 'Bank account details saved', 'bank_account': serializer.data},
                        status=status.HTTP_200_OK)
