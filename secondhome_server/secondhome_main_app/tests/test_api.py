"""API tests for the REST endpoints"""
from datetime import timedelta
from unittest import mock

from django.contrib.auth.models import User
from django.core.cache import cache
from django.test import override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from ..models import OTP, Property, Booking, Conversation, MessSubscription, Notification
from ..utils.constants import BookingStatus, PaymentStatus, UserRole
from .helpers import make_user, make_property, make_mess, make_booking


@override_settings(GROQ_API_KEY='', EMAIL_HOST_USER='', EMAIL_HOST_PASSWORD='')
class PropertyAPITest(APITestCase):
    def setUp(self):
        cache.clear()
        self.owner = make_user('owner@example.com', role=UserRole.OWNER)
        self.student = make_user('student@example.com')
        self.prop = make_property(self.owner)
        self.pending = make_property(self.owner, title='Pending PG', is_approved=False)

    def test_list_hides_unapproved(self):
        response = self.client.get('/api/properties/', {'types': 'PG'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['properties'][0]['id'], self.prop.id)
        self.assertIn('amenities', response.data['facets'])

    def test_unpublished_detail_visible_to_owner_only(self):
        url = f'/api/properties/{self.pending.id}/'
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(self.owner)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['moderation_state'], 'pending')

    def test_student_cannot_create(self):
        self.client.force_authenticate(self.student)
        response = self.client.post('/api/properties/', {'title': 'My Room'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_owner_creates_pending_listing(self):
        admin = make_user('admin@example.com', role=UserRole.ADMIN)
        self.client.force_authenticate(self.owner)
        response = self.client.post('/api/properties/', {
            'title': 'Lakeview PG',
            'property_type': 'PG',
            'gender': 'Female',
            'price': '9500',
            'security_deposit': '5000',
            'address': '4 Lake Road',
            'location': 'HSR Layout',
            'city': 'Bangalore',
            'pincode': '560102',
            'amenities': ['wifi'],
            'is_approved': True,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        prop = Property.objects.get(id=response.data['property']['id'])
        self.assertEqual(prop.owner, self.owner)
        self.assertEqual(prop.gender, 'female')
        self.assertFalse(prop.is_approved)
        self.assertTrue(Notification.objects.filter(user=admin, title='New Property Submitted').exists())

    def test_create_validation(self):
        self.client.force_authenticate(self.owner)
        response = self.client.post('/api/properties/', {
            'title': 'PG', 'price': '0', 'pincode': '12', 'latitude': 12.9,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('title', response.data)
        self.assertIn('price', response.data)
        self.assertIn('pincode', response.data)

    def test_other_owner_cannot_update(self):
        other = make_user('other@example.com', role=UserRole.OWNER)
        self.client.force_authenticate(other)
        response = self.client.patch(f'/api/properties/{self.prop.id}/', {'price': '1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_favorite_toggle(self):
        self.client.force_authenticate(self.student)
        response = self.client.post(f'/api/properties/{self.prop.id}/favorite/')
        self.assertTrue(response.data['favorited'])

        response = self.client.get('/api/properties/favorites/')
        self.assertEqual([p['id'] for p in response.data], [self.prop.id])

    def test_track_view_anonymous(self):
        response = self.client.post(f'/api/properties/{self.prop.id}/view/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.prop.refresh_from_db()
        self.assertEqual(self.prop.views_count, 1)


class AuthAPITest(APITestCase):
    def setUp(self):
        self.user = make_user('student@example.com', password='secret123')

    def test_login_returns_usable_token(self):
        response = self.client.post('/api/auth/login/', {'email': 'student@example.com', 'password': 'secret123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {response.data["access"]}')
        profile = self.client.get('/api/profile/me/')
        self.assertEqual(profile.status_code, status.HTTP_200_OK)
        self.assertEqual(profile.data['email'], 'student@example.com')
        self.assertTrue(profile.data['has_password'])

    def test_login_failure(self):
        response = self.client.post('/api/auth/login/', {'email': 'student@example.com', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('error', response.data)

    @override_settings(EMAIL_HOST_USER='noreply@secondhome.com', EMAIL_HOST_PASSWORD='secret')
    def test_password_reset_needs_verified_otp(self):
        response = self.client.post('/api/auth/send-otp/', {
            'email': 'student@example.com', 'type': 'password-reset',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post('/api/auth/reset-password/', {
            'email': 'student@example.com', 'newPassword': 'attacker1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.user.refresh_from_db()
        self.assertFalse(self.user.check_password('attacker1'))

        code = OTP.objects.get(email='student@example.com').code
        response = self.client.post('/api/auth/verify-otp/', {
            'email': 'student@example.com', 'otp': code, 'type': 'password-reset',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post('/api/auth/reset-password/', {
            'email': 'student@example.com', 'newPassword': 'newsecret',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('newsecret'))

    def test_register_with_string_false_owner_flag(self):
        OTP.objects.create(
            email='new@example.com', code='123456', purpose='registration',
            expires_at=timezone.now() + timedelta(minutes=10),
        )
        response = self.client.post('/api/auth/register/', {
            'name': 'New Student', 'email': 'new@example.com', 'password': 'secret123',
            'otp': '123456', 'isPropertyOwner': 'false',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(email='new@example.com').profile.role, UserRole.USER)

    def test_profile_requires_authentication(self):
        self.assertEqual(self.client.get('/api/profile/me/').status_code, status.HTTP_401_UNAUTHORIZED)

    def test_profile_phone_change_resets_verification(self):
        self.user.profile.phone = '+919876543210'
        self.user.profile.phone_verified = True
        self.user.profile.save()

        self.client.force_authenticate(self.user)
        response = self.client.patch('/api/profile/me/', {'phone': '9123456789'}, format='json')
        self.assertEqual(response.data['phone'], '+919123456789')
        self.assertFalse(response.data['phone_verified'])

    def test_bank_account_owner_only(self):
        self.client.force_authenticate(self.user)
        self.assertEqual(self.client.get('/api/profile/bank-account/').status_code, status.HTTP_403_FORBIDDEN)

    @override_settings(ADMIN_SEED_TOKEN='seed-token', ADMIN_EMAIL='root@secondhome.com', ADMIN_PASSWORD='adminpass')
    def test_bootstrap_admin_requires_seed_token(self):
        response = self.client.post('/api/auth/bootstrap-admin/', HTTP_X_ADMIN_SEED_TOKEN='wrong')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        response = self.client.post('/api/auth/bootstrap-admin/', HTTP_X_ADMIN_SEED_TOKEN='seed-token')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(User.objects.get(email='root@secondhome.com').is_staff)

    def test_check_email(self):
        response = self.client.post('/api/auth/check-email/', {'email': 'student@example.com'}, format='json')
        self.assertTrue(response.data['exists'])


class AdminAPITest(APITestCase):
    def setUp(self):
        self.admin = make_user('admin@example.com', role=UserRole.ADMIN)
        self.owner = make_user('owner@example.com', role=UserRole.OWNER)
        self.prop = make_property(self.owner, is_approved=False)

    def test_anonymous_gets_401(self):
        self.assertEqual(self.client.get('/api/admin/properties/').status_code, status.HTTP_401_UNAUTHORIZED)

    def test_non_admin_gets_401(self):
        self.client.force_authenticate(self.owner)
        self.assertEqual(self.client.get('/api/admin/properties/').status_code, status.HTTP_401_UNAUTHORIZED)

    def test_pending_queue_and_approve(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/admin/properties/')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['owner_email'], 'owner@example.com')

        response = self.client.post('/api/admin/approve/', {'type': 'property', 'id': self.prop.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.prop.refresh_from_db()
        self.assertTrue(self.prop.is_approved)

    def test_approve_missing_listing(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post('/api/admin/reject/', {'type': 'mess', 'id': 9999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @override_settings(GROQ_API_KEY='')
    def test_ai_review_without_key(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post('/api/admin/ai-review/', {'type': 'property', 'id': self.prop.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'GROQ_API_KEY not configured')

    def test_dashboard(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/admin/dashboard/')
        self.assertEqual(response.data['properties']['pending'], 1)

    def test_public_stats(self):
        cache.clear()
        response = self.client.get('/api/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['property_owners'], 1)


class BookingAPITest(APITestCase):
    def setUp(self):
        self.owner = make_user('owner@example.com', role=UserRole.OWNER)
        self.student = make_user('student@example.com')
        self.prop = make_property(self.owner)

    def test_create_booking(self):
        self.client.force_authenticate(self.student)
        response = self.client.post('/api/bookings/', {
            'property': self.prop.id, 'move_in_date': '2026-12-01', 'duration_months': 2,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_amount'], '21000.00')
        self.assertEqual(response.data['property_detail']['title'], 'Sunrise PG')

    def test_booking_missing_or_unavailable_property(self):
        self.client.force_authenticate(self.student)
        response = self.client.post('/api/bookings/', {'property': 9999, 'move_in_date': '2026-12-01'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        pending = make_property(self.owner, is_approved=False)
        response = self.client.post('/api/bookings/', {'property': pending.id, 'move_in_date': '2026-12-01'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_owner_confirms_then_completes(self):
        booking = make_booking(self.student, self.prop)
        self.client.force_authenticate(self.owner)

        response = self.client.post(f'/api/bookings/{booking.id}/complete/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(f'/api/bookings/{booking.id}/confirm/')
        self.assertEqual(response.data['status'], BookingStatus.CONFIRMED)
        response = self.client.post(f'/api/bookings/{booking.id}/complete/')
        self.assertEqual(response.data['status'], BookingStatus.COMPLETED)

    def test_student_cancels(self):
        booking = make_booking(self.student, self.prop)
        self.client.force_authenticate(self.student)

        self.assertEqual(self.client.post(f'/api/bookings/{booking.id}/cancel/').status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.post(f'/api/bookings/{booking.id}/cancel/').status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_students_booking_is_hidden(self):
        booking = make_booking(self.student, self.prop)
        self.client.force_authenticate(make_user('other@example.com'))
        self.assertEqual(self.client.get(f'/api/bookings/{booking.id}/').status_code, status.HTTP_404_NOT_FOUND)

    @mock.patch('secondhome_main_app.services.booking_service.send_whatsapp_message')
    def test_schedule_visit(self, send_message):
        send_message.return_value = {'status': 'error', 'message': 'not configured'}
        visit_date = (timezone.localdate() + timedelta(days=2)).isoformat()
        response = self.client.post('/api/visits/', {
            'property': self.prop.id, 'name': 'Asha', 'phone': '9876543210',
            'email': 'asha@example.com', 'date': visit_date, 'time': '11:00',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['whatsapp_sent'])
        self.assertTrue(response.data['whatsapp_link'].startswith('https://wa.me/'))


class PaymentAPITest(APITestCase):
    def setUp(self):
        self.owner = make_user('owner@example.com', role=UserRole.OWNER)
        self.student = make_user('student@example.com')
        self.booking = make_booking(self.student, make_property(self.owner))

    def test_requires_booking_id(self):
        self.client.force_authenticate(self.student)
        response = self.client.post('/api/payments/razorpay/order/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_booking(self):
        self.client.force_authenticate(self.student)
        response = self.client.post('/api/payments/razorpay/order/', {'bookingId': 9999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @override_settings(RAZORPAY_KEY_ID='', RAZORPAY_KEY_SECRET='')
    def test_gateway_not_configured(self):
        self.client.force_authenticate(self.student)
        response = self.client.post('/api/payments/razorpay/order/', {'bookingId': self.booking.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Payment gateway not configured')

    def test_manual_upi_confirmation(self):
        self.client.force_authenticate(self.student)
        response = self.client.post('/api/payments/upi/confirm/', {
            'bookingId': self.booking.id, 'upiId': 'asha@upi', 'transactionRef': 'T1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['booking']['payment_status'], PaymentStatus.PAID)

        response = self.client.get('/api/payments/upi/status/', {'bookingId': self.booking.id})
        self.assertTrue(response.data['is_paid'])

    def test_other_user_forbidden(self):
        self.client.force_authenticate(self.owner)
        response = self.client.get('/api/payments/status/', {'bookingId': self.booking.id})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_webhook_without_signature(self):
        response = self.client.post('/api/webhook/razorpay/', data='{}', content_type='application/json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Booking.objects.get(id=self.booking.id).payment_status, PaymentStatus.PENDING)

    def test_status_with_forged_upi_reference(self):
        self.client.force_authenticate(self.student)
        response = self.client.get('/api/payments/status/', {'bookingId': self.booking.id, 'orderId': 'upi_forged'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_paid'])
        booking = Booking.objects.get(id=self.booking.id)
        self.assertEqual(booking.payment_status, PaymentStatus.PENDING)
        self.assertEqual(booking.status, BookingStatus.PENDING)

    def test_upi_confirmation_amount_mismatch(self):
        self.client.force_authenticate(self.student)
        response = self.client.post('/api/payments/upi/confirm/', {
            'bookingId': self.booking.id, 'amount': 100,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Booking.objects.get(id=self.booking.id).payment_status, PaymentStatus.PENDING)

    def test_status_poll_after_cancel(self):
        self.client.force_authenticate(self.student)
        self.client.post('/api/payments/upi/confirm/', {'bookingId': self.booking.id}, format='json')
        self.assertEqual(self.client.post(f'/api/bookings/{self.booking.id}/cancel/').status_code, status.HTTP_200_OK)

        response = self.client.get('/api/payments/status/', {'bookingId': self.booking.id})
        self.assertFalse(response.data['is_paid'])
        booking = Booking.objects.get(id=self.booking.id)
        self.assertEqual(booking.payment_status, PaymentStatus.REFUNDED)
        self.assertEqual(booking.status, BookingStatus.CANCELLED)

        response = self.client.post('/api/payments/upi/confirm/', {'bookingId': self.booking.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class MessAndReviewAPITest(APITestCase):
    def setUp(self):
        self.owner = make_user('owner@example.com', role=UserRole.OWNER)
        self.student = make_user('student@example.com')
        self.prop = make_property(self.owner)
        self.mess = make_mess(self.owner)

    def test_mess_list_and_subscribe(self):
        self.assertEqual(len(self.client.get('/api/messes/').data), 1)

        self.client.force_authenticate(self.student)
        response = self.client.post(f'/api/messes/{self.mess.id}/subscribe/', {
            'start_date': '2026-11-01', 'monthly_price': '1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(MessSubscription.objects.get().monthly_price, self.mess.monthly_price)
        self.assertEqual(len(self.client.get('/api/mess-subscriptions/').data), 1)

    def test_review_once_per_property(self):
        self.client.force_authenticate(self.student)
        payload = {'property': self.prop.id, 'rating': 4, 'comment': 'Clean rooms'}
        self.assertEqual(self.client.post('/api/reviews/', payload, format='json').status_code, status.HTTP_201_CREATED)
        self.assertEqual(self.client.post('/api/reviews/', payload, format='json').status_code, status.HTTP_400_BAD_REQUEST)

        self.prop.refresh_from_db()
        self.assertEqual(self.prop.reviews_count, 1)
        self.assertEqual(float(self.prop.rating), 4.0)

    def test_review_rating_range(self):
        self.client.force_authenticate(self.student)
        response = self.client.post('/api/reviews/', {'property': self.prop.id, 'rating': 6}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


@override_settings(EMAIL_HOST_USER='', EMAIL_HOST_PASSWORD='')
class ChatAPITest(APITestCase):
    def test_empty_assistant_message(self):
        response = self.client.post('/api/chat/assistant/', {'message': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_live_chat_flow(self):
        admin = make_user('admin@example.com', role=UserRole.ADMIN)
        response = self.client.post('/api/chat/escalate/', {'name': 'Asha', 'email': 'asha@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        conversation_id = response.data['conversation_id']
        token = response.data['token']

        response = self.client.get(f'/api/conversations/{conversation_id}/', {'token': 'wrong'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.post(f'/api/conversations/{conversation_id}/messages/',
                                    {'token': token, 'content': 'Need help with my booking'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.force_authenticate(admin)
        self.assertEqual(len(self.client.get('/api/admin/chats/').data), 1)
        response = self.client.post(f'/api/admin/chats/{conversation_id}/reply/', {'content': 'On it'}, format='json')
        self.assertEqual(response.data['status'], 'connected')
        self.client.post(f'/api/admin/chats/{conversation_id}/close/')
        self.assertEqual(len(self.client.get('/api/admin/chats/').data), 0)
        self.assertEqual(Conversation.objects.get(id=conversation_id).status, 'closed')


class NotificationAPITest(APITestCase):
    def setUp(self):
        self.student = make_user('student@example.com')
        Notification.objects.create(user=self.student, title='Hi', message='Welcome')

    def test_list_and_mark_all_read(self):
        self.client.force_authenticate(self.student)
        response = self.client.get('/api/notifications/')
        self.assertEqual(response.data['unread_count'], 1)

        self.client.post('/api/notifications/read-all/')
        self.assertEqual(self.client.get('/api/notifications/').data['unread_count'], 0)

    def test_broadcast_is_admin_only(self):
        self.client.force_authenticate(self.student)
        response = self.client.post('/api/notifications/broadcast/', {'title': 'x', 'message': 'y'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class LocationAPITest(APITestCase):
    def test_distance(self):
        response = self.client.get('/api/location/distance/', {'lat1': 12.9716, 'lon1': 77.5946, 'lat2': 12.9716, 'lon2': 77.5946})
        self.assertEqual(response.data, {'distance_km': 0.0})

    def test_invalid_coordinates(self):
        self.assertEqual(self.client.get('/api/location/weather/', {'lat': 'x', 'lon': 1}).status_code, 400)
        self.assertEqual(self.client.get('/api/location/reverse/', {'lat': 95, 'lon': 1}).status_code, 400)

    @override_settings(OPENWEATHER_API_KEY='')
    def test_weather_mock(self):
        response = self.client.get('/api/location/weather/', {'lat': 12.97, 'lon': 77.59})
        self.assertTrue(response.data['is_mock_data'])

    def test_community_reviews_require_name(self):
        self.assertEqual(self.client.get('/api/location/community-reviews/').status_code, 400)
