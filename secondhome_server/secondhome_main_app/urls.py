from django.urls import path, include
from rest_framework import routers

from .views import (
    AuthViewSet, ProfileView, PropertyViewSet, MessViewSet, MessSubscriptionViewSet,
    BookingViewSet, VisitRequestViewSet, PaymentViewSet, razorpay_webhook,
    AdminModerationViewSet, StatsViewSet, ReviewViewSet, LocationViewSet,
    ChatViewSet, ConversationViewSet, AgentConversationViewSet, NotificationViewSet,
)

router = routers.DefaultRouter()
router.register(r"auth", AuthViewSet, basename="auth")
router.register(r"profile", ProfileView, basename="profile")
router.register(r"properties", PropertyViewSet, basename="properties")
router.register(r"messes", MessViewSet, basename="messes")
router.register(r"mess-subscriptions", MessSubscriptionViewSet, basename="mess-subscriptions")
router.register(r"bookings", BookingViewSet, basename="bookings")
router.register(r"visits", VisitRequestViewSet, basename="visits")
router.register(r"payments", PaymentViewSet, basename="payments")
router.register(r"reviews", ReviewViewSet, basename="reviews")
router.register(r"location", LocationViewSet, basename="location")
router.register(r"chat", ChatViewSet, basename="chat")
router.register(r"conversations", ConversationViewSet, basename="conversations")
router.register(r"notifications", NotificationViewSet, basename="notifications")
router.register(r"stats", StatsViewSet, basename="stats")

# Admin endpoints
router.register(r"admin/chats", AgentConversationViewSet, basename="admin-chats")
router.register(r"admin", AdminModerationViewSet, basename="admin")

urlpatterns = [
    path('', include(router.urls)),
    path('webhook/razorpay/', razorpay_webhook, name='razorpay-webhook'),
]
