from django.contrib import admin

from .models import (
    Profile, OTP, OTPAttempt, Property, Mess, MessSubscription, Booking, VisitRequest,
    Review, Notification, Conversation, ConversationMessage,
)
from .services import ModerationService

# Customize admin site
admin.site.site_header = "Second Home Administration"
admin.site.site_title = "Second Home Admin"
admin.site.index_title = "Welcome to Second Home Admin Panel"


class ModeratedListingAdmin(admin.ModelAdmin):
    moderation_kind = None
    actions = ['approve_listings', 'reject_listings']

    def approve_listings(self, request, queryset):
        service = ModerationService()
        for listing in queryset:
            service.approve(self.moderation_kind, listing.id, request.user)
        self.message_user(request, f"{queryset.count()} listings approved.")
    approve_listings.short_description = "Approve selected listings"

    def reject_listings(self, request, queryset):
        service = ModerationService()
        for listing in queryset:
            service.reject(self.moderation_kind, listing.id, request.user, 'Rejected from the admin panel')
        self.message_user(request, f"{queryset.count()} listings rejected.")
    reject_listings.short_description = "Reject selected listings"


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'name', 'phone', 'phone_verified', 'role', 'created_at']
    list_filter = ['role', 'phone_verified']
    search_fields = ['user__username', 'user__email', 'name', 'phone']
    ordering = ['-created_at']
    list_per_page = 50


@admin.register(OTP)
class OTPAdmin(admin.ModelAdmin):
    list_display = ['id', 'email', 'phone', 'purpose', 'expires_at', 'created_at']
    list_filter = ['purpose']
    search_fields = ['email', 'phone']
    exclude = ['code']


@admin.register(OTPAttempt)
class OTPAttemptAdmin(admin.ModelAdmin):
    list_display = ['identifier', 'attempt_count', 'last_attempt', 'blocked_until']
    search_fields = ['identifier']


@admin.register(Property)
class PropertyAdmin(ModeratedListingAdmin):
    moderation_kind = 'property'
    list_display = ['id', 'title', 'city', 'property_type', 'gender', 'price', 'is_approved', 'is_rejected', 'created_at']
    list_filter = ['is_approved', 'is_rejected', 'property_type', 'gender', 'verification_status', 'city']
    search_fields = ['title', 'location', 'city', 'owner__email']
    ordering = ['-created_at']
    readonly_fields = ['rating', 'reviews_count', 'views_count', 'ai_review', 'created_at', 'updated_at']
    list_per_page = 50


@admin.register(Mess)
class MessAdmin(ModeratedListingAdmin):
    moderation_kind = 'mess'
    list_display = ['id', 'name', 'city', 'monthly_price', 'is_approved', 'is_rejected', 'created_at']
    list_filter = ['is_approved', 'is_rejected', 'home_delivery_available', 'city']
    search_fields = ['name', 'location', 'city', 'owner__email']
    ordering = ['-created_at']
    readonly_fields = ['rating', 'reviews_count', 'ai_review', 'created_at', 'updated_at']


@admin.register(MessSubscription)
class MessSubscriptionAdmin(admin.ModelAdmin):
    list_display = ['id', 'mess', 'subscriber_name', 'start_date', 'end_date', 'monthly_price', 'status']
    list_filter = ['status', 'start_date']
    search_fields = ['mess__name', 'subscriber_name', 'subscriber_email']


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'property', 'move_in_date', 'total_amount', 'status', 'payment_status', 'payment_method', 'created_at']
    list_filter = ['status', 'payment_status', 'payment_method', 'created_at']
    search_fields = ['user__email', 'property__title', 'payment_id', 'contact_phone']
    ordering = ['-created_at']
    date_hierarchy = 'created_at'
    readonly_fields = ['payment_details', 'created_at', 'updated_at']
    list_per_page = 50


@admin.register(VisitRequest)
class VisitRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'property', 'name', 'phone', 'visit_date', 'visit_time', 'status']
    list_filter = ['status', 'visit_date']
    search_fields = ['name', 'phone', 'email', 'property__title']


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ['id', 'property', 'user', 'rating', 'created_at']
    list_filter = ['rating']
    search_fields = ['property__title', 'user__email', 'comment']


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'type', 'title', 'priority', 'read', 'created_at']
    list_filter = ['type', 'priority', 'read']
    search_fields = ['user__email', 'title']


class ConversationMessageInline(admin.TabularInline):
    model = ConversationMessage
    extra = 0
    readonly_fields = ['sender', 'content', 'created_at']


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'email', 'status', 'agent', 'created_at', 'closed_at']
    list_filter = ['status']
    search_fields = ['name', 'email']
    exclude = ['user_token']
    inlines = [ConversationMessageInline]
