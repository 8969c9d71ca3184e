"""Moderation service - admin approval workflow and AI assisted review"""
import json
import logging

from django.conf import settings
from django.contrib.auth.models import User
from django.utils import timezone
from openai import OpenAIError

from ..models import Property, Mess, Booking, Profile
from ..utils import llm
from ..utils.constants import AIRecommendation, NotificationType, NotificationPriority, UserRole
from ..utils.email_utils import send_email
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

ANALYSIS_KEYS = ['legitimacy', 'pricing', 'completeness', 'safety', 'deliveryPackaging']

REVIEW_PROMPT = """You are an AI moderation assistant for a student {platform} platform.
Review the following listing and provide a suggestion-only assessment (DO NOT auto-approve or auto-reject).

Listing Details:
{details}

Analyze the listing for:
1) Realness/Legitimacy: does it look genuine?
2) Pricing reasonableness: price vs details and location fields.
3) Completeness: required fields, contact clarity, {completeness_hint}, photos count.
4) Safety & compliance: suspicious claims, spam/scam indicators.
5) {fifth_check}

Return ONLY valid JSON (no markdown) in this exact shape:
{{
  "confidence": 0-100,
  "score": 0-100,
  "recommendation": "APPROVE" | "REJECT" | "MANUAL_REVIEW",
  "summary": "short human summary",
  "analysis": {{
    "legitimacy": "...",
    "pricing": "...",
    "completeness": "...",
    "safety": "...",
    "deliveryPackaging": "..."
  }},
  "redFlags": ["..."],
  "reason": "one-liner why this recommendation"
}}

Important: This is only a suggestion to help the admin. Never state that you approved/rejected it."""


class ListingNotFoundError(Exception):
    """Raised when the listing to moderate does not exist"""
    pass


def fallback_review(reason='AI response parsing failed'):
    return {
        'confidence': 0,
        'score': 0,
        'recommendation': AIRecommendation.MANUAL_REVIEW,
        'summary': 'AI response was invalid; please review manually.',
        'analysis': {key: 'AI returned invalid JSON' for key in ANALYSIS_KEYS},
        'redFlags': ['AI returned invalid JSON'],
        'reason': reason,
    }


def parse_review(text):
    """Turn a model reply into a review dict, never raising"""
    parsed = llm.extract_json(text)
    if parsed is None:
        return fallback_review()

    recommendation = str(parsed.get('recommendation', '')).upper()
    if recommendation not in AIRecommendation.VALUES:
        recommendation = AIRecommendation.MANUAL_REVIEW

    analysis = parsed.get('analysis') if isinstance(parsed.get('analysis'), dict) else {}
    red_flags = parsed.get('redFlags') if isinstance(parsed.get('redFlags'), list) else []

    return {
        'confidence': parsed.get('confidence', 0),
        'score': parsed.get('score', 0),
        'recommendation': recommendation,
        'summary': parsed.get('summary', ''),
        'analysis': analysis,
        'redFlags': red_flags,
        'reason': parsed.get('reason', ''),
    }


class ModerationService:
    """Approve, reject and AI-review properties and messes"""

    MODELS = {
        'property': Property,
        'mess': Mess,
    }

    def __init__(self):
        self.notifications = NotificationService()

    def get_listing(self, kind, listing_id):
        model = self.MODELS[kind]
        try:
            return model.objects.select_related('owner').get(id=listing_id)
        except (model.DoesNotExist, ValueError):
            raise ListingNotFoundError(f'{kind.title()} not found')

    def listings_by_state(self, kind, state='pending'):
        queryset = self.MODELS[kind].objects.select_related('owner').order_by('-created_at')
        if state == 'approved':
            return queryset.filter(is_approved=True, is_rejected=False)
        if state == 'rejected':
            return queryset.filter(is_rejected=True)
        if state == 'all':
            return queryset
        return queryset.filter(is_approved=False, is_rejected=False)

    def _display_name(self, listing):
        return getattr(listing, 'title', None) or getattr(listing, 'name', '')

    def approve(self, kind, listing_id, admin_user):
        listing = self.get_listing(kind, listing_id)
        listing.is_approved = True
        listing.is_rejected = False
        listing.approved_at = timezone.now()
        listing.approved_by = admin_user
        listing.rejected_at = None
        listing.rejected_by = None
        listing.rejection_reason = ''
        listing.save()

        name = self._display_name(listing)
        self.notifications.create_notification(
            f'{kind.title()} Approved',
            f'"{name}" has been approved and is now visible to students.',
            user_id=listing.owner_id,
            type=NotificationType.LISTING,
            link=f'/{"listings" if kind == "property" else "messes"}/{listing.id}',
            priority=NotificationPriority.HIGH,
            metadata={f'{kind}_id': listing.id, 'action': 'approved'},
        )
        logger.info(f'[MODERATION] {kind} {listing.id} approved by {admin_user.email}')
        return listing

    def reject(self, kind, listing_id, admin_user, reason=''):
        listing = self.get_listing(kind, listing_id)
        listing.is_rejected = True
        listing.is_approved = False
        listing.rejected_at = timezone.now()
        listing.rejected_by = admin_user
        listing.rejection_reason = reason or ''
        listing.save()

        name = self._display_name(listing)
        message = f'"{name}" was not approved.'
        if reason:
            message += f' Reason: {reason}'
        self.notifications.create_notification(
            f'{kind.title()} Rejected',
            message,
            user_id=listing.owner_id,
            type=NotificationType.LISTING,
            priority=NotificationPriority.HIGH,
            metadata={f'{kind}_id': listing.id, 'action': 'rejected'},
        )
        logger.info(f'[MODERATION] {kind} {listing.id} rejected by {admin_user.email}: {reason}')
        return listing

    def listing_details(self, kind, listing):
        if kind == 'mess':
            return {
                'name': listing.name,
                'description': listing.description,
                'address': listing.address,
                'location': listing.location,
                'city': listing.city,
                'state': listing.state,
                'pincode': listing.pincode,
                'monthlyPrice': float(listing.monthly_price),
                'dailyPrice': float(listing.daily_price) if listing.daily_price is not None else None,
                'trialDays': listing.trial_days,
                'homeDeliveryAvailable': listing.home_delivery_available,
                'deliveryRadius': listing.delivery_radius_km,
                'deliveryCharges': float(listing.delivery_charges),
                'packagingAvailable': listing.packaging_available,
                'packagingPrice': float(listing.packaging_price),
                'mealTypes': listing.meal_types,
                'cuisineTypes': listing.cuisine_types,
                'dietTypes': listing.diet_types,
                'openingHours': listing.opening_hours,
                'amenities': listing.amenities,
                'capacity': listing.capacity,
                'contactName': listing.contact_name,
                'contactPhone': listing.contact_phone,
                'contactEmail': listing.contact_email,
                'imagesCount': len(listing.images or []),
            }
        return {
            'title': listing.title,
            'description': listing.description,
            'type': listing.property_type,
            'gender': listing.gender,
            'price': float(listing.price),
            'securityDeposit': float(listing.security_deposit),
            'address': listing.address,
            'location': listing.location,
            'city': listing.city,
            'state': listing.state,
            'pincode': listing.pincode,
            'amenities': listing.amenities,
            'nearbyColleges': [c.get('name') for c in listing.nearby_colleges or []],
            'hasCoordinates': listing.has_coordinates,
            'imagesCount': len(listing.images or []),
        }

    def build_prompt(self, kind, listing):
        details = json.dumps(self.listing_details(kind, listing), indent=2, default=str)
        if kind == 'mess':
            return REVIEW_PROMPT.format(
                platform='mess/food subscription',
                details=details,
                completeness_hint='menu/timings',
                fifth_check='Delivery/Packaging: are charges reasonable and consistent?',
            )
        return REVIEW_PROMPT.format(
            platform='accommodation (PG/flat)',
            details=details,
            completeness_hint='amenities/address',
            fifth_check='Delivery/Packaging: not applicable for accommodation, set to "N/A".',
        )

    def ai_review(self, kind, listing_id):
        """Ask the LLM for a suggestion and store it on the listing.

        Raises llm.LLMNotConfiguredError without an API key and
        OpenAIError when the provider call fails.
        """
        listing = self.get_listing(kind, listing_id)
        prompt = self.build_prompt(kind, listing)

        text = llm.complete([{'role': 'user', 'content': prompt}], temperature=0.3, max_tokens=1000)
        review = parse_review(text)
        review['reviewed'] = True
        review['reviewedAt'] = timezone.now().isoformat()

        listing.ai_review = review
        listing.save(update_fields=['ai_review'])
        logger.info(f'[MODERATION] AI review for {kind} {listing.id}: {review["recommendation"]} ({review["score"]})')
        return review

    def notify_admin_new_property(self, prop):
        """Run an AI pre-review when possible and email the admin about a new listing"""
        review = None
        if llm.llm_configured():
            try:
                review = self.ai_review('property', prop.id)
            except OpenAIError as e:
                logger.warning(f'[MODERATION] AI pre-review failed for property {prop.id}: {e}')

        lines = [
            f'A new property was submitted for review: {prop.title}',
            f'Owner: {prop.owner.email}',
            f'Location: {prop.location}, {prop.city}',
            f'Price: INR {prop.price}/month',
            f'Type: {prop.property_type} ({prop.gender})',
        ]
        if review:
            lines += [
                '',
                f'AI recommendation: {review["recommendation"]} (score {review["score"]}, confidence {review["confidence"]})',
                f'Summary: {review["summary"]}',
            ]
            if review['redFlags']:
                lines.append('Red flags: ' + '; '.join(str(flag) for flag in review['redFlags']))
        lines += ['', f'Review it at {settings.SITE_URL}/admin/properties']

        sent = send_email(settings.ADMIN_EMAIL, f'New property pending approval: {prop.title}', '\n'.join(lines))

        for admin in User.objects.filter(profile__role=UserRole.ADMIN):
            self.notifications.create_notification(
                'New Property Submitted',
                f'{prop.title} in {prop.city} is waiting for approval',
                user_id=admin.id,
                type=NotificationType.LISTING,
                link='/admin/properties',
                priority=NotificationPriority.HIGH,
                metadata={'property_id': prop.id},
            )
        self.notifications.create_notification(
            'Property Submitted',
            f'{prop.title} was submitted and is pending approval.',
            user_id=prop.owner_id,
            type=NotificationType.LISTING,
            link='/dashboard/properties',
            metadata={'property_id': prop.id, 'action': 'submitted'},
        )
        return {'success': True, 'email_sent': sent, 'ai_review': review}

    def dashboard_stats(self):
        def counts(model):
            return {
                'pending': model.objects.filter(is_approved=False, is_rejected=False).count(),
                'approved': model.objects.filter(is_approved=True, is_rejected=False).count(),
                'rejected': model.objects.filter(is_rejected=True).count(),
            }

        return {
            'properties': counts(Property),
            'messes': counts(Mess),
            'bookings': Booking.objects.count(),
            'users': User.objects.count(),
            'owners': Profile.objects.filter(role=UserRole.OWNER).count(),
        }
