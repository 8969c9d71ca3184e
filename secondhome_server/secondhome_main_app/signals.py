from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
from django.db.models import Avg
from django.contrib.auth.models import User
import logging

from .models import Review, Profile

logger = logging.getLogger(__name__)


def _refresh_property_rating(prop):
    reviews = Review.objects.filter(property=prop)
    avg = reviews.aggregate(Avg('rating'))['rating__avg']
    prop.rating = round(avg, 2) if avg else 0.00
    prop.reviews_count = reviews.count()
    prop.save(update_fields=['rating', 'reviews_count'])
    logger.info(f'[SIGNAL] Property {prop.id} rating={prop.rating} reviews={prop.reviews_count}')


@receiver(post_save, sender=Review)
def update_rating_on_review(sender, instance, created, **kwargs):
    """Auto-update cached rating when a review is saved"""
    _refresh_property_rating(instance.property)


@receiver(post_delete, sender=Review)
def update_rating_on_review_delete(sender, instance, **kwargs):
    _refresh_property_rating(instance.property)


@receiver(post_save, sender=User)
def ensure_profile(sender, instance, created, **kwargs):
    """Every account gets a profile, including ones created through the admin"""
    if created:
        Profile.objects.get_or_create(user=instance, defaults={'name': instance.first_name or ''})
