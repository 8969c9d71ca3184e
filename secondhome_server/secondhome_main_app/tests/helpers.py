"""Shared fixtures for the test suite"""
from decimal import Decimal

from django.contrib.auth.models import User

from ..models import Property, Mess, Booking
from ..utils.constants import UserRole


def make_user(email, password='password123', role=UserRole.USER, name=''):
    user = User.objects.create_user(username=email, email=email, password=password)
    profile = user.profile
    profile.role = role
    profile.name = name or email.split('@')[0]
    profile.save()
    return user


def make_property(owner, **kwargs):
    defaults = {
        'title': 'Sunrise PG',
        'description': 'Furnished rooms close to campus',
        'property_type': 'PG',
        'gender': 'unisex',
        'price': Decimal('8000'),
        'security_deposit': Decimal('5000'),
        'address': '12 Main Road',
        'location': 'Koramangala',
        'city': 'Bangalore',
        'state': 'Karnataka',
        'pincode': '560034',
        'amenities': ['wifi', 'laundry'],
        'is_approved': True,
    }
    defaults.update(kwargs)
    return Property.objects.create(owner=owner, **defaults)


def make_mess(owner, **kwargs):
    defaults = {
        'name': 'Annapurna Mess',
        'location': 'Koramangala',
        'city': 'Bangalore',
        'monthly_price': Decimal('3000'),
        'meal_types': ['lunch', 'dinner'],
        'diet_types': ['veg'],
        'is_approved': True,
    }
    defaults.update(kwargs)
    return Mess.objects.create(owner=owner, **defaults)


def make_booking(user, prop, **kwargs):
    defaults = {
        'move_in_date': '2026-12-01',
        'duration_months': 1,
        'monthly_rent': prop.price,
        'security_deposit': prop.security_deposit,
        'total_amount': prop.price + prop.security_deposit,
    }
    defaults.update(kwargs)
    return Booking.objects.create(user=user, property=prop, **defaults)
