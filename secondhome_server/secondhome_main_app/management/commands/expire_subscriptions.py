"""Management command to expire mess subscriptions past their end date"""
from django.core.management.base import BaseCommand
from django.utils import timezone

from secondhome_main_app.models import MessSubscription
from secondhome_main_app.utils.constants import SubscriptionStatus


class Command(BaseCommand):
    help = 'Mark pending/active mess subscriptions whose end date has passed as expired'

    def handle(self, *args, **options):
        expired = MessSubscription.objects.filter(
            end_date__lt=timezone.localdate(),
            status__in=[SubscriptionStatus.PENDING, SubscriptionStatus.ACTIVE],
        ).update(status=SubscriptionStatus.EXPIRED)

        if expired == 0:
            self.stdout.write('No subscriptions to expire')
            return
        self.stdout.write(self.style.SUCCESS(f'Expired {expired} subscriptions'))
