import logging
from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from patientform.models import CompletedTmp

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Deletes patient form attempts that were started but not touched for a number of days'

    def add_arguments(self, parser):
        parser.add_argument(
            '--days', type=int, default=settings.PATIENTFORM_STALE_ATTEMPT_DAYS,
            help='Age in days of the attempts to delete'
        )

    def handle(self, *args, **options):
        days = options['days']
        if days < 1:
            self.stdout.write(self.style.ERROR("--days must be at least 1"))
            return

        cutoff = timezone.now() - timedelta(days=days)
        stale = CompletedTmp.objects.filter(timemodified__lt=cutoff)
        count = stale.count()
        stale.delete()

        logger.info(f"Purged {count} attempts in progress older than {days} days")
        self.stdout.write(self.style.SUCCESS(f"Deleted {count} stale attempts"))
