import logging

from django.core.management.base import BaseCommand
from django.db.models import Exists, OuterRef
from django.utils import timezone

from visitors.models import Guest, GuestLog

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Mark guest passes whose validity window has ended as expired."

    def add_arguments(self, parser):
        parser.add_argument('--dry-run', action='store_true', help='Only report what would change.')

    def handle(self, *args, **options):
        now = timezone.now()
        inside = GuestLog.objects.filter(guest=OuterRef('pk'), currently_inside=True)
        qs = (
            Guest.objects.filter(is_active=True, valid_until__lt=now)
            .exclude(status__in=[Guest.STATUS_EXPIRED, Guest.STATUS_REVOKED])
            # guests still inside keep their pass until they are checked out
            .exclude(Exists(inside))
        )
        ids = list(qs.values_list('id', flat=True))
        if options['dry_run']:
            self.stdout.write(f"Would expire {len(ids)} guest passes")
            return
        count = Guest.objects.filter(id__in=ids).update(status=Guest.STATUS_EXPIRED, is_active=False, updated_at=now)
        logger.info('Expired %s guest passes', count)
        self.stdout.write(self.style.SUCCESS(f"Expired {count} guest passes at {now}"))
