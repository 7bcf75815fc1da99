from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from simpleschema.verification import format_problems, verify


class Command(BaseCommand):
    help = 'Checks row counts, id ranges and foreign keys of the seeded simple schema'

    def add_arguments(self, parser):
        config = settings.PROVISIONING
        parser.add_argument('--customers', type=int, default=config['CUSTOMERS'])
        parser.add_argument('--orders', type=int, default=config['ORDERS'])
        parser.add_argument('--items', type=int, default=config['ITEMS'])

    def handle(self, *args, **options):
        expected = {
            'customer': options['customers'],
            'order': options['orders'],
            'item': options['items'],
        }
        report = verify(expected)
        for stats in report.stats:
            self.stdout.write(f'  {stats.table}: {stats.rows:,} rows, ids [{stats.min_id}, {stats.max_id}]')
        if not report.ok:
            raise CommandError(format_problems(report))
        self.stdout.write(self.style.SUCCESS('All checks passed'))
