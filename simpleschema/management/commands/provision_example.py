from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from simpleschema.exceptions import ProvisioningError
from simpleschema.provisioner import SEED_MODES, Provisioner
from simpleschema.verification import format_problems, verify


class Command(BaseCommand):
    help = 'Creates the example database, the simple schema with customer/order/item tables, and seeds them'

    def add_arguments(self, parser):
        config = settings.PROVISIONING
        parser.add_argument(
            '--customers',
            type=int,
            default=config['CUSTOMERS'],
            help=f"Number of rows to create in customer (default: {config['CUSTOMERS']:,})"
        )
        parser.add_argument(
            '--orders',
            type=int,
            default=config['ORDERS'],
            help=f"Number of rows to create in order (default: {config['ORDERS']:,})"
        )
        parser.add_argument(
            '--items',
            type=int,
            default=config['ITEMS'],
            help=f"Number of rows to create in item (default: {config['ITEMS']:,})"
        )
        parser.add_argument(
            '--mode',
            choices=SEED_MODES,
            default=config['SEED_MODE'],
            help='Generate rows in the database (server) or in Python (host)'
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=config['BATCH_SIZE'],
            help=f"Rows per insert batch in host mode (default: {config['BATCH_SIZE']:,})"
        )
        parser.add_argument(
            '--seed',
            type=int,
            default=None,
            help='Random seed for host mode, for reproducible data'
        )
        parser.add_argument(
            '--deadline',
            type=float,
            default=None,
            help='Abort if the whole run takes longer than this many seconds'
        )
        parser.add_argument(
            '--skip-database',
            action='store_true',
            help='Assume the database already exists and start at the schema'
        )
        parser.add_argument(
            '--verify',
            action='store_true',
            help='Check row counts and foreign keys after seeding'
        )

    def handle(self, *args, **options):
        try:
            provisioner = Provisioner(
                customers=options['customers'],
                orders=options['orders'],
                items=options['items'],
                mode=options['mode'],
                batch_size=options['batch_size'],
                seed=options['seed'],
                deadline=options['deadline'],
            )
        except ValueError as exc:
            raise CommandError(str(exc)) from exc

        self.stdout.write(self.style.SUCCESS(
            f'Provisioning database {provisioner.database_name} '
            f'({provisioner.mode} mode)...'
        ))
        try:
            result = provisioner.run(skip_database=options['skip_database'])
        except ProvisioningError as exc:
            raise CommandError(f'{type(exc).__name__}: {exc}') from exc

        for table, rows in result.rows.items():
            self.stdout.write(self.style.SUCCESS(f'Created {rows:,} {table} records'))
        self.stdout.write(self.style.SUCCESS(
            f'Provisioning complete in {result.elapsed:.2f}s ({len(result.steps)} steps)'
        ))

        if options['verify']:
            report = verify(provisioner.counts)
            if not report.ok:
                raise CommandError(format_problems(report))
            self.stdout.write(self.style.SUCCESS('Verification passed'))

