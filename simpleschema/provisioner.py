import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from django.conf import settings
from django.db import Error, connections

from simpleschema import seeding, statements
from simpleschema.exceptions import DeadlineExceededError, classify

logger = logging.getLogger(__name__)

SEED_MODES = ('server', 'host')
PROGRESS_EVERY = 100000


@dataclass
class Step:
    name: str
    alias: str
    action: Callable


@dataclass
class ProvisioningResult:
    steps: list = field(default_factory=list)
    rows: dict = field(default_factory=dict)
    elapsed: float = 0.0


class Provisioner:
    """Creates the `example` database, the `simple` schema and its three tables, then seeds them.

    Steps run one after another on autocommit connections. Nothing is wrapped
    in a transaction: CREATE DATABASE cannot be, and a failed run is left as is.
    The first failing statement aborts the run with a ProvisioningError subclass.
    """

    def __init__(
        self,
        *,
        database_name: Optional[str] = None,
        owner: Optional[str] = None,
        customers: Optional[int] = None,
        orders: Optional[int] = None,
        items: Optional[int] = None,
        mode: Optional[str] = None,
        batch_size: Optional[int] = None,
        seed: Optional[int] = None,
        deadline: Optional[float] = None,
        alias: str = 'default',
        maintenance_alias: str = 'maintenance',
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        config = settings.PROVISIONING
        # Steps after create_database run on `alias`, so both must name the same database.
        target = connections[alias].settings_dict['NAME']
        if database_name and database_name != target:
            raise ValueError(
                f'database_name {database_name!r} does not match the {alias!r} connection, which uses {target!r}'
            )
        self.database_name = statements.check_identifier(database_name or target)
        self.owner = owner if owner is not None else config.get('TABLE_OWNER')
        if self.owner:
            statements.check_identifier(self.owner)
        self.counts = {
            'customer': customers if customers is not None else config['CUSTOMERS'],
            'order': orders if orders is not None else config['ORDERS'],
            'item': items if items is not None else config['ITEMS'],
        }
        self.mode = mode or config['SEED_MODE']
        self.batch_size = batch_size if batch_size is not None else config['BATCH_SIZE']
        self.seed = seed
        self.deadline = deadline
        self.alias = alias
        self.maintenance_alias = maintenance_alias
        self.clock = clock

        for table, count in self.counts.items():
            if count < 1:
                raise ValueError(f'{table} row count must be at least 1, got {count}')
        if self.mode not in SEED_MODES:
            raise ValueError(f'Unknown seed mode {self.mode!r}; expected one of {", ".join(SEED_MODES)}')
        if self.batch_size < 1:
            raise ValueError(f'batch size must be at least 1, got {self.batch_size}')
        if deadline is not None and deadline <= 0:
            raise ValueError(f'deadline must be positive, got {deadline}')

        self._rng = random.Random(seed)
        self._statement = None
        self._deadline_at = None

    def steps(self):
        """The provisioning sequence, in the only order that satisfies the foreign keys."""
        steps = [
            Step('create_database', self.maintenance_alias, self._create_database),
            Step('create_schema', self.alias, self._create_schema),
        ]
        for table in statements.TABLES:
            steps.append(Step(f'create_{table}_table', self.alias, self._table_creator(table)))
        for table in statements.TABLES:
            steps.append(Step(f'populate_{table}', self.alias, self._populator(table)))
        return steps

    def run(self, skip_database: bool = False) -> ProvisioningResult:
        result = ProvisioningResult()
        started = self.clock()
        self._deadline_at = started + self.deadline if self.deadline is not None else None

        for step in self.steps():
            if skip_database and step.name == 'create_database':
                logger.info('Skipping create_database, %s is expected to exist', self.database_name)
                continue
            self._statement = None
            self._check_deadline(step.name)
            logger.info('Running step %s', step.name)
            try:
                with connections[step.alias].cursor() as cursor:
                    rows = step.action(cursor)
            except Error as exc:
                error_class = classify(exc)
                logger.error('Step %s failed on statement %r: %s', step.name, self._statement, exc)
                raise error_class(step.name, self._statement, exc) from exc

            result.steps.append(step.name)
            if step.name.startswith('populate_'):
                table = step.name[len('populate_'):]
                result.rows[table] = rows
                logger.info('Step %s wrote %s rows', step.name, f'{rows:,}')
            else:
                logger.info('Step %s done', step.name)

        result.elapsed = self.clock() - started
        return result

    def _check_deadline(self, step_name):
        if self._deadline_at is not None and self.clock() >= self._deadline_at:
            logger.error('Deadline of %ss exceeded before %s', self.deadline, step_name)
            raise DeadlineExceededError(step_name)

    def _execute(self, cursor, sql, params=None):
        self._statement = sql
        cursor.execute(sql, params)

    def _create_database(self, cursor):
        self._execute(cursor, statements.create_database(self.database_name))

    def _create_schema(self, cursor):
        self._execute(cursor, statements.CREATE_SCHEMA)

    def _table_creator(self, table):
        def create(cursor):
            for sql in statements.create_table(table, self.owner):
                self._execute(cursor, sql)
        return create

    def _populator(self, table):
        if self.mode == 'server':
            return lambda cursor: self._populate_server_side(cursor, table)
        return lambda cursor: self._populate_host_side(cursor, table)

    def _populate_server_side(self, cursor, table):
        count = self.counts[table]
        if table == 'customer':
            self._execute(cursor, statements.POPULATE_CUSTOMER, [count])
        elif table == 'order':
            self._execute(cursor, statements.POPULATE_ORDER, [self.counts['customer'], count])
        else:
            self._execute(cursor, statements.POPULATE_ITEM, [self.counts['order'], count])
        return cursor.rowcount

    def _rows_for(self, table):
        count = self.counts[table]
        if table == 'customer':
            return seeding.customer_rows(count, self._rng)
        if table == 'order':
            return seeding.order_rows(count, self.counts['customer'], self._rng)
        return seeding.item_rows(count, self.counts['order'], self._rng)

    def _populate_host_side(self, cursor, table):
        sql = statements.INSERT_ROW[table]
        total_created = 0
        for batch in seeding.batched(self._rows_for(table), self.batch_size):
            self._check_deadline(f'populate_{table}')
            self._statement = sql
            cursor.executemany(sql, batch)
            previous = total_created
            total_created += len(batch)
            if total_created // PROGRESS_EVERY > previous // PROGRESS_EVERY:
                logger.info('  %s: created %s rows...', table, f'{total_created:,}')
        return total_created
