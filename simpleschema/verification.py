"""Read-back checks run after provisioning.

Each table must hold exactly the requested number of rows with ids forming
the contiguous range [1, N], every row must carry a description, and every
non-null foreign key must fall inside the parent's id range and point at an
existing parent row.
"""
from dataclasses import dataclass, field
from typing import Optional

from django.db.models import Count, Max, Min

from simpleschema.models import Customer, Item, Order

# (table, model, description column, foreign key attname, parent model)
TABLES = (
    ('customer', Customer, 'description', None, None),
    ('order', Order, 'order_description', 'customer_id', Customer),
    ('item', Item, 'item_description', 'order_id', Order),
)


@dataclass
class TableStats:
    table: str
    rows: int
    min_id: Optional[int]
    max_id: Optional[int]
    missing_descriptions: int = 0
    min_fk: Optional[int] = None
    max_fk: Optional[int] = None
    orphans: int = 0


@dataclass
class VerificationReport:
    stats: list = field(default_factory=list)
    problems: dict = field(default_factory=dict)

    @property
    def ok(self):
        return not any(self.problems.values())


def orphans(model, fk_field, parent_model, alias='default'):
    """Rows whose non-null foreign key has no matching parent row."""
    parent_ids = parent_model.objects.using(alias).values('pk')
    return (
        model.objects.using(alias)
        .filter(**{f'{fk_field}__isnull': False})
        .exclude(**{f'{fk_field}__in': parent_ids})
    )


def collect_stats(table, model, description_field, fk_field=None, parent_model=None, alias='default'):
    qs = model.objects.using(alias)
    totals = qs.aggregate(rows=Count('pk'), min_id=Min('id'), max_id=Max('id'))
    stats = TableStats(
        table=table,
        rows=totals['rows'],
        min_id=totals['min_id'],
        max_id=totals['max_id'],
        missing_descriptions=qs.filter(**{f'{description_field}__isnull': True}).count(),
    )
    if fk_field:
        bounds = qs.aggregate(min_fk=Min(fk_field), max_fk=Max(fk_field))
        stats.min_fk = bounds['min_fk']
        stats.max_fk = bounds['max_fk']
        stats.orphans = orphans(model, fk_field, parent_model, alias).count()
    return stats


def check_table(stats, expected_rows, parent_rows=None):
    problems = []
    if stats.rows != expected_rows:
        problems.append(f'expected {expected_rows:,} rows, found {stats.rows:,}')
    if stats.min_id != 1 or stats.max_id != expected_rows:
        problems.append(
            f'ids span [{stats.min_id}, {stats.max_id}] instead of [1, {expected_rows}]'
        )
    if stats.missing_descriptions:
        problems.append(f'{stats.missing_descriptions:,} rows without a description')
    if parent_rows is not None:
        # All-null foreign keys leave both bounds empty, which is allowed.
        if stats.min_fk is not None and stats.min_fk < 1:
            problems.append(f'foreign key below range: {stats.min_fk}')
        if stats.max_fk is not None and stats.max_fk > parent_rows:
            problems.append(f'foreign key above range: {stats.max_fk} > {parent_rows}')
        if stats.orphans:
            problems.append(f'{stats.orphans:,} rows reference a missing parent')
    return problems


def verify(expected, alias='default'):
    """Check all three tables against ``expected`` row counts keyed by table name."""
    report = VerificationReport()
    for table, model, description_field, fk_field, parent_model in TABLES:
        stats = collect_stats(table, model, description_field, fk_field, parent_model, alias=alias)
        parent_rows = None
        if parent_model is not None:
            parent_rows = expected[parent_model._meta.db_table]
        report.stats.append(stats)
        report.problems[table] = check_table(stats, expected[table], parent_rows)
    return report


def format_problems(report):
    lines = ['Verification failed:']
    for table, problems in report.problems.items():
        for problem in problems:
            lines.append(f'  {table}: {problem}')
    return '\n'.join(lines)
