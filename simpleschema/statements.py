"""SQL issued by the provisioner.

The DDL text is kept exactly as the schema was originally defined so that
anything reading the tables sees the same columns and constraints.
"""
import re

SCHEMA = 'simple'

# Parent tables first: each foreign key needs its target to exist.
TABLES = ('customer', 'order', 'item')

_IDENTIFIER = re.compile(r'^[a-z_][a-z0-9_]*$')

CREATE_SCHEMA = 'CREATE SCHEMA simple'

CREATE_TABLE = {
    'customer': 'CREATE TABLE simple.customer (id BIGINT PRIMARY KEY, description TEXT)',
    'order': (
        'CREATE TABLE simple.order (id BIGINT PRIMARY KEY, order_description TEXT, '
        'customer_id BIGINT REFERENCES simple.customer(id))'
    ),
    'item': (
        'CREATE TABLE simple.item (id BIGINT PRIMARY KEY, item_description TEXT, '
        'order_id BIGINT REFERENCES simple.order(id))'
    ),
}

# Server-side population: the database generates ids and random values itself.
POPULATE_CUSTOMER = (
    'INSERT INTO simple.customer (id, description) '
    'SELECT g, md5(random()::text) FROM generate_series(1, %s) AS g'
)
POPULATE_ORDER = (
    'INSERT INTO simple.order (id, order_description, customer_id) '
    'SELECT g, md5(random()::text), floor(random() * %s)::bigint + 1 '
    'FROM generate_series(1, %s) AS g'
)
POPULATE_ITEM = (
    'INSERT INTO simple.item (id, item_description, order_id) '
    'SELECT g, md5(random()::text), floor(random() * %s)::bigint + 1 '
    'FROM generate_series(1, %s) AS g'
)

# Host-side population: rows are generated in Python and sent in batches.
INSERT_ROW = {
    'customer': 'INSERT INTO simple.customer (id, description) VALUES (%s, %s)',
    'order': 'INSERT INTO simple.order (id, order_description, customer_id) VALUES (%s, %s, %s)',
    'item': 'INSERT INTO simple.item (id, item_description, order_id) VALUES (%s, %s, %s)',
}


def check_identifier(name):
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ValueError(f'Not a plain lower-case SQL identifier: {name!r}')
    return name


def create_database(name):
    return f'CREATE DATABASE {check_identifier(name)}'


def alter_owner(table, owner):
    if table not in CREATE_TABLE:
        raise ValueError(f'Unknown table: {table!r}')
    return f'ALTER TABLE {SCHEMA}.{table} OWNER TO {check_identifier(owner)}'


def create_table(table, owner=None):
    """DDL for one table, followed by the ownership change when an owner is set."""
    statements = [CREATE_TABLE[table]]
    if owner:
        statements.append(alter_owner(table, owner))
    return statements
