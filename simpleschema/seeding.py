import hashlib
from itertools import islice


def random_description(rng):
    # Same shape as md5(random()::text): 32 lower-case hex characters.
    return hashlib.md5(repr(rng.random()).encode('ascii')).hexdigest()


def customer_rows(count, rng):
    for i in range(1, count + 1):
        yield (i, random_description(rng))


def order_rows(count, customer_count, rng):
    for i in range(1, count + 1):
        yield (i, random_description(rng), rng.randint(1, customer_count))


def item_rows(count, order_count, rng):
    for i in range(1, count + 1):
        yield (i, random_description(rng), rng.randint(1, order_count))


def batched(rows, size):
    """Split an iterable of rows into lists of at most ``size`` rows."""
    if size < 1:
        raise ValueError('batch size must be at least 1')
    iterator = iter(rows)
    while True:
        batch = list(islice(iterator, size))
        if not batch:
            return
        yield batch
