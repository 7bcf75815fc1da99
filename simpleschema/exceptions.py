from django.db import IntegrityError, OperationalError

DUPLICATE_OBJECT_STATES = {
    '42P04',  # duplicate_database
    '42P06',  # duplicate_schema
    '42P07',  # duplicate_table
    '42710',  # duplicate_object
}
QUERY_CANCELED = '57014'
# connection_exception, invalid_authorization_specification, invalid_catalog_name
CONNECTION_STATE_CLASSES = ('08', '28', '3D')


class ProvisioningError(Exception):
    """A provisioning step failed. Later steps were not run."""

    def __init__(self, step, statement=None, cause=None):
        self.step = step
        self.statement = statement
        self.cause = cause
        message = f'step {step!r} failed'
        if statement:
            message += f' on statement: {statement}'
        if cause is not None:
            message += f' ({cause})'
        super().__init__(message)


class DatabaseConnectionError(ProvisioningError):
    pass


class DuplicateObjectError(ProvisioningError):
    pass


class ConstraintViolationError(ProvisioningError):
    pass


class StatementTimeoutError(ProvisioningError):
    pass


class ClientError(ProvisioningError):
    pass


class DeadlineExceededError(ProvisioningError):
    pass


def sqlstate_of(exc):
    # Django keeps the driver exception as __cause__; psycopg exposes the code as sqlstate.
    return getattr(exc.__cause__, 'sqlstate', None)


def classify(exc):
    """Pick the ProvisioningError subclass matching a django.db.Error."""
    state = sqlstate_of(exc)
    if state in DUPLICATE_OBJECT_STATES:
        return DuplicateObjectError
    if state == QUERY_CANCELED:
        return StatementTimeoutError
    if isinstance(exc, IntegrityError) or (state and state.startswith('23')):
        return ConstraintViolationError
    if state and state.startswith(CONNECTION_STATE_CLASSES):
        return DatabaseConnectionError
    if isinstance(exc, OperationalError) and state is None:
        return DatabaseConnectionError
    return ClientError
