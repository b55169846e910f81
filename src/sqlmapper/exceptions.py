"""
Mapper-specific exception classes.

Driver errors are never wrapped: they reach the caller exactly as the DB-API
module raised them. The tuple groups at the bottom let callers catch them
alongside our own classes.
"""
import sqlite3

import pymysql


class DatabaseError(Exception):
    """Base class for all sqlmapper errors.
    """


class ConfigurationError(DatabaseError):
    """Neither a transaction nor a pool handle was supplied.
    """


class ValidationError(DatabaseError):
    """Error in input validation.
    """


class NoFieldMatchError(ValidationError):
    """No mapped field carries the requested column tag.
    """


class TypeConversionError(DatabaseError):
    """Error converting types between Python and database.
    """


class UnsupportedTypeError(TypeConversionError):
    """A record field is declared with a type the mapper cannot bind.
    """


class QueryError(DatabaseError):
    """Error in query execution or result scanning.
    """


class NoRowsError(QueryError):
    """A single-row query returned no rows.
    """


class RowNotFoundError(QueryError):
    """A locking read scanned no row.
    """


class ContextError(DatabaseError):
    """Base class for cancellation errors raised by a Context.
    """


class ContextCancelledError(ContextError):
    """The context was cancelled by its owner.
    """


class DeadlineExceededError(ContextError):
    """The context deadline passed.
    """


IntegrityError = (
    pymysql.err.IntegrityError,
    sqlite3.IntegrityError,
    )

ProgrammingError = (
    pymysql.err.ProgrammingError,
    pymysql.err.DatabaseError,
    sqlite3.ProgrammingError,
    sqlite3.DatabaseError,
    QueryError,
    )

OperationalError = (
    pymysql.err.OperationalError,
    sqlite3.OperationalError,
    )
