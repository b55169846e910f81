"""
Engine creation with SQLAlchemy.

The engine returned by `connect()` is the pool handle the mapper accepts as
``db``. The mapper only ever checks raw DB-API connections out of it.
"""
import logging
from collections.abc import Callable
from dataclasses import fields
from typing import Any

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool
from sqlmapper.options import DatabaseOptions

from libb import load_options

__all__ = [
    'connect',
    'create_url_from_options',
    'get_engine_for_options',
]

logger = logging.getLogger(__name__)

_MEMORY_DATABASES = {':memory:', ''}


def create_url_from_options(options: DatabaseOptions,
                            url_creator: Callable[..., sa.URL] = sa.URL.create) -> sa.URL:
    """Convert DatabaseOptions to SQLAlchemy URL.
    """
    if options.drivername == 'sqlite':
        return url_creator(
            drivername='sqlite',
            database=options.database
        )

    elif options.drivername == 'mysql':
        query = {}
        if options.timeout:
            query['connect_timeout'] = str(options.timeout)

        return url_creator(
            drivername='mysql+pymysql',
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port or None,
            database=options.database,
            query=query
        )

    raise ValueError(f'Unsupported database type: {options.drivername}')


def get_engine_for_options(options: DatabaseOptions,
                           engine_factory: Callable[..., Engine] = sa.create_engine,
                           **kwargs: Any) -> Engine:
    """Create a SQLAlchemy engine for the given options.

    Without ``use_pool`` every checkout opens a new connection, except for
    in-memory SQLite where SQLAlchemy's single-connection pool must stay so
    the data survives between statements.
    """
    url = create_url_from_options(options)

    engine_kwargs: dict[str, Any] = {'echo': False}

    in_memory = options.drivername == 'sqlite' and options.database in _MEMORY_DATABASES
    if not options.use_pool:
        if not in_memory:
            engine_kwargs['poolclass'] = NullPool
    else:
        engine_kwargs['pool_size'] = options.pool_max_connections
        engine_kwargs['pool_recycle'] = options.pool_max_idle_time
        engine_kwargs['pool_timeout'] = options.pool_wait_timeout
        engine_kwargs['max_overflow'] = 10
        engine_kwargs['pool_pre_ping'] = True
        engine_kwargs['pool_reset_on_return'] = 'rollback'

    engine_kwargs.update(kwargs)

    engine = engine_factory(url, **engine_kwargs)
    logger.debug(f'Created new engine for {options.drivername}')

    return engine


def connect(options: DatabaseOptions | dict[str, Any] | str,
            config: Any | None = None, **kw: Any) -> Engine:
    """Create the pool handle for a database

    Args:
        options: Can be:
                - DatabaseOptions object
                - String path to configuration
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        SQLAlchemy Engine to pass as ``db`` to mapper calls
    """
    if isinstance(options, DatabaseOptions):
        for field in fields(options):
            kw.pop(field.name, None)
    else:
        options_func = load_options(cls=DatabaseOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)
        kw = {}

    return get_engine_for_options(options, **kw)
