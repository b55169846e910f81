from dataclasses import dataclass

from libb import ConfigOptions, scriptname

__all__ = [
    'DatabaseOptions',
    'SUPPORTED_DRIVERS',
]

SUPPORTED_DRIVERS = ('mysql', 'sqlite')


@dataclass
class DatabaseOptions(ConfigOptions):
    """Options

    supported driver names: `mysql`, `sqlite`

    Connection pooling options (handed to SQLAlchemy as-is):
    - use_pool: Whether to use connection pooling (default: False)
    - pool_max_connections: Maximum connections in pool (default: 5)
    - pool_max_idle_time: Maximum seconds a connection can be idle (default: 300)
    - pool_wait_timeout: Maximum seconds to wait for a connection (default: 30)
    """
    drivername: str = 'mysql'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    port: int = 0
    timeout: int = 0
    appname: str = None
    use_pool: bool = False
    pool_max_connections: int = 5
    pool_max_idle_time: int = 300
    pool_wait_timeout: int = 30

    def __post_init__(self):
        if self.drivername not in SUPPORTED_DRIVERS:
            raise ValueError(f'drivername must be one of: {list(SUPPORTED_DRIVERS)}')
        self.appname = self.appname or scriptname() or 'python_console'
        if not self.database:
            raise ValueError('database is required')
        if self.drivername == 'mysql' and not self.hostname:
            raise ValueError('hostname is required for mysql')
