"""
SQL text generation for the field mapper.

Statements are MySQL-flavoured: identifiers are backtick-quoted and
parameters use ``?`` placeholders. Main entry points:

- `select_fields()` / `set_fields()` - column fragments
- `build_select_sql()` / `build_insert_sql()` / `build_update_sql()` /
  `build_delete_sql()` - full statement text
- `standardize_placeholders()` - convert ``?`` for drivers that want ``%s``
"""
import re

__all__ = [
    'quote_identifier',
    'make_placeholders',
    'select_fields',
    'set_fields',
    'build_select_sql',
    'build_insert_sql',
    'build_update_sql',
    'build_delete_sql',
    'key_clause',
    'standardize_placeholders',
]

# String literals are matched first so their contents are skipped. Quotes
# inside a literal may be doubled or backslash-escaped.
_PLACEHOLDER_TOKENS = re.compile(r"'(?:[^'\\]|\\.|'')*'|\"(?:[^\"\\]|\\.|\"\")*\"|`[^`]*`|(\?)|(%)", re.DOTALL)


def quote_identifier(identifier: str) -> str:
    """Backtick-quote a table or column name.

    Column names come from record declarations and are trusted.
    """
    return f'`{identifier}`'


def make_placeholders(count: int) -> str:
    """Comma-joined ``?`` placeholders.
    """
    return ', '.join(['?'] * count)


def _padded(fragment: str) -> str:
    return f' {fragment} ' if fragment else ''


def select_fields(columns: list[str]) -> str:
    """Quoted column list with a leading and trailing space.

    Example: " `field0`, `field1`, `field2` "
    """
    return _padded(', '.join(quote_identifier(col) for col in columns))


def set_fields(columns: list[str]) -> str:
    """Assignment list for UPDATE with a leading and trailing space.

    Example: " `field0` = ?, `field1` = ?, `field2` = ? "
    """
    return _padded(', '.join(f'{quote_identifier(col)} = ?' for col in columns))


def key_clause(column: str, lock: bool = False) -> str:
    """WHERE clause matching a single column against one parameter.
    """
    clause = f' where {quote_identifier(column)} = ? '
    if lock:
        clause += 'for update '
    return clause


def build_select_sql(table: str, columns: list[str], suffix: str = '') -> str:
    return f'SELECT {select_fields(columns)} FROM {quote_identifier(table)} {suffix}'


def build_insert_sql(table: str, columns: list[str]) -> str:
    return (f'INSERT INTO {quote_identifier(table)} ({select_fields(columns)}) '
            f'VALUES ({make_placeholders(len(columns))})')


def build_update_sql(table: str, columns: list[str], suffix: str = '') -> str:
    return f'UPDATE {quote_identifier(table)} SET {set_fields(columns)}{suffix}'


def build_delete_sql(table: str, suffix: str = '') -> str:
    return f'DELETE FROM {quote_identifier(table)} {suffix}'


def standardize_placeholders(sql: str, paramstyle: str = 'qmark') -> str:
    """Rewrite ``?`` placeholders for the driver's paramstyle.

    Only ``format`` and ``pyformat`` drivers need rewriting; there ``?`` becomes
    ``%s`` and every literal percent sign is doubled, since those drivers
    %-format the whole statement. A ``?`` inside quotes is not a placeholder.
    """
    if not sql or paramstyle not in {'format', 'pyformat'}:
        return sql

    def replace(match: re.Match) -> str:
        if match.group(1):
            return '%s'
        if match.group(2):
            return '%%'
        return match.group(0).replace('%', '%%')

    return _PLACEHOLDER_TOKENS.sub(replace, sql)
