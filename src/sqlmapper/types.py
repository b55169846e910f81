"""
Scalar kinds and nullable staging holders.

A record field is bound as one of four kinds. Each kind has a holder class
that receives a scanned database value, remembering whether the column was
NULL separately from the value itself:

    NullInt64   <- int
    NullString  <- str
    NullFloat64 <- float
    NullBool    <- bool
"""
import datetime
import decimal
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from sqlmapper.exceptions import TypeConversionError, UnsupportedTypeError

_TRUE_STRINGS = {'1', 't', 'T', 'true', 'TRUE', 'True'}
_FALSE_STRINGS = {'0', 'f', 'F', 'false', 'FALSE', 'False'}

INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


class Kind(Enum):
    """Supported scalar kinds, valued by their Python type."""
    INT64 = int
    STRING = str
    FLOAT64 = float
    BOOL = bool

    @classmethod
    def of(cls, tp: Any) -> 'Kind':
        """Resolve a declared annotation to its kind.

        Matching is exact, so ``bool`` is never taken for ``int``.
        """
        for kind in cls:
            if tp is kind.value:
                return kind
        raise UnsupportedTypeError(f'unsupported type: {_type_name(tp)}')

    @property
    def zero(self) -> Any:
        return self.value()


def _type_name(tp: Any) -> str:
    return getattr(tp, '__name__', None) or str(tp)


def _decode(src: Any) -> Any:
    if isinstance(src, bytes | bytearray | memoryview):
        try:
            return bytes(src).decode('utf-8')
        except UnicodeDecodeError as err:
            raise TypeConversionError(f'converting {bytes(src)!r} to string: {err}') from err
    return src


def _int64_range(value: int) -> int:
    if not INT64_MIN <= value <= INT64_MAX:
        raise TypeConversionError(f'converting {value!r} to int64: value out of range')
    return value


def to_int64(src: Any) -> int:
    """Convert a driver value to int, refusing lossy or out-of-range conversions."""
    src = _decode(src)
    if isinstance(src, bool):
        return int(src)
    if isinstance(src, int):
        return _int64_range(src)
    if isinstance(src, float | decimal.Decimal):
        try:
            whole = int(src)
        except (OverflowError, ValueError) as err:
            raise TypeConversionError(f'converting {src!r} to int64: {err}') from err
        if src != whole:
            raise TypeConversionError(f'converting {src!r} to int64: value has a fractional part')
        return _int64_range(whole)
    if isinstance(src, str):
        try:
            return _int64_range(int(src.strip()))
        except ValueError as err:
            raise TypeConversionError(f'converting {src!r} to int64: {err}') from err
    raise TypeConversionError(f'unsupported scan, storing {type(src).__name__} into int64')


def to_float64(src: Any) -> float:
    """Convert a driver value to float."""
    src = _decode(src)
    if isinstance(src, int | float | decimal.Decimal):
        try:
            return float(src)
        except OverflowError as err:
            raise TypeConversionError(f'converting {src!r} to float64: {err}') from err
    if isinstance(src, str):
        try:
            return float(src.strip())
        except ValueError as err:
            raise TypeConversionError(f'converting {src!r} to float64: {err}') from err
    raise TypeConversionError(f'unsupported scan, storing {type(src).__name__} into float64')


def to_string(src: Any) -> str:
    """Convert a driver value to str."""
    src = _decode(src)
    if isinstance(src, str):
        return src
    if isinstance(src, bool):
        return 'true' if src else 'false'
    if isinstance(src, datetime.datetime | datetime.date):
        return src.isoformat()
    if isinstance(src, int | float | decimal.Decimal):
        return str(src)
    raise TypeConversionError(f'unsupported scan, storing {type(src).__name__} into string')


def to_bool(src: Any) -> bool:
    """Convert a driver value to bool.

    Integers must be 0 or 1; strings follow the usual true/false spellings.
    """
    src = _decode(src)
    if isinstance(src, bool):
        return src
    if isinstance(src, int | decimal.Decimal):
        if src in {0, 1}:
            return bool(src)
        raise TypeConversionError(f'converting {src!r} to bool: out of range')
    if isinstance(src, str):
        if src in _TRUE_STRINGS:
            return True
        if src in _FALSE_STRINGS:
            return False
        raise TypeConversionError(f'converting {src!r} to bool: invalid syntax')
    raise TypeConversionError(f'unsupported scan, storing {type(src).__name__} into bool')


@dataclass
class NullValue:
    """Base nullable holder.

    ``valid`` is False until a non-NULL value has been scanned in.
    """
    value: Any = None
    valid: bool = False

    kind: ClassVar[Kind]
    convert: ClassVar[Any]

    def __post_init__(self) -> None:
        if self.value is None:
            self.value = self.kind.zero

    def scan(self, src: Any) -> None:
        """Store a driver value, treating None as SQL NULL."""
        if src is None:
            self.value, self.valid = self.kind.zero, False
            return
        self.value = type(self).convert(src)
        self.valid = True

    def get(self) -> Any:
        """Return the value, or None when NULL."""
        return self.value if self.valid else None


@dataclass
class NullInt64(NullValue):
    kind: ClassVar[Kind] = Kind.INT64
    convert: ClassVar[Any] = staticmethod(to_int64)


@dataclass
class NullString(NullValue):
    kind: ClassVar[Kind] = Kind.STRING
    convert: ClassVar[Any] = staticmethod(to_string)


@dataclass
class NullFloat64(NullValue):
    kind: ClassVar[Kind] = Kind.FLOAT64
    convert: ClassVar[Any] = staticmethod(to_float64)


@dataclass
class NullBool(NullValue):
    kind: ClassVar[Kind] = Kind.BOOL
    convert: ClassVar[Any] = staticmethod(to_bool)


_HOLDERS: dict[Kind, type[NullValue]] = {
    Kind.INT64: NullInt64,
    Kind.STRING: NullString,
    Kind.FLOAT64: NullFloat64,
    Kind.BOOL: NullBool,
}


def new_holder(kind: Kind) -> NullValue:
    """Create an empty holder matching ``kind``."""
    return _HOLDERS[kind]()
