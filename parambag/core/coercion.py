import logging
import re
from typing import Any, Sequence


logger = logging.getLogger(__name__)

NON_ALPHA = re.compile(r'[^a-zA-Z]')
NON_ALNUM = re.compile(r'[^a-zA-Z0-9]')
NON_DIGIT = re.compile(r'[^0-9]')

TRUE_LITERALS = frozenset({'1', 'true', 'on', 'yes'})
FALSE_LITERALS = frozenset({'0', 'false', 'off', 'no', ''})


def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def to_string(value: Any) -> str:
    """Render a stored value as the string the accessors filter.

    None and False become '', True becomes '1', integral floats lose their
    fractional part. Sequences have no scalar rendering and become ''.
    """
    if value is None:
        return ''
    if isinstance(value, bool):
        return '1' if value else ''
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode('utf-8', errors='replace')
    if is_sequence(value):
        logger.debug(f"Sequence of {len(value)} item(s) has no string form, using ''")
        return ''
    return str(value)


def keep_alpha(value: Any) -> str:
    return NON_ALPHA.sub('', to_string(value))


def keep_alnum(value: Any) -> str:
    return NON_ALNUM.sub('', to_string(value))


def keep_digits(value: Any) -> str:
    return NON_DIGIT.sub('', to_string(value))


def parse_boolean(value: Any) -> bool | None:
    """Interpret a value as a boolean literal, or None if it is not one."""
    if isinstance(value, bool):
        return value
    text = to_string(value).strip().lower()
    if text in TRUE_LITERALS:
        return True
    if text in FALSE_LITERALS:
        return False
    return None
