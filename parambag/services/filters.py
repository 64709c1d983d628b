import enum
import ipaddress
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import urlparse

from ..core.coercion import parse_boolean, to_string


logger = logging.getLogger(__name__)


class FilterKind(str, enum.Enum):
    DEFAULT = "default"
    SANITIZE_NUMBER_INT = "sanitize_number_int"
    SANITIZE_NUMBER_FLOAT = "sanitize_number_float"
    VALIDATE_INT = "validate_int"
    VALIDATE_FLOAT = "validate_float"
    VALIDATE_BOOLEAN = "validate_boolean"
    VALIDATE_EMAIL = "validate_email"
    VALIDATE_URL = "validate_url"
    VALIDATE_REGEXP = "validate_regexp"


class FilterFlag(enum.IntFlag):
    NONE = 0
    ALLOW_OCTAL = 1
    ALLOW_HEX = 2
    ALLOW_FRACTION = 4
    ALLOW_THOUSAND = 8
    PATH_REQUIRED = 16
    QUERY_REQUIRED = 32
    NULL_ON_FAILURE = 64


class _Invalid:
    """Failure sentinel returned when a value does not pass its rule.

    Falsy, but never equal to ``False``: a boolean rule's ``False`` result
    is a valid output, this is not.
    """

    _instance: Optional["_Invalid"] = None

    def __new__(cls) -> "_Invalid":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "INVALID"

    def __reduce__(self):
        return "INVALID"


INVALID = _Invalid()


@dataclass(frozen=True)
class FilterOptions:
    """Flags plus rule-specific parameters (min_range, max_range, regexp, default...)."""

    flags: FilterFlag = FilterFlag.NONE
    options: Mapping[str, Any] = field(default_factory=dict)

    def has(self, flag: FilterFlag) -> bool:
        return bool(self.flags & flag)

    @classmethod
    def coerce(cls, raw: Any) -> "FilterOptions":
        """Accept a bare flags value, a ``{flags, options}`` mapping, or None."""
        if raw is None:
            return cls()
        if isinstance(raw, FilterOptions):
            return raw
        if isinstance(raw, bool):
            raise TypeError("Filter options must be flags, a mapping, or FilterOptions, not bool")
        if isinstance(raw, int):
            return cls(flags=FilterFlag(raw))
        if isinstance(raw, Mapping):
            rule_options = raw.get("options") or {}
            if not isinstance(rule_options, Mapping):
                raise TypeError(f"Filter 'options' must be a mapping, got {type(rule_options).__name__}")
            return cls(flags=FilterFlag(int(raw.get("flags") or 0)), options=dict(rule_options))
        raise TypeError(f"Unsupported filter options type: {type(raw).__name__}")


DECIMAL_INT = re.compile(r'[+-]?(0|[1-9][0-9]*)')
HEX_INT = re.compile(r'0[xX][0-9a-fA-F]+')
OCTAL_INT = re.compile(r'0[oO]?[0-7]+')
FLOAT_BODY = r'[+-]?([0-9]+(%(sep)s[0-9]*)?|%(sep)s[0-9]+)([eE][+-]?[0-9]+)?'
EMAIL_LOCAL = re.compile(r"[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+(\.[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+)*")
HOST_LABEL = re.compile(r'[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?')
URL_SCHEME = re.compile(r'[A-Za-z][A-Za-z0-9+.-]*')
HOSTLESS_SCHEMES = {"mailto", "news", "file"}


def _in_range(number, opts: FilterOptions) -> bool:
    low = opts.options.get("min_range")
    high = opts.options.get("max_range")
    if low is not None and number < low:
        return False
    if high is not None and number > high:
        return False
    return True


def _raw(text: str, opts: FilterOptions) -> Any:
    return text


def _sanitize_number_int(text: str, opts: FilterOptions) -> Any:
    return re.sub(r'[^0-9+-]', '', text)


def _sanitize_number_float(text: str, opts: FilterOptions) -> Any:
    allowed = '0-9+eE'
    if opts.has(FilterFlag.ALLOW_FRACTION):
        allowed += '.'
    if opts.has(FilterFlag.ALLOW_THOUSAND):
        allowed += ','
    return re.sub(f'[^{allowed}-]', '', text)


def _validate_int(text: str, opts: FilterOptions) -> Any:
    text = text.strip()
    if DECIMAL_INT.fullmatch(text):
        try:
            number = int(text, 10)
        except ValueError:
            # more digits than sys.get_int_max_str_digits allows
            return INVALID
    elif opts.has(FilterFlag.ALLOW_HEX) and HEX_INT.fullmatch(text):
        number = int(text[2:], 16)
    elif opts.has(FilterFlag.ALLOW_OCTAL) and OCTAL_INT.fullmatch(text):
        number = int(text.lstrip('0oO') or '0', 8)
    else:
        return INVALID
    return number if _in_range(number, opts) else INVALID


def _validate_float(text: str, opts: FilterOptions) -> Any:
    text = text.strip()
    separator = str(opts.options.get("decimal", "."))
    if len(separator) != 1:
        raise ValueError(f"Decimal separator must be a single character, got {separator!r}")
    if opts.has(FilterFlag.ALLOW_THOUSAND):
        text = text.replace(str(opts.options.get("thousand", ",")), '')
    if not re.fullmatch(FLOAT_BODY % {"sep": re.escape(separator)}, text):
        return INVALID
    number = float(text.replace(separator, '.'))
    return number if _in_range(number, opts) else INVALID


def _validate_boolean(text: str, opts: FilterOptions) -> Any:
    result = parse_boolean(text)
    return INVALID if result is None else result


def _validate_email(text: str, opts: FilterOptions) -> Any:
    if len(text) > 254 or text.count('@') != 1:
        return INVALID
    local, domain = text.split('@')
    if len(local) > 64 or not EMAIL_LOCAL.fullmatch(local):
        return INVALID
    labels = domain.split('.')
    if len(labels) < 2 or not all(HOST_LABEL.fullmatch(label) for label in labels):
        return INVALID
    return text


def _valid_host(host: str) -> bool:
    # urlparse strips the brackets, so an IPv6 literal arrives as e.g. '::1'
    if ':' in host:
        try:
            return ipaddress.ip_address(host).version == 6
        except ValueError:
            return False
    return all(HOST_LABEL.fullmatch(label) for label in host.split('.'))


def _validate_url(text: str, opts: FilterOptions) -> Any:
    if not text or any(ch.isspace() for ch in text):
        return INVALID
    try:
        parsed = urlparse(text)
        host = parsed.hostname
        parsed.port  # raises on a malformed port
    except ValueError:
        return INVALID
    if not parsed.scheme or not URL_SCHEME.fullmatch(parsed.scheme):
        return INVALID
    if parsed.scheme.lower() in HOSTLESS_SCHEMES:
        if not (parsed.netloc or parsed.path):
            return INVALID
    elif not host or not _valid_host(host):
        return INVALID
    if opts.has(FilterFlag.PATH_REQUIRED) and not parsed.path:
        return INVALID
    if opts.has(FilterFlag.QUERY_REQUIRED) and not parsed.query:
        return INVALID
    return text


def _validate_regexp(text: str, opts: FilterOptions) -> Any:
    pattern = opts.options.get("regexp")
    if not pattern:
        raise ValueError("VALIDATE_REGEXP requires a 'regexp' option")
    return text if re.search(pattern, text) else INVALID


_RULES: Dict[FilterKind, Callable[[str, FilterOptions], Any]] = {
    FilterKind.DEFAULT: _raw,
    FilterKind.SANITIZE_NUMBER_INT: _sanitize_number_int,
    FilterKind.SANITIZE_NUMBER_FLOAT: _sanitize_number_float,
    FilterKind.VALIDATE_INT: _validate_int,
    FilterKind.VALIDATE_FLOAT: _validate_float,
    FilterKind.VALIDATE_BOOLEAN: _validate_boolean,
    FilterKind.VALIDATE_EMAIL: _validate_email,
    FilterKind.VALIDATE_URL: _validate_url,
    FilterKind.VALIDATE_REGEXP: _validate_regexp,
}


def apply_filter(value: Any, kind: FilterKind | str = FilterKind.DEFAULT, options: Any = None) -> Any:
    """Sanitize or validate a scalar value with the rule named by ``kind``.

    Returns the filtered value on success. On failure returns the caller's
    ``options["default"]`` if given, otherwise None when NULL_ON_FAILURE is
    set, otherwise INVALID. VALIDATE_BOOLEAN reports an unrecognized value
    as False (or None with NULL_ON_FAILURE), never INVALID.
    """
    try:
        kind = FilterKind(kind)
    except ValueError:
        raise ValueError(f"Unknown filter kind: {kind!r}") from None
    opts = FilterOptions.coerce(options)
    text = to_string(value)

    result = _RULES[kind](text, opts)
    if result is not INVALID:
        return result

    logger.debug(f"Value {text!r} rejected by {kind.value} (flags={int(opts.flags)})")
    if "default" in opts.options:
        return opts.options["default"]
    if opts.has(FilterFlag.NULL_ON_FAILURE):
        return None
    if kind is FilterKind.VALIDATE_BOOLEAN:
        return False
    return INVALID
