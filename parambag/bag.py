import logging
import os
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from dotenv import dotenv_values

from .core.coercion import is_sequence, keep_alnum, keep_alpha, keep_digits
from .core.config import Config
from .services.filters import FilterKind, apply_filter


logger = logging.getLogger(__name__)


class ParameterBag:
    """Ordered container for request-like parameters with typed accessors.

    Missing keys never raise: each accessor falls back to its default
    ('' for the string filters, 0 for integers, False for booleans).
    """

    def __init__(self, parameters: Optional[Mapping[str, Any]] = None):
        self.parameters: Dict[str, Any] = _as_dict(parameters)

    @classmethod
    def from_env(cls, prefix: Optional[str] = None, dotenv_path: Optional[str] = None) -> "ParameterBag":
        """Build a bag from a .env file overlaid with the process environment.

        Only keys starting with ``prefix`` are kept, with the prefix removed.
        """
        prefix = Config.ENV_PREFIX if prefix is None else prefix
        path = dotenv_path or Config.ENV_FILE

        merged: Dict[str, Any] = {}
        if os.path.isfile(path):
            merged.update(dotenv_values(path))
        else:
            logger.debug(f"No dotenv file at {path}, using process environment only")
        merged.update(os.environ)

        return cls({
            key[len(prefix):]: value
            for key, value in merged.items()
            if key.startswith(prefix) and len(key) > len(prefix)
        })

    def all(self) -> Dict[str, Any]:
        return dict(self.parameters)

    def keys(self) -> List[str]:
        return list(self.parameters)

    def replace(self, parameters: Mapping[str, Any]) -> None:
        self.parameters = _as_dict(parameters)

    def add(self, parameters: Mapping[str, Any]) -> None:
        self.parameters.update(_as_dict(parameters))

    def get(self, key: str, default: Any = None) -> Any:
        # presence, not a None value, decides whether the default applies
        if key in self.parameters:
            return self.parameters[key]
        return default

    def set(self, key: str, value: Any) -> None:
        self.parameters[key] = value

    def has(self, key: str) -> bool:
        return key in self.parameters

    def remove(self, key: str) -> None:
        self.parameters.pop(key, None)

    def get_alpha(self, key: str, default: Any = '') -> str:
        return keep_alpha(self.get(key, default))

    def get_alnum(self, key: str, default: Any = '') -> str:
        return keep_alnum(self.get(key, default))

    def get_digits(self, key: str, default: Any = '') -> str:
        return keep_digits(self.get(key, default))

    def get_int(self, key: str, default: int = 0) -> int:
        """Digits of the stored value read as a base-10 integer.

        Returns 0 when no digits remain, or when there are more digits than
        the interpreter will convert (see sys.get_int_max_str_digits).
        """
        if key not in self.parameters:
            return default
        digits = keep_digits(self.parameters[key])
        if not digits:
            return 0
        try:
            return int(digits, 10)
        except ValueError:
            logger.warning(f"Parameter {key!r} has {len(digits)} digits, too many to convert; using 0")
            return 0

    def get_boolean(self, key: str, default: bool = False) -> bool:
        if key not in self.parameters:
            return bool(default)
        value = self.parameters[key]
        if is_sequence(value):
            return False
        return bool(apply_filter(value, FilterKind.VALIDATE_BOOLEAN))

    def filter(self, key: str, default: Any = '', kind: FilterKind | str = FilterKind.DEFAULT, options: Any = None) -> Any:
        """Run the stored value through a sanitization/validation rule.

        A missing key yields ``default`` and a sequence value is returned
        unchanged; neither reaches the rule. Otherwise the rule's result is
        returned as-is, including the INVALID sentinel on failure.

        ``options`` may be bare flags or ``{'flags': ..., 'options': {...}}``.
        """
        if key not in self.parameters:
            return default

        value = self.parameters[key]
        if is_sequence(value):
            return value

        return apply_filter(value, kind, options)

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        return iter(self.parameters.items())

    def __len__(self) -> int:
        return len(self.parameters)

    def __contains__(self, key: object) -> bool:
        return key in self.parameters

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.parameters!r})"


def _as_dict(parameters: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    if parameters is None:
        return {}
    if not isinstance(parameters, Mapping):
        raise TypeError(f"Parameters must be a mapping, got {type(parameters).__name__}")
    return dict(parameters)
