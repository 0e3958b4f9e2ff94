"""
Regulation config validation — per-type grammar of ``Regulation.config``.

    Boolean    config unused, always cleared
    Threshold  minimum value, must be a number
    JUnit      minimum pass percentage, must be a number

Numbers are plain decimals with an optional exponent ("42", "-0.5", "1e3").
Locale forms such as "1,5" are rejected.
"""
import re
from decimal import Decimal

from app.services.errors import RegulationValidationError
from app.services.regulation_types import RegulationKind

_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(text: str | None) -> Decimal | None:
    """Parse a locale-independent decimal, or return None if ``text`` is not one."""
    if text is None:
        return None
    candidate = str(text).strip()
    if not _NUMBER_RE.fullmatch(candidate):
        return None
    return Decimal(candidate)


def validate_config(type_name: str, config: str | None) -> str | None:
    """Return the config to persist for a regulation of ``type_name``.

    Raises RegulationValidationError when a numeric type gets a config that is
    not a number. Unknown type names pass through untouched.
    """
    kind = RegulationKind.lookup(type_name)
    if kind is None:
        return config

    if kind is RegulationKind.BOOLEAN:
        return None

    # Threshold and JUnit both carry a numeric minimum
    if parse_number(config) is None:
        raise RegulationValidationError(
            f"Config value for {kind.value} type must be a number"
        )
    return config
