"""Compliance evaluation — decides pass/fail for a reported value."""
import logging

from app.services.errors import UnsupportedRegulationType
from app.services.regulation_config import parse_number
from app.services.regulation_types import RegulationKind

logger = logging.getLogger(__name__)


def evaluate(type_name: str, config: str | None, reported_value) -> bool:
    """Pure verdict for (type, config, value).

    Boolean passes only on the exact string "true". Threshold passes when the
    value is a number not below the configured minimum; a non-numeric value
    fails without raising. JUnit always passes until report parsing exists.
    """
    kind = RegulationKind.lookup(type_name)
    if kind is None:
        raise UnsupportedRegulationType(str(type_name))

    logger.debug("Evaluate regulation type=%s config=%s value=%s", kind.value, config, reported_value)

    if kind is RegulationKind.BOOLEAN:
        return str(reported_value) == "true"

    if kind is RegulationKind.THRESHOLD:
        value = parse_number(None if reported_value is None else str(reported_value))
        threshold = parse_number(config)
        if value is None or threshold is None:
            return False
        return threshold <= value

    # JUnit
    # TODO: parse the JUnit XML report and compare its pass percentage with config
    return True
