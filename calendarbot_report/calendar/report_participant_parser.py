"""Participant parsing utilities for calendar report processing.

Normalizes ORGANIZER and ATTENDEE values, which arrive either as a single
calendar address or as a list of them, into Individual objects. The shape
of the raw value is resolved exactly once into a One/Many variant; callers
only ever see the canonical list.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

from .report_models import Individual, Participants, individual

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class One:
    """A participant field holding a single record."""

    individual: Individual


@dataclass(frozen=True)
class Many:
    """A participant field holding a list of records."""

    individuals: tuple[Individual, ...]


ParticipantValue = Union[One, Many]


def is_participant_record(value: Any) -> bool:
    """Check whether a raw value carries both a display name and an address.

    Recognizes icalendar ``vCalAddress`` properties (string value plus a
    ``params`` mapping) and ``{"params": {...}, "val": ...}`` mappings.
    """
    if isinstance(value, Mapping):
        return "params" in value and "val" in value
    return isinstance(value, str) and isinstance(getattr(value, "params", None), Mapping)


def parse_individual(value: Any) -> Optional[Individual]:
    """Parse a single raw participant value.

    Args:
        value: vCalAddress, params/val mapping, bare address string or Individual

    Returns:
        Parsed Individual, or None for unrecognized values
    """
    if isinstance(value, Individual):
        return value

    if is_participant_record(value):
        if isinstance(value, Mapping):
            params = value.get("params") or {}
            return individual(params.get("CN", ""), value.get("val", ""))
        return individual(value.params.get("CN", ""), str(value))

    if isinstance(value, str):
        return individual("", value)

    logger.debug("Ignoring unrecognized participant value: %r", value)
    return None


def to_participant_value(raw: Any) -> Optional[ParticipantValue]:
    """Resolve the shape of a raw participant field.

    Args:
        raw: None, a single participant value, or a list of them

    Returns:
        One or Many variant, or None when the field is absent or unusable
    """
    if raw is None:
        return None

    if isinstance(raw, (list, tuple)):
        individuals = []
        for item in raw:
            # Some producers nest lists of addresses
            nested = item if isinstance(item, (list, tuple)) else [item]
            for entry in nested:
                parsed = parse_individual(entry)
                if parsed is not None:
                    individuals.append(parsed)
        return Many(tuple(individuals))

    parsed = parse_individual(raw)
    if parsed is None:
        # An unusable single value is treated like an absent field
        return None
    return One(parsed)


def participant_list(value: Optional[ParticipantValue]) -> Optional[list[Individual]]:
    """Flatten a One/Many variant into the canonical list."""
    if value is None:
        return None
    if isinstance(value, One):
        return [value.individual]
    return list(value.individuals)


def extract_participants(organizer: Any = None, attendees: Any = None) -> Participants:
    """Normalize raw organizer and attendee fields.

    A missing attendee field leaves ``attendees`` unset; an empty list is
    kept as an empty list.

    Args:
        organizer: Raw ORGANIZER value (absent, single record or Individual)
        attendees: Raw ATTENDEE value (absent, single record or list)

    Returns:
        Participants with normalized organizer and attendees
    """
    organizers = participant_list(to_participant_value(organizer))
    return Participants(
        organizer=organizers[0] if organizers else None,
        attendees=participant_list(to_participant_value(attendees)),
    )
