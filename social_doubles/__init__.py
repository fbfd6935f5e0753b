"""Rotating-partner doubles scheduling for social racket-sports events."""

from social_doubles.models import (
    Participant,
    Match,
    Round,
    SchedulingOptions,
    EventConfig,
    ScheduleResult,
    create_participants,
)
from social_doubles.scheduling import generate_schedule, SocialDoublesScheduler

__all__ = [
    "Participant",
    "Match",
    "Round",
    "SchedulingOptions",
    "EventConfig",
    "ScheduleResult",
    "create_participants",
    "generate_schedule",
    "SocialDoublesScheduler",
]
