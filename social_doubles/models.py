"""Data models for social doubles event scheduling."""

from dataclasses import dataclass, field
from typing import List, Tuple, Literal, Dict, Any
from datetime import datetime

Level = Literal["beginner", "intermediate", "advanced"]
RuleUnderstanding = Literal["knows", "newbie"]

LEVEL_SCORES = {"beginner": 1, "intermediate": 2, "advanced": 3}
RULE_FAMILIARITY = ("knows", "newbie")


@dataclass(frozen=True)
class Participant:
    """A registered player. Immutable while a schedule is being generated."""

    id: int
    name: str
    level: Level
    rule_understanding: RuleUnderstanding = "knows"  # informational only

    def __post_init__(self):
        """Validate participant fields"""
        if self.level not in LEVEL_SCORES:
            raise ValueError(
                f"Unknown level '{self.level}' for {self.name}; "
                f"expected one of {', '.join(LEVEL_SCORES)}"
            )
        if self.rule_understanding not in RULE_FAMILIARITY:
            raise ValueError(
                f"Unknown rule understanding '{self.rule_understanding}' for {self.name}"
            )

    @property
    def level_score(self) -> int:
        return LEVEL_SCORES[self.level]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "rule_understanding": self.rule_understanding,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Participant":
        return cls(
            id=int(data["id"]),
            name=data["name"],
            level=data["level"],
            rule_understanding=data.get("rule_understanding", "knows"),
        )


Team = Tuple[Participant, Participant]


def pair_key(a: Participant, b: Participant) -> Tuple[int, int]:
    """Canonical teammate key: both ids, ascending"""
    return tuple(sorted((a.id, b.id)))


def matchup_key(team1: Team, team2: Team) -> Tuple[int, ...]:
    """Canonical key of all four players, independent of the team split"""
    return tuple(sorted(p.id for p in (*team1, *team2)))


@dataclass
class Match:
    """One doubles game on one court"""

    court: int
    team1: Team
    team2: Team

    def participants(self) -> List[Participant]:
        return [*self.team1, *self.team2]

    def pair_keys(self) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        return pair_key(*self.team1), pair_key(*self.team2)

    def matchup_key(self) -> Tuple[int, ...]:
        return matchup_key(self.team1, self.team2)

    def level_gap(self) -> int:
        team1_level = sum(p.level_score for p in self.team1)
        team2_level = sum(p.level_score for p in self.team2)
        return abs(team1_level - team2_level)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "court": self.court,
            "team1": [p.to_dict() for p in self.team1],
            "team2": [p.to_dict() for p in self.team2],
        }

    def __str__(self):
        team1 = " & ".join(p.name for p in self.team1)
        team2 = " & ".join(p.name for p in self.team2)
        return f"Court {self.court}: {team1} vs {team2}"


@dataclass
class Round:
    """One timed slot of the event with simultaneous matches across courts"""

    round_number: int
    start_time: str  # Format: "HH:MM"
    end_time: str  # Format: "HH:MM"
    matches: List[Match] = field(default_factory=list)
    resting: List[Participant] = field(default_factory=list)

    def playing(self) -> List[Participant]:
        return [p for match in self.matches for p in match.participants()]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round_number": self.round_number,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "matches": [m.to_dict() for m in self.matches],
            "resting": [p.to_dict() for p in self.resting],
        }


@dataclass
class SchedulingOptions:
    """Preference flags read by match scoring"""

    pair_variation: bool = True  # penalize repeated teammates
    opponent_variation: bool = True  # penalize repeated 4-player matchups
    level_matching: bool = True  # penalize skill imbalance between teams


@dataclass
class EventConfig:
    """Event configuration parameters"""

    name: str
    start_time: str  # Format: "HH:MM"
    end_time: str  # Format: "HH:MM"
    match_duration: int = 20  # minutes
    break_duration: int = 5  # minutes
    court_count: int = 2
    options: SchedulingOptions = field(default_factory=SchedulingOptions)

    def __post_init__(self):
        """Validate configuration after initialization"""
        if isinstance(self.options, dict):
            self.options = SchedulingOptions(**self.options)

        start = datetime.strptime(self.start_time, "%H:%M")
        end = datetime.strptime(self.end_time, "%H:%M")

        if start > end:
            raise ValueError("Start time must not be after end time")
        if self.court_count < 1:
            raise ValueError("Number of courts must be at least 1")
        if self.match_duration <= 0:
            raise ValueError("Match duration must be positive")
        if self.break_duration < 0:
            raise ValueError("Break duration must not be negative")

    @property
    def round_duration(self) -> int:
        return self.match_duration + self.break_duration


def create_participants(records: List[Dict[str, Any]]) -> List[Participant]:
    """Build participants from plain records, handing out ids to records without one"""
    taken = {int(r["id"]) for r in records if r.get("id") is not None}
    if len(taken) != len([r for r in records if r.get("id") is not None]):
        raise ValueError("Participant ids must be unique")

    next_id = 1
    participants = []
    for record in records:
        data = dict(record)
        if data.get("id") is None:
            while next_id in taken:
                next_id += 1
            data["id"] = next_id
            taken.add(next_id)
        participants.append(Participant.from_dict(data))

    return participants


@dataclass
class ScheduleResult:
    """Result of schedule generation"""

    rounds: List[Round]
    round_count: int
    generation_time: float  # seconds
    strategy: str = "random"
    warnings: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.rounds) > 0

    def to_dict(self) -> List[Dict[str, Any]]:
        """Schedule in the form handed to storage"""
        return [r.to_dict() for r in self.rounds]
