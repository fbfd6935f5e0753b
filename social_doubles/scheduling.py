"""Core scheduling logic: round slicing, court packing and best-match search."""

import random
import time as time_module
import logging
from typing import List, Tuple, Dict, Optional, Sequence
from collections import defaultdict
from itertools import combinations

try:
    from ortools.sat.python import cp_model

    HAS_ORTOOLS = True
except ImportError:
    HAS_ORTOOLS = False

from social_doubles.models import (
    EventConfig,
    Match,
    Participant,
    Round,
    ScheduleResult,
    SchedulingOptions,
    Team,
    matchup_key,
    pair_key,
)

logger = logging.getLogger(__name__)

# Weights keep a strict priority: pairs over matchups over level balance
PAIR_REPEAT_WEIGHT = 1000
MATCHUP_REPEAT_WEIGHT = 100
LEVEL_GAP_WEIGHT = 10

MAX_SEARCH_TRIALS = 100
TRIALS_PER_PLAYER = 10
PLAYERS_PER_COURT = 4


def time_to_minutes(time_str: str) -> int:
    """Convert HH:MM to minutes from midnight"""
    hours, minutes = map(int, time_str.split(":"))
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """Convert minutes from midnight to HH:MM (no day rollover)"""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def calculate_round_count(
    start_time: str, end_time: str, match_duration: int, break_duration: int
) -> int:
    """Number of whole rounds that fit between start and end"""
    round_duration = match_duration + break_duration
    if round_duration <= 0:
        return 0
    total_minutes = time_to_minutes(end_time) - time_to_minutes(start_time)
    return total_minutes // round_duration


class UsageTracker:
    """Teammate and matchup counters carried from one round to the next"""

    def __init__(self):
        self.pairs: Dict[Tuple[int, int], int] = defaultdict(int)
        self.matchups: Dict[Tuple[int, ...], int] = defaultdict(int)

    def pair_count(self, a: Participant, b: Participant) -> int:
        return self.pairs.get(pair_key(a, b), 0)

    def matchup_count(self, team1: Team, team2: Team) -> int:
        return self.matchups.get(matchup_key(team1, team2), 0)

    def record_match(self, match: Match):
        for key in match.pair_keys():
            self.pairs[key] += 1
        self.matchups[match.matchup_key()] += 1

    def record_round(self, matches: List[Match]):
        for match in matches:
            self.record_match(match)


class MatchScorer:
    """Score a candidate match; lower is better"""

    def __init__(self, options: SchedulingOptions, usage: UsageTracker):
        self.options = options
        self.usage = usage

    def score(self, team1: Team, team2: Team) -> int:
        score = 0

        if self.options.pair_variation:
            score += self.usage.pair_count(*team1) * PAIR_REPEAT_WEIGHT
            score += self.usage.pair_count(*team2) * PAIR_REPEAT_WEIGHT

        if self.options.opponent_variation:
            score += self.usage.matchup_count(team1, team2) * MATCHUP_REPEAT_WEIGHT

        if self.options.level_matching:
            team1_level = team1[0].level_score + team1[1].level_score
            team2_level = team2[0].level_score + team2[1].level_score
            score += abs(team1_level - team2_level) * LEVEL_GAP_WEIGHT

        return score


def candidate_splits(quartet: Sequence[Participant]) -> List[Tuple[Team, Team]]:
    """The three distinct ways to split four players into two teams"""
    p1, p2, p3, p4 = quartet
    return [
        ((p1, p2), (p3, p4)),
        ((p1, p3), (p2, p4)),
        ((p1, p4), (p2, p3)),
    ]


class RandomMatchSearch:
    """Sample random quartets and keep the best scoring split"""

    name = "random"

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def find_best_match(
        self, available: List[Participant], scorer: MatchScorer
    ) -> Optional[Tuple[Team, Team]]:
        if len(available) < PLAYERS_PER_COURT:
            return None

        best_score = None
        best_match = None
        trials = min(MAX_SEARCH_TRIALS, len(available) * TRIALS_PER_PLAYER)

        for _ in range(trials):
            quartet = self.rng.sample(available, PLAYERS_PER_COURT)
            for team1, team2 in candidate_splits(quartet):
                score = scorer.score(team1, team2)
                if best_score is None or score < best_score:
                    best_score = score
                    best_match = (team1, team2)

        return best_match


class ORToolsMatchSearch:
    """Exact per-court search using the OR-Tools CP-SAT solver

    Minimises the same weighted objective as MatchScorer over every way of
    drawing two teams of two from the available pool. Still greedy across
    courts and rounds.
    """

    name = "exact"

    def __init__(
        self, rng: Optional[random.Random] = None, time_limit: float = 10.0
    ):
        if not HAS_ORTOOLS:
            raise ImportError("OR-Tools is required for the exact match search")
        self.rng = rng or random.Random()
        self.time_limit = time_limit
        self.fallback = RandomMatchSearch(self.rng)

    def find_best_match(
        self, available: List[Participant], scorer: MatchScorer
    ) -> Optional[Tuple[Team, Team]]:
        if len(available) < PLAYERS_PER_COURT:
            return None

        # Shuffle so ties between equally good matches are not always broken by roster order
        pool = list(available)
        self.rng.shuffle(pool)
        options = scorer.options
        usage = scorer.usage

        model = cp_model.CpModel()

        # side[i][t] is true when pool[i] plays on team t
        side = []
        for i, player in enumerate(pool):
            on_team = [model.NewBoolVar(f"p{player.id}_t{t}") for t in (0, 1)]
            model.Add(on_team[0] + on_team[1] <= 1)
            side.append(on_team)

        for t in (0, 1):
            model.Add(sum(side[i][t] for i in range(len(pool))) == 2)

        objective = []

        if options.pair_variation:
            for i, j in combinations(range(len(pool)), 2):
                count = usage.pair_count(pool[i], pool[j])
                if not count:
                    continue
                for t in (0, 1):
                    together = model.NewBoolVar(f"pair_{i}_{j}_t{t}")
                    model.Add(together >= side[i][t] + side[j][t] - 1)
                    objective.append(PAIR_REPEAT_WEIGHT * count * together)

        if options.opponent_variation:
            index_by_id = {p.id: i for i, p in enumerate(pool)}
            for key, count in usage.matchups.items():
                if not count or not all(pid in index_by_id for pid in key):
                    continue
                chosen = [side[index_by_id[pid]][0] + side[index_by_id[pid]][1] for pid in key]
                repeated = model.NewBoolVar(f"matchup_{'_'.join(map(str, key))}")
                model.Add(repeated >= sum(chosen) - 3)
                objective.append(MATCHUP_REPEAT_WEIGHT * count * repeated)

        if options.level_matching:
            gap = model.NewIntVar(-6, 6, "level_gap")
            model.Add(
                gap
                == sum(p.level_score * side[i][0] for i, p in enumerate(pool))
                - sum(p.level_score * side[i][1] for i, p in enumerate(pool))
            )
            abs_gap = model.NewIntVar(0, 6, "abs_level_gap")
            model.AddAbsEquality(abs_gap, gap)
            objective.append(LEVEL_GAP_WEIGHT * abs_gap)

        if objective:
            model.Minimize(sum(objective))

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = self.time_limit
        status = solver.Solve(model)

        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            logger.warning(
                f"⚠️  CP-SAT returned {solver.StatusName(status)}, falling back to random search"
            )
            return self.fallback.find_best_match(available, scorer)

        team1 = tuple(p for i, p in enumerate(pool) if solver.Value(side[i][0]))
        team2 = tuple(p for i, p in enumerate(pool) if solver.Value(side[i][1]))
        return team1, team2


class RoundAssigner:
    """Choose who plays this round and pack them onto courts"""

    def __init__(self, rng: random.Random, search):
        self.rng = rng
        self.search = search

    def assign_round(
        self,
        participants: List[Participant],
        court_count: int,
        scorer: MatchScorer,
    ) -> Tuple[List[Match], List[Participant]]:
        """Return (matches ordered by court, resting participants)"""
        players_needed = court_count * PLAYERS_PER_COURT

        shuffled = list(participants)
        self.rng.shuffle(shuffled)

        # Stable sort only clusters levels; order within a level stays random
        if scorer.options.level_matching:
            shuffled.sort(key=lambda p: p.level_score)

        playing = shuffled[:players_needed]
        resting = shuffled[players_needed:]

        matches = []
        assigned = set()

        for court in range(1, court_count + 1):
            available = [p for p in playing if p.id not in assigned]
            if len(available) < PLAYERS_PER_COURT:
                break

            best_match = self.search.find_best_match(available, scorer)
            if best_match is None:
                break

            team1, team2 = best_match
            match = Match(court=court, team1=team1, team2=team2)
            matches.append(match)
            assigned.update(p.id for p in match.participants())

        resting.extend(p for p in playing if p.id not in assigned)
        return matches, resting


def generate_schedule(
    participants: List[Participant],
    court_count: int,
    start_time: str,
    end_time: str,
    match_duration: int,
    break_duration: int,
    options: SchedulingOptions,
    rng: Optional[random.Random] = None,
    search=None,
) -> List[Round]:
    """Build the full sequence of rounds for one event

    Returns an empty list when no round fits in the time window or when
    fewer than four participants are registered.
    """
    round_count = calculate_round_count(
        start_time, end_time, match_duration, break_duration
    )
    if round_count <= 0 or len(participants) < PLAYERS_PER_COURT:
        return []

    rng = rng or random.Random()
    search = search or RandomMatchSearch(rng)
    usage = UsageTracker()
    scorer = MatchScorer(options, usage)
    assigner = RoundAssigner(rng, search)

    round_duration = match_duration + break_duration
    event_start = time_to_minutes(start_time)
    rounds = []

    for index in range(round_count):
        round_start = event_start + index * round_duration
        matches, resting = assigner.assign_round(participants, court_count, scorer)

        rounds.append(
            Round(
                round_number=index + 1,
                start_time=minutes_to_time(round_start),
                end_time=minutes_to_time(round_start + match_duration),
                matches=matches,
                resting=resting,
            )
        )
        usage.record_round(matches)

        logger.debug(
            f"Round {index + 1}: {len(matches)} matches, {len(resting)} resting"
        )

    return rounds


class SocialDoublesScheduler:
    """Main scheduler class for a social doubles event"""

    STRATEGIES = ("random", "exact")

    def __init__(self, strategy: str = "random", seed: Optional[int] = None):
        if strategy not in self.STRATEGIES:
            raise ValueError(
                f"Unknown search strategy '{strategy}'; expected one of {', '.join(self.STRATEGIES)}"
            )
        self.strategy = strategy
        self.seed = seed

    def _create_search(self, rng: random.Random):
        if self.strategy == "exact":
            return ORToolsMatchSearch(rng)
        return RandomMatchSearch(rng)

    def schedule_event(
        self, event: EventConfig, participants: List[Participant]
    ) -> ScheduleResult:
        """Generate the complete schedule for an event"""
        logger.info(
            f"Starting schedule generation for event: {event.name} "
            f"({len(participants)} participants, {event.court_count} courts, {self.strategy} search)"
        )
        start = time_module.time()

        rng = random.Random(self.seed)
        round_count = calculate_round_count(
            event.start_time, event.end_time, event.match_duration, event.break_duration
        )
        warnings = self._collect_warnings(event, participants, round_count)
        for warning in warnings:
            logger.warning(f"⚠️  {warning}")

        rounds = generate_schedule(
            participants,
            event.court_count,
            event.start_time,
            event.end_time,
            event.match_duration,
            event.break_duration,
            event.options,
            rng=rng,
            search=self._create_search(rng),
        )
        generation_time = time_module.time() - start

        if rounds:
            total_matches = sum(len(r.matches) for r in rounds)
            logger.info(
                f"✅ Schedule generated in {generation_time:.2f} seconds: "
                f"{len(rounds)} rounds, {total_matches} matches"
            )
        else:
            logger.info("📭 Nothing to schedule")

        return ScheduleResult(
            rounds=rounds,
            round_count=len(rounds),
            generation_time=generation_time,
            strategy=self.strategy,
            warnings=warnings,
        )

    def _collect_warnings(
        self, event: EventConfig, participants: List[Participant], round_count: int
    ) -> List[str]:
        warnings = []
        if len(participants) < PLAYERS_PER_COURT:
            warnings.append(
                f"Only {len(participants)} participants registered; at least {PLAYERS_PER_COURT} are needed"
            )
        if round_count <= 0:
            warnings.append(
                f"No {event.round_duration}-minute round fits between {event.start_time} and {event.end_time}"
            )
        if round_count > 0 and len(participants) >= PLAYERS_PER_COURT:
            per_round = min(
                event.court_count, len(participants) // PLAYERS_PER_COURT
            ) * PLAYERS_PER_COURT
            idle = len(participants) - per_round
            if idle:
                warnings.append(f"{idle} participants rest every round")
            spare_courts = event.court_count - per_round // PLAYERS_PER_COURT
            if spare_courts:
                warnings.append(f"{spare_courts} courts stay empty every round")
        return warnings

    def print_schedule_summary(self, result: ScheduleResult, event: EventConfig):
        """Print a formatted schedule, round by round"""
        if not result.success:
            print(f"❌ No schedule for {event.name}")
            for warning in result.warnings:
                print(f"   • {warning}")
            return

        total_matches = sum(len(r.matches) for r in result.rounds)

        print(f"\n🏸 Event Schedule: {event.name}")
        print("=" * 80)
        print(f"📊 Summary:")
        print(f"   • Rounds: {result.round_count}")
        print(f"   • Total matches: {total_matches}")
        print(f"   • Round length: {event.match_duration} + {event.break_duration} minutes")
        print(f"   • Search: {result.strategy}")
        print(f"   • Generation time: {result.generation_time:.2f} seconds")

        if result.warnings:
            print(f"\n⚠️  Warnings:")
            for warning in result.warnings:
                print(f"   • {warning}")

        for rnd in result.rounds:
            print(f"\nRound {rnd.round_number}  {rnd.start_time}-{rnd.end_time}")
            print("-" * 60)
            for match in rnd.matches:
                print(f"   {match}")
            if rnd.resting:
                print(f"   Resting: {', '.join(p.name for p in rnd.resting)}")

    def print_player_schedule(self, result: ScheduleResult, player_name: str) -> bool:
        """Print one participant's rounds; returns False if the name is unknown"""
        found = False
        lines = []

        for rnd in result.rounds:
            line = None
            for match in rnd.matches:
                for team, other in ((match.team1, match.team2), (match.team2, match.team1)):
                    if player_name in (team[0].name, team[1].name):
                        partner = team[1].name if team[0].name == player_name else team[0].name
                        opponents = " & ".join(p.name for p in other)
                        line = f"Court {match.court} with {partner} vs {opponents}"
            if line is None and any(p.name == player_name for p in rnd.resting):
                line = "Resting"
            if line is not None:
                found = True
                lines.append(f"   Round {rnd.round_number} {rnd.start_time}: {line}")

        if not found:
            print(f"❌ No participant named {player_name} in this schedule")
            return False

        print(f"\n👤 Schedule for {player_name}:")
        for line in lines:
            print(line)
        return True
