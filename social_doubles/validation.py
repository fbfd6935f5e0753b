"""Constraint validation and metrics for generated event schedules."""

import re
from typing import List, Tuple, Dict, Optional
from collections import defaultdict

from social_doubles.models import Participant, Round
from social_doubles.scheduling import time_to_minutes, PLAYERS_PER_COURT

TIME_PATTERN = re.compile(r"^\d{2}:\d{2}$")


class ConstraintValidator:
    """Helper class to validate schedule constraints"""

    @staticmethod
    def validate_match_integrity(rounds: List[Round]) -> Tuple[bool, List[str]]:
        """Validate that every match has four distinct players split 2v2"""
        violations = []

        for rnd in rounds:
            for match in rnd.matches:
                if len(match.team1) != 2 or len(match.team2) != 2:
                    violations.append(
                        f"Round {rnd.round_number}, court {match.court}: teams must have two players each"
                    )
                    continue

                ids = [p.id for p in match.participants()]
                if len(set(ids)) != PLAYERS_PER_COURT:
                    violations.append(
                        f"Round {rnd.round_number}, court {match.court}: "
                        f"players are not distinct ({ids})"
                    )

        return len(violations) == 0, violations

    @staticmethod
    def validate_round_exclusivity(
        rounds: List[Round], participants: Optional[List[Participant]] = None
    ) -> Tuple[bool, List[str]]:
        """Validate that nobody is double-booked and everybody is accounted for"""
        violations = []
        roster = {p.id for p in participants} if participants is not None else None

        for rnd in rounds:
            appearances = defaultdict(int)
            for player in rnd.playing():
                appearances[player.id] += 1
            for player in rnd.resting:
                appearances[player.id] += 1

            for player_id, count in appearances.items():
                if count > 1:
                    violations.append(
                        f"Round {rnd.round_number}: participant {player_id} appears {count} times"
                    )

            if roster is not None and set(appearances) != roster:
                missing = sorted(roster - set(appearances))
                unknown = sorted(set(appearances) - roster)
                if missing:
                    violations.append(
                        f"Round {rnd.round_number}: participants {missing} neither play nor rest"
                    )
                if unknown:
                    violations.append(
                        f"Round {rnd.round_number}: unknown participants {unknown}"
                    )

        return len(violations) == 0, violations

    @staticmethod
    def validate_court_numbers(
        rounds: List[Round], court_count: int
    ) -> Tuple[bool, List[str]]:
        """Validate that courts are used in order, once each, within range"""
        violations = []

        for rnd in rounds:
            courts = [m.court for m in rnd.matches]
            expected = list(range(1, len(courts) + 1))

            if courts != expected:
                violations.append(
                    f"Round {rnd.round_number}: courts {courts} should be {expected}"
                )
            if len(courts) > court_count:
                violations.append(
                    f"Round {rnd.round_number}: {len(courts)} matches for {court_count} courts"
                )

        return len(violations) == 0, violations

    @staticmethod
    def validate_round_timing(
        rounds: List[Round], match_duration: int, break_duration: int
    ) -> Tuple[bool, List[str]]:
        """Validate round numbering and clock times"""
        violations = []
        round_duration = match_duration + break_duration

        for index, rnd in enumerate(rounds):
            if rnd.round_number != index + 1:
                violations.append(
                    f"Round at position {index + 1} is numbered {rnd.round_number}"
                )

            if not TIME_PATTERN.match(rnd.start_time) or not TIME_PATTERN.match(
                rnd.end_time
            ):
                violations.append(
                    f"Round {rnd.round_number}: times {rnd.start_time}-{rnd.end_time} are not HH:MM"
                )
                continue

            start = time_to_minutes(rnd.start_time)
            end = time_to_minutes(rnd.end_time)
            if end - start != match_duration:
                violations.append(
                    f"Round {rnd.round_number}: lasts {end - start} minutes "
                    f"(match duration {match_duration})"
                )

            if index > 0:
                previous = time_to_minutes(rounds[index - 1].start_time)
                if start - previous != round_duration:
                    violations.append(
                        f"Round {rnd.round_number}: starts {start - previous} minutes after "
                        f"the previous round (expected {round_duration})"
                    )

        return len(violations) == 0, violations

    @staticmethod
    def validate_all_constraints(
        rounds: List[Round], event_config, participants: List[Participant]
    ) -> Tuple[bool, List[str]]:
        """Validate all constraints at once"""
        all_violations = []

        match_valid, match_violations = ConstraintValidator.validate_match_integrity(
            rounds
        )
        exclusive_valid, exclusive_violations = (
            ConstraintValidator.validate_round_exclusivity(rounds, participants)
        )
        court_valid, court_violations = ConstraintValidator.validate_court_numbers(
            rounds, event_config.court_count
        )
        timing_valid, timing_violations = ConstraintValidator.validate_round_timing(
            rounds, event_config.match_duration, event_config.break_duration
        )

        all_violations.extend(match_violations)
        all_violations.extend(exclusive_violations)
        all_violations.extend(court_violations)
        all_violations.extend(timing_violations)

        overall_valid = match_valid and exclusive_valid and court_valid and timing_valid

        return overall_valid, all_violations


class ScheduleAnalyzer:
    """Variety and balance metrics for a generated schedule"""

    @staticmethod
    def games_played(rounds: List[Round]) -> Dict[int, int]:
        counts = defaultdict(int)
        for rnd in rounds:
            for player in rnd.playing():
                counts[player.id] += 1
        return dict(counts)

    @staticmethod
    def rest_counts(rounds: List[Round]) -> Dict[int, int]:
        counts = defaultdict(int)
        for rnd in rounds:
            for player in rnd.resting:
                counts[player.id] += 1
        return dict(counts)

    @staticmethod
    def pair_repeats(rounds: List[Round]) -> int:
        """Times a teammate pair played together again after its first game"""
        seen = defaultdict(int)
        for rnd in rounds:
            for match in rnd.matches:
                for key in match.pair_keys():
                    seen[key] += 1
        return sum(count - 1 for count in seen.values())

    @staticmethod
    def matchup_repeats(rounds: List[Round]) -> int:
        """Times the same four players met again after their first match"""
        seen = defaultdict(int)
        for rnd in rounds:
            for match in rnd.matches:
                seen[match.matchup_key()] += 1
        return sum(count - 1 for count in seen.values())

    @staticmethod
    def average_level_gap(rounds: List[Round]) -> float:
        gaps = [match.level_gap() for rnd in rounds for match in rnd.matches]
        if not gaps:
            return 0.0
        return sum(gaps) / len(gaps)
