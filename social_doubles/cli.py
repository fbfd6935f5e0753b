"""Command line interface and example configurations."""

import argparse
import csv
import json
import logging
import os
from dataclasses import asdict
from typing import Tuple, List, Dict, Any

from social_doubles.models import (
    EventConfig,
    Participant,
    ScheduleResult,
    SchedulingOptions,
    create_participants,
)
from social_doubles.scheduling import SocialDoublesScheduler
from social_doubles.validation import ConstraintValidator, ScheduleAnalyzer


def run_all_tests():
    """Discover and run all unit tests under tests/"""
    import unittest

    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    loader = unittest.TestLoader()
    suite = loader.discover(os.path.join(project_root, "tests"), top_level_dir=project_root)
    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)
    return result.wasSuccessful()


# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_example_event() -> Tuple[EventConfig, List[Participant]]:
    """An ordinary weekday evening: two courts, ten players of mixed levels"""
    event = EventConfig(
        name="Thursday Night Doubles",
        start_time="19:00",
        end_time="21:00",
        match_duration=20,
        break_duration=5,
        court_count=2,
        options=SchedulingOptions(),
    )

    participants = create_participants(
        [
            {"name": "Aiko", "level": "advanced"},
            {"name": "Ben", "level": "intermediate"},
            {"name": "Chloe", "level": "beginner", "rule_understanding": "newbie"},
            {"name": "Daniel", "level": "advanced"},
            {"name": "Emi", "level": "intermediate"},
            {"name": "Farid", "level": "beginner"},
            {"name": "Grace", "level": "intermediate"},
            {"name": "Hiro", "level": "advanced"},
            {"name": "Isla", "level": "beginner", "rule_understanding": "newbie"},
            {"name": "Jonas", "level": "intermediate"},
        ]
    )

    return event, participants


def load_event_config(path: str) -> Tuple[EventConfig, List[Participant]]:
    """Load event settings and roster from a JSON configuration file"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    event = EventConfig(**data["event"])
    participants = create_participants(data.get("participants", []))
    return event, participants


def serialize_event_config(
    event: EventConfig, participants: List[Participant]
) -> Dict[str, Any]:
    return {
        "event": asdict(event),
        "participants": [p.to_dict() for p in participants],
    }


def export_schedule_json(result: ScheduleResult, path: str):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)


def export_schedule_csv(result: ScheduleResult, path: str):
    """One row per match and one row per resting participant"""
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(
            ["round", "start_time", "end_time", "court", "team1", "team2", "resting"]
        )
        for rnd in result.rounds:
            for match in rnd.matches:
                writer.writerow(
                    [
                        rnd.round_number,
                        rnd.start_time,
                        rnd.end_time,
                        match.court,
                        " & ".join(p.name for p in match.team1),
                        " & ".join(p.name for p in match.team2),
                        "",
                    ]
                )
            for player in rnd.resting:
                writer.writerow(
                    [rnd.round_number, rnd.start_time, rnd.end_time, "", "", "", player.name]
                )


def report_validation(
    result: ScheduleResult, event: EventConfig, participants: List[Participant]
) -> bool:
    """Run every validator and print a PASSED/FAILED line for each"""
    checks = [
        (
            "Match integrity",
            ConstraintValidator.validate_match_integrity(result.rounds),
        ),
        (
            "Round exclusivity",
            ConstraintValidator.validate_round_exclusivity(result.rounds, participants),
        ),
        (
            "Court numbering",
            ConstraintValidator.validate_court_numbers(result.rounds, event.court_count),
        ),
        (
            "Round timing",
            ConstraintValidator.validate_round_timing(
                result.rounds, event.match_duration, event.break_duration
            ),
        ),
    ]

    all_valid = True
    for label, (valid, violations) in checks:
        print(f"✅ {label}: {'PASSED' if valid else 'FAILED'}")
        if not valid:
            all_valid = False
            for violation in violations[:3]:
                print(f"   ❌ {violation}")

    print(
        f"\n🎯 Overall validation: {'✅ ALL CONSTRAINTS SATISFIED' if all_valid else '❌ CONSTRAINT VIOLATIONS FOUND'}"
    )
    return all_valid


def print_variety_metrics(result: ScheduleResult):
    games = ScheduleAnalyzer.games_played(result.rounds)
    print(f"\n📈 Variety:")
    print(f"   • Repeated teammate pairs: {ScheduleAnalyzer.pair_repeats(result.rounds)}")
    print(f"   • Repeated matchups: {ScheduleAnalyzer.matchup_repeats(result.rounds)}")
    print(f"   • Average level gap: {ScheduleAnalyzer.average_level_gap(result.rounds):.2f}")
    if games:
        print(f"   • Games per player: {min(games.values())}-{max(games.values())}")


def main(argv=None):
    """Main command line interface"""
    parser = argparse.ArgumentParser(
        description="Social Doubles Scheduler (rotating partners across courts)"
    )
    parser.add_argument("--test", action="store_true", help="Run unit tests")
    parser.add_argument(
        "--run-example", action="store_true", help="Run example event"
    )
    parser.add_argument("--config", type=str, help="JSON configuration file")
    parser.add_argument("--save-example", type=str, help="Save example config to file")
    parser.add_argument("--export-json", type=str, help="Export schedule to JSON file")
    parser.add_argument("--export-csv", type=str, help="Export schedule to CSV file")
    parser.add_argument("--player", type=str, help="Show the schedule of one participant")
    parser.add_argument("--seed", type=int, help="Random seed for a reproducible schedule")
    parser.add_argument(
        "--exact",
        action="store_true",
        help="Pick each court's match with the OR-Tools CP-SAT solver",
    )

    args = parser.parse_args(argv)

    if args.test:
        print("🧪 Running unit tests...")
        run_all_tests()
        return

    if args.save_example:
        event, participants = create_example_event()
        with open(args.save_example, "w", encoding="utf-8") as f:
            json.dump(
                serialize_event_config(event, participants),
                f,
                indent=2,
                ensure_ascii=False,
            )
        print(f"📁 Example configuration saved to {args.save_example}")
        return

    # Determine configuration source
    if args.config:
        try:
            event, participants = load_event_config(args.config)
            print(f"📁 Loaded configuration from {args.config}")
        except (OSError, ValueError, KeyError, TypeError) as e:
            print(f"❌ Error loading configuration: {e}")
            return
    elif args.run_example:
        event, participants = create_example_event()
        print(f"🎯 Using example event configuration")
    else:
        print("❌ Please specify --config, --run-example, or --save-example")
        parser.print_help()
        return

    scheduler = SocialDoublesScheduler(
        strategy="exact" if args.exact else "random", seed=args.seed
    )

    print(f"\n🚀 Generating event schedule...")
    result = scheduler.schedule_event(event, participants)

    scheduler.print_schedule_summary(result, event)

    if result.success:
        print(f"\n🔍 Validating schedule constraints...")
        report_validation(result, event, participants)
        print_variety_metrics(result)

    if args.player:
        scheduler.print_player_schedule(result, args.player)

    if args.export_json:
        export_schedule_json(result, args.export_json)
        print(f"💾 Schedule exported to {args.export_json}")

    if args.export_csv:
        export_schedule_csv(result, args.export_csv)
        print(f"💾 Schedule exported to {args.export_csv}")
