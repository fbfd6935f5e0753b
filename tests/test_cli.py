"""Tests for the command line interface and schedule export."""

import csv
import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from social_doubles import cli


class TestCommandLine(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def path(self, name):
        return os.path.join(self.tmpdir.name, name)

    def run_cli(self, *argv):
        output = io.StringIO()
        with redirect_stdout(output):
            cli.main(list(argv))
        return output.getvalue()

    def test_example_event_exports(self):
        json_path = self.path("schedule.json")
        csv_path = self.path("schedule.csv")

        output = self.run_cli(
            "--run-example", "--seed", "3",
            "--export-json", json_path, "--export-csv", csv_path,
        )
        self.assertIn("ALL CONSTRAINTS SATISFIED", output)

        with open(json_path, encoding="utf-8") as f:
            rounds = json.load(f)
        self.assertEqual(len(rounds), 4)
        self.assertEqual(rounds[0]["start_time"], "19:00")
        self.assertEqual(len(rounds[0]["matches"]), 2)
        self.assertEqual(len(rounds[0]["resting"]), 2)

        with open(csv_path, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        # Two matches and two resting players in each of four rounds
        self.assertEqual(len(rows), 16)
        self.assertEqual(sum(1 for r in rows if r["resting"]), 8)

    def test_saved_example_can_be_loaded(self):
        config_path = self.path("event.json")
        self.run_cli("--save-example", config_path)

        event, participants = cli.load_event_config(config_path)
        self.assertEqual(event.name, "Thursday Night Doubles")
        self.assertEqual(len(participants), 10)
        self.assertEqual(participants[0].id, 1)

        output = self.run_cli("--config", config_path, "--seed", "1")
        self.assertIn("Loaded configuration", output)
        self.assertIn("Round 4", output)

    def test_player_view(self):
        output = self.run_cli("--run-example", "--seed", "5", "--player", "Aiko")
        self.assertIn("Schedule for Aiko", output)
        self.assertEqual(output.count("   Round "), 4)

        output = self.run_cli("--run-example", "--player", "Nobody")
        self.assertIn("No participant named Nobody", output)

    def test_bad_configuration(self):
        config_path = self.path("broken.json")
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(
                {"event": {"name": "X", "start_time": "21:00", "end_time": "19:00"}},
                f,
            )

        output = self.run_cli("--config", config_path)
        self.assertIn("Error loading configuration", output)

        output = self.run_cli("--config", self.path("missing.json"))
        self.assertIn("Error loading configuration", output)

    def test_small_roster(self):
        config_path = self.path("small.json")
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(
                {
                    "event": {"name": "Rainy Day", "start_time": "10:00", "end_time": "12:00"},
                    "participants": [
                        {"name": "A", "level": "beginner"},
                        {"name": "B", "level": "advanced"},
                    ],
                },
                f,
            )

        output = self.run_cli("--config", config_path)
        self.assertIn("No schedule for Rainy Day", output)

    def test_empty_schedule_exports(self):
        """Both exports are written even when nothing could be scheduled"""
        config_path = self.path("short.json")
        json_path = self.path("short_schedule.json")
        csv_path = self.path("short_schedule.csv")
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(
                {
                    "event": {"name": "Short Slot", "start_time": "10:00", "end_time": "10:15"},
                    "participants": [
                        {"name": name, "level": "intermediate"} for name in "ABCDEFGH"
                    ],
                },
                f,
            )

        self.run_cli(
            "--config", config_path, "--export-json", json_path, "--export-csv", csv_path
        )

        with open(json_path, encoding="utf-8") as f:
            self.assertEqual(json.load(f), [])
        with open(csv_path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        self.assertEqual(
            rows,
            [["round", "start_time", "end_time", "court", "team1", "team2", "resting"]],
        )

    def test_no_arguments(self):
        output = self.run_cli()
        self.assertIn("Please specify", output)


if __name__ == "__main__":
    unittest.main()
