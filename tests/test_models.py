"""Unit tests for event and roster models."""

import dataclasses
import unittest

from social_doubles.models import (
    EventConfig,
    Match,
    Participant,
    Round,
    SchedulingOptions,
    create_participants,
)


class TestParticipant(unittest.TestCase):
    def test_level_score(self):
        self.assertEqual(Participant(1, "A", "beginner").level_score, 1)
        self.assertEqual(Participant(2, "B", "intermediate").level_score, 2)
        self.assertEqual(Participant(3, "C", "advanced").level_score, 3)

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            Participant(1, "A", "expert")
        with self.assertRaises(ValueError):
            Participant(1, "A", "beginner", rule_understanding="sometimes")

    def test_participant_is_immutable(self):
        player = Participant(1, "A", "beginner")
        with self.assertRaises(dataclasses.FrozenInstanceError):
            player.level = "advanced"

    def test_dict_round_trip(self):
        player = Participant(7, "Grace", "intermediate", "newbie")
        self.assertEqual(Participant.from_dict(player.to_dict()), player)


class TestCreateParticipants(unittest.TestCase):
    def test_ids_are_assigned(self):
        players = create_participants(
            [
                {"name": "A", "level": "beginner"},
                {"id": 2, "name": "B", "level": "advanced"},
                {"name": "C", "level": "intermediate"},
            ]
        )
        self.assertEqual([p.id for p in players], [1, 2, 3])
        self.assertEqual(players[0].rule_understanding, "knows")

    def test_duplicate_ids(self):
        with self.assertRaises(ValueError):
            create_participants(
                [
                    {"id": 1, "name": "A", "level": "beginner"},
                    {"id": 1, "name": "B", "level": "beginner"},
                ]
            )


class TestEventConfig(unittest.TestCase):
    def test_defaults(self):
        event = EventConfig(name="Club Night", start_time="19:00", end_time="21:00")

        self.assertEqual(event.match_duration, 20)
        self.assertEqual(event.break_duration, 5)
        self.assertEqual(event.court_count, 2)
        self.assertEqual(event.round_duration, 25)
        self.assertEqual(event.options, SchedulingOptions(True, True, True))

    def test_options_from_dict(self):
        event = EventConfig(
            name="Club Night",
            start_time="19:00",
            end_time="21:00",
            options={"pair_variation": False},
        )
        self.assertFalse(event.options.pair_variation)
        self.assertTrue(event.options.level_matching)

    def test_invalid_configurations(self):
        """Caller-side checks the scheduling core relies on"""
        with self.assertRaises(ValueError):
            EventConfig(name="X", start_time="21:00", end_time="19:00")
        with self.assertRaises(ValueError):
            EventConfig(name="X", start_time="19:00", end_time="25:00")
        with self.assertRaises(ValueError):
            EventConfig(name="X", start_time="19:00", end_time="21:00", court_count=0)
        with self.assertRaises(ValueError):
            EventConfig(name="X", start_time="19:00", end_time="21:00", match_duration=0)
        with self.assertRaises(ValueError):
            EventConfig(name="X", start_time="19:00", end_time="21:00", break_duration=-1)

        # A zero-length window is allowed and simply schedules nothing
        EventConfig(name="X", start_time="19:00", end_time="19:00")


class TestMatchAndRound(unittest.TestCase):
    def setUp(self):
        self.a = Participant(4, "A", "advanced")
        self.b = Participant(1, "B", "beginner")
        self.c = Participant(3, "C", "intermediate")
        self.d = Participant(2, "D", "beginner")
        self.match = Match(1, (self.a, self.b), (self.c, self.d))

    def test_keys(self):
        self.assertEqual(self.match.pair_keys(), ((1, 4), (2, 3)))
        self.assertEqual(self.match.matchup_key(), (1, 2, 3, 4))

    def test_level_gap(self):
        self.assertEqual(self.match.level_gap(), 1)

    def test_str(self):
        self.assertEqual(str(self.match), "Court 1: A & B vs C & D")

    def test_round_to_dict(self):
        rest = Participant(5, "E", "beginner")
        rnd = Round(1, "19:00", "19:20", [self.match], [rest])
        data = rnd.to_dict()

        self.assertEqual(data["round_number"], 1)
        self.assertEqual(data["matches"][0]["team1"][0]["name"], "A")
        self.assertEqual(data["resting"], [rest.to_dict()])
        self.assertEqual(len(rnd.playing()), 4)


if __name__ == "__main__":
    unittest.main()
