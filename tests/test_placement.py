"""Tests for the bracket placement engine."""

import random

import pytest

from rtcmatch.bracket import build_round1
from rtcmatch.models import ALLOWED_BRACKET_SIZES, Availability, Participant
from rtcmatch.placement import (
    EmptyInputError,
    ImbalancedAllocationError,
    InvalidSizeError,
    allocate_play_ins,
    place_participants,
    play_in_match_count,
    seed_participants,
)
from rtcmatch.shuffle import make_rng, shuffle


def _make_participants(count: int, availability=None, prefix: str = "P") -> list[Participant]:
    return [
        Participant(name=f"{prefix}{i}", availability=availability, singles_handicap=30 + i % 10)
        for i in range(1, count + 1)
    ]


def _real_names(slots) -> list[str]:
    return [s.name for s in slots if not s.is_bye]


def _count_play_ins(slots) -> int:
    return sum(1 for m in build_round1(slots).matches if m.is_play_in)


class TestInputChecks:
    @pytest.mark.parametrize("size", [0, 4, 12, 100, 256, 8.0, True])
    def test_rejects_unsupported_bracket_size(self, size):
        with pytest.raises(InvalidSizeError):
            place_participants(_make_participants(3), size, random.Random(1))

    def test_rejects_empty_field(self):
        with pytest.raises(EmptyInputError):
            place_participants([], 8, random.Random(1))

    def test_ignores_byes_and_none_in_input(self):
        with pytest.raises(EmptyInputError):
            place_participants([None, Participant(name="BYE", is_bye=True)], 8)

    def test_rejects_field_larger_than_bracket(self):
        with pytest.raises(InvalidSizeError):
            place_participants(_make_participants(9), 8, random.Random(1))

    def test_seed_participants_returns_structured_failure(self):
        result = seed_participants([], 16, random_seed=1)
        assert result.success is False
        assert result.error_code == "empty_input"
        assert result.slots == []

        result = seed_participants(_make_participants(5), 12, random_seed=1)
        assert result.success is False
        assert result.error_code == "invalid_size"
        assert "8, 16, 32, 64, or 128" in result.error


class TestPlayInCount:
    def test_play_in_count(self):
        assert play_in_match_count(73, 128) == 9
        assert play_in_match_count(64, 128) == 0
        assert play_in_match_count(40, 128) == 0
        assert play_in_match_count(128, 128) == 64
        assert play_in_match_count(5, 8) == 1


class TestAllocatePlayIns:
    def test_proportional_split(self):
        """36 Day / 37 Night sharing 9 play-ins -> 4 / 5."""
        assert allocate_play_ins(9, 36, 37, 32) == (4, 5)

    def test_shifts_play_ins_to_group_outgrowing_its_half(self):
        """46 Night players need more play-ins to stay near the bottom half."""
        day, night = allocate_play_ins(9, 27, 46, 32)
        assert day + night == 9
        assert (day, night) == (0, 9)

    def test_no_play_ins(self):
        assert allocate_play_ins(0, 10, 10, 16) == (0, 0)

    def test_single_group(self):
        assert allocate_play_ins(3, 11, 0, 16) == (3, 0)
        assert allocate_play_ins(3, 0, 11, 16) == (0, 3)

    def test_total_is_always_preserved(self):
        for total_players in range(2, 129):
            for day in range(0, total_players + 1):
                night = total_players - day
                for size in ALLOWED_BRACKET_SIZES:
                    if total_players >= size:
                        continue
                    total = play_in_match_count(total_players, size)
                    d, n = allocate_play_ins(total, day, night, size // 4)
                    assert d + n == total
                    assert 0 <= d <= day // 2
                    assert 0 <= n <= night // 2

    def test_impossible_allocation_raises(self):
        with pytest.raises(ImbalancedAllocationError):
            allocate_play_ins(5, 3, 3, 32)


class TestRandomPlacement:
    """No availability data: play-ins drawn across the whole bracket."""

    def test_slot_invariants_for_every_field_size(self):
        rng = random.Random(2024)
        for size in ALLOWED_BRACKET_SIZES:
            for n in range(1, size + 1):
                participants = _make_participants(n)
                slots, stats = place_participants(participants, size, rng)

                assert len(slots) == size
                assert all(s is not None for s in slots)
                assert sorted(_real_names(slots)) == sorted(p.name for p in participants)
                assert sum(1 for s in slots if s.is_bye) == size - n

                for i, slot in enumerate(slots):
                    if slot.is_bye:
                        assert slot.seed is None
                    else:
                        assert slot.seed == i + 1

                assert _count_play_ins(slots) == max(0, n - size // 2)
                assert stats.random_placement is True

    def test_reference_scenario_73_in_128(self):
        slots, stats = place_participants(_make_participants(73), 128, random.Random(7))

        assert stats.round2_slots == 64
        assert stats.play_in_match_count == 9
        assert stats.play_in_participant_count == 18
        assert stats.bye_to_round2_count == 55
        assert stats.bye_count == 55

        matches = build_round1(slots).matches
        assert sum(1 for m in matches if m.is_play_in) == 9
        assert sum(1 for m in matches if m.is_bye_match) == 55
        assert all(m.winner is not None for m in matches if m.is_bye_match)

    def test_play_ins_are_spread_not_stacked(self):
        slots, _ = place_participants(_make_participants(73), 128, random.Random(11))
        play_in_numbers = {m.match_number for m in build_round1(slots).matches if m.is_play_in}
        assert len(play_in_numbers) == 9
        assert play_in_numbers != set(range(1, 10))
        assert play_in_numbers != set(range(56, 65))

    def test_full_bracket_has_no_byes(self):
        slots, stats = place_participants(_make_participants(16), 16, random.Random(3))
        assert not any(s.is_bye for s in slots)
        assert stats.play_in_match_count == 8
        assert stats.bye_to_round2_count == 0
        assert _count_play_ins(slots) == 8

    def test_small_field_gets_only_byes(self):
        """3 players in a bracket of 8: three bye matches and one empty match."""
        slots, stats = place_participants(_make_participants(3), 8, random.Random(5))
        matches = build_round1(slots).matches

        assert stats.play_in_match_count == 0
        assert stats.bye_to_round2_count == 3
        assert sum(1 for m in matches if m.is_bye_match) == 3
        assert sum(1 for m in matches if m.is_empty) == 1

    def test_same_seed_same_draw(self):
        participants = _make_participants(21)
        first = seed_participants(participants, 32, random_seed=99)
        second = seed_participants(participants, 32, random_seed=99)
        assert [s.name for s in first.slots] == [s.name for s in second.slots]

    def test_different_seeds_differ(self):
        participants = _make_participants(73)
        first = seed_participants(participants, 128, random_seed=1)
        second = seed_participants(participants, 128, random_seed=2)
        assert [s.name for s in first.slots] != [s.name for s in second.slots]

    def test_input_records_are_not_mutated(self):
        participants = _make_participants(10)
        slots, _ = place_participants(participants, 16, random.Random(1))
        assert all(p.seed is None for p in participants)
        placed = [s for s in slots if not s.is_bye]
        assert all(s.seed is not None for s in placed)


class TestAvailabilityPlacement:
    def test_balanced_groups_stay_in_their_halves(self):
        participants = _make_participants(20, Availability.DAY, "D") + _make_participants(
            20, Availability.NIGHT, "N"
        )
        slots, stats = place_participants(participants, 64, random.Random(8))

        for i, slot in enumerate(slots):
            if slot.is_bye:
                continue
            if slot.availability == Availability.DAY:
                assert i < 32
            else:
                assert i >= 32

        assert stats.day_players == 20
        assert stats.night_players == 20
        assert stats.day_play_in_matches + stats.night_play_in_matches == 8
        assert stats.day_overflow == 0
        assert stats.night_overflow == 0
        assert stats.night_section_start == 32
        assert _count_play_ins(slots) == 8

    def test_reference_scenario_with_availability(self):
        participants = _make_participants(36, Availability.DAY, "D") + _make_participants(
            37, Availability.NIGHT, "N"
        )
        slots, stats = place_participants(participants, 128, random.Random(21))

        matches = build_round1(slots).matches
        assert sum(1 for m in matches if m.is_play_in) == 9
        assert sum(1 for m in matches if m.is_bye_match) == 55
        assert (stats.day_play_in_matches, stats.night_play_in_matches) == (4, 5)

        day_indices = [i for i, s in enumerate(slots) if s.availability == Availability.DAY]
        night_indices = [i for i, s in enumerate(slots) if s.availability == Availability.NIGHT]
        assert max(day_indices) < 64 <= min(night_indices)

    def test_play_ins_never_mix_sessions(self):
        participants = _make_participants(30, Availability.DAY, "D") + _make_participants(
            25, Availability.NIGHT, "N"
        )
        slots, _ = place_participants(participants, 64, random.Random(4))
        for match in build_round1(slots).matches:
            if match.is_play_in:
                assert match.player1.availability == match.player2.availability

    def test_oversized_group_stays_contiguous(self):
        participants = _make_participants(50, Availability.DAY, "D") + _make_participants(
            10, Availability.NIGHT, "N"
        )
        slots, stats = place_participants(participants, 64, random.Random(6))

        day_indices = [i for i, s in enumerate(slots) if s.availability == Availability.DAY]
        night_indices = [i for i, s in enumerate(slots) if s.availability == Availability.NIGHT]
        assert len(day_indices) == 50
        assert len(night_indices) == 10
        assert max(day_indices) < min(night_indices)
        assert stats.day_overflow > 0
        assert _count_play_ins(slots) == 28

    def test_seeds_follow_slot_position(self):
        participants = _make_participants(9, Availability.DAY, "D") + _make_participants(
            4, Availability.NIGHT, "N"
        )
        slots, _ = place_participants(participants, 16, random.Random(12))
        for i, slot in enumerate(slots):
            assert slot.seed == (None if slot.is_bye else i + 1)

    def test_untagged_players_are_kept(self):
        participants = (
            _make_participants(10, Availability.DAY, "D")
            + _make_participants(3, Availability.NIGHT, "N")
            + _make_participants(7, None, "X")
        )
        slots, stats = place_participants(participants, 32, random.Random(13))

        assert sorted(_real_names(slots)) == sorted(p.name for p in participants)
        assert stats.flexible_players == 7
        assert stats.day_players + stats.night_players == 20
        assert stats.random_placement is False
        assert _count_play_ins(slots) == 4

    def test_string_availability_codes_are_recognised(self):
        participants = [Participant(name=f"D{i}", availability="D") for i in range(4)] + [
            Participant(name=f"N{i}", availability="N") for i in range(4)
        ]
        slots, stats = place_participants(participants, 16, random.Random(1))
        assert stats.day_players == 4
        assert stats.night_players == 4
        assert all(i < 8 for i, s in enumerate(slots) if s.name.startswith("D"))

    def test_conservation_across_sizes(self):
        rng = random.Random(77)
        for size in ALLOWED_BRACKET_SIZES:
            for n in range(1, size + 1, 3):
                day = n * 2 // 3
                participants = _make_participants(day, Availability.DAY, "D") + _make_participants(
                    n - day, Availability.NIGHT, "N"
                )
                slots, _ = place_participants(participants, size, rng)

                assert len(slots) == size
                assert sorted(_real_names(slots)) == sorted(p.name for p in participants)
                assert _count_play_ins(slots) == max(0, n - size // 2) or n == size


class TestFullBracketWithAvailability:
    def test_even_split(self):
        participants = _make_participants(8, Availability.DAY, "D") + _make_participants(
            8, Availability.NIGHT, "N"
        )
        slots, stats = place_participants(participants, 16, random.Random(2))

        assert [s.availability for s in slots[:8]] == [Availability.DAY] * 8
        assert [s.availability for s in slots[8:]] == [Availability.NIGHT] * 8
        assert stats.bye_count == 0
        assert stats.night_section_start == 8

    def test_day_overflow_sits_after_day_block(self):
        participants = _make_participants(10, Availability.DAY, "D") + _make_participants(
            6, Availability.NIGHT, "N"
        )
        slots, stats = place_participants(participants, 16, random.Random(2))

        assert all(s.availability == Availability.DAY for s in slots[:10])
        assert all(s.availability == Availability.NIGHT for s in slots[10:])
        assert stats.day_overflow == 2
        assert stats.night_overflow == 0
        assert [s.seed for s in slots] == list(range(1, 17))

    def test_night_overflow_sits_above_night_block(self):
        participants = _make_participants(3, Availability.DAY, "D") + _make_participants(
            5, Availability.NIGHT, "N"
        )
        slots, stats = place_participants(participants, 8, random.Random(2))

        assert all(s.availability == Availability.DAY for s in slots[:3])
        assert all(s.availability == Availability.NIGHT for s in slots[3:])
        assert stats.night_overflow == 1
        assert stats.night_section_start == 3

    def test_odd_groups_count_the_mixed_match(self):
        participants = _make_participants(9, Availability.DAY, "D") + _make_participants(
            7, Availability.NIGHT, "N"
        )
        slots, stats = place_participants(participants, 16, random.Random(4))

        assert slots[8].availability == Availability.DAY
        assert slots[9].availability == Availability.NIGHT
        assert (stats.day_play_in_matches, stats.night_play_in_matches) == (4, 3)
        assert stats.mixed_play_in_matches == 1
        assert (
            stats.day_play_in_matches
            + stats.night_play_in_matches
            + stats.mixed_play_in_matches
            == stats.play_in_match_count
        )

    def test_even_groups_have_no_mixed_match(self):
        participants = _make_participants(10, Availability.DAY, "D") + _make_participants(
            6, Availability.NIGHT, "N"
        )
        _, stats = place_participants(participants, 16, random.Random(4))
        assert stats.mixed_play_in_matches == 0
        assert stats.day_play_in_matches + stats.night_play_in_matches == 8


class TestShuffle:
    def test_returns_permutation_without_touching_input(self):
        items = list(range(20))
        result = shuffle(items, make_rng(3))

        assert items == list(range(20))
        assert sorted(result) == items

    def test_seeded_generators_agree(self):
        assert shuffle("abcdefgh", make_rng(8)) == shuffle("abcdefgh", make_rng(8))

    def test_empty_and_single(self):
        assert shuffle([], make_rng(1)) == []
        assert shuffle(["x"], make_rng(1)) == ["x"]
