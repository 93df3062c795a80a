from __future__ import annotations

import random
import unittest

from api.engine.target_selector_v1 import advance_target, pick_next
from api.engine.wall_target_state_v1 import GameSession, WallTarget
from engine.shape_catalog import is_valid_target
from tests.wall_fixture_harness import ScriptedRng


class TargetSelectorTests(unittest.TestCase):
    def test_pick_next_always_returns_catalog_target(self) -> None:
        rng = random.Random(20240501)
        current = WallTarget(1, 0)
        for _ in range(2000):
            current = pick_next(current, rng)
            self.assertTrue(1 <= current.value <= 5)
            self.assertTrue(is_valid_target(current.value, current.shape_index))

    def test_seeded_sequence_is_reproducible(self) -> None:
        first = [pick_next(WallTarget(3, 1), random.Random(7)) for _ in range(3)]
        second = [pick_next(WallTarget(3, 1), random.Random(7)) for _ in range(3)]
        self.assertEqual(first, second)

    def test_repeated_value_is_rerolled_when_bias_fires(self) -> None:
        rng = ScriptedRng(randranges=[2, 3, 2], randoms=[0.5])
        self.assertEqual(pick_next(WallTarget(3, 1), rng), WallTarget(4, 2))
        self.assertTrue(rng.exhausted())

    def test_repeated_value_kept_when_bias_misses(self) -> None:
        rng = ScriptedRng(randranges=[2, 0], randoms=[0.85])
        self.assertEqual(pick_next(WallTarget(3, 1), rng), WallTarget(3, 0))
        self.assertTrue(rng.exhausted())

    def test_repeated_shape_is_rerolled_once(self) -> None:
        rng = ScriptedRng(randranges=[2, 1, 3], randoms=[0.9, 0.1])
        self.assertEqual(pick_next(WallTarget(3, 1), rng), WallTarget(3, 3))
        self.assertTrue(rng.exhausted())

    def test_repeat_remains_possible(self) -> None:
        # Both soft re-rolls land on the same target again; no further retry.
        rng = ScriptedRng(randranges=[2, 2, 1, 1], randoms=[0.1, 0.1])
        self.assertEqual(pick_next(WallTarget(3, 1), rng), WallTarget(3, 1))
        self.assertTrue(rng.exhausted())

    def test_single_shape_value_skips_shape_reroll(self) -> None:
        rng = ScriptedRng(randranges=[0, 0], randoms=[0.95])
        self.assertEqual(pick_next(WallTarget(1, 0), rng), WallTarget(1, 0))
        self.assertEqual(rng.randrange_calls, [5, 1])
        self.assertTrue(rng.exhausted())

    def test_different_value_draws_no_bias_roll(self) -> None:
        rng = ScriptedRng(randranges=[4, 13])
        self.assertEqual(pick_next(WallTarget(2, 1), rng), WallTarget(5, 13))
        self.assertTrue(rng.exhausted())

    def test_advance_target_replaces_session_target(self) -> None:
        session = GameSession(WallTarget(2, 1))
        new_target = advance_target(session, ScriptedRng(randranges=[3, 2]))
        self.assertEqual(new_target, WallTarget(4, 2))
        self.assertEqual(session.target, WallTarget(4, 2))
        self.assertEqual(session.generation, 1)


if __name__ == "__main__":
    unittest.main()
