from __future__ import annotations

import unittest

from api.engine.match_evaluator_v1 import MatchAttempt, MatchReason, MatchResult, evaluate, explain
from api.engine.wall_target_state_v1 import WallTarget
from engine.shape_catalog import shape_count


def _all_targets():
    for value in range(1, 6):
        for shape_index in range(shape_count(value)):
            yield WallTarget(value, shape_index)


class MatchEvaluatorTests(unittest.TestCase):
    def test_self_match_always_succeeds(self) -> None:
        for target in _all_targets():
            attempt = MatchAttempt(target.value, target.shape_index)
            self.assertIs(evaluate(attempt, target), MatchResult.SUCCESS)

    def test_mirror_relation_is_symmetric(self) -> None:
        for left in _all_targets():
            for right in _all_targets():
                if left.value != right.value:
                    continue
                forward = evaluate(MatchAttempt(left.value, left.shape_index), right)
                backward = evaluate(MatchAttempt(right.value, right.shape_index), left)
                self.assertIs(forward, backward, f"{left} vs {right}")

    def test_value_mismatch_short_circuits(self) -> None:
        for target in _all_targets():
            for value in range(1, 6):
                if value == target.value:
                    continue
                for shape_index in range(-1, 15):
                    verdict = explain(MatchAttempt(value, shape_index), target)
                    self.assertIs(verdict.result, MatchResult.FAILURE)
                    self.assertIs(verdict.reason, MatchReason.VALUE_MISMATCH)

    def test_mirror_match_on_reversed_shape(self) -> None:
        verdict = explain(MatchAttempt(3, 2), WallTarget(3, 1))
        self.assertTrue(verdict.success)
        self.assertIs(verdict.reason, MatchReason.MIRROR)

    def test_palindrome_matches_itself(self) -> None:
        self.assertIs(evaluate(MatchAttempt(4, 2), WallTarget(4, 2)), MatchResult.SUCCESS)

    def test_value_mismatch_scenario(self) -> None:
        self.assertIs(evaluate(MatchAttempt(5, 0), WallTarget(2, 0)), MatchResult.FAILURE)

    def test_same_length_non_mirror_fails(self) -> None:
        # [3,1,1] reversed is [1,1,3], not [2,2,1]
        verdict = explain(MatchAttempt(5, 5), WallTarget(5, 6))
        self.assertIs(verdict.result, MatchResult.FAILURE)
        self.assertIs(verdict.reason, MatchReason.SHAPE_MISMATCH)

    def test_mirror_across_five_stack_shapes(self) -> None:
        self.assertTrue(explain(MatchAttempt(5, 12), WallTarget(5, 9)).success)
        self.assertTrue(explain(MatchAttempt(5, 1), WallTarget(5, 4)).success)
        self.assertFalse(explain(MatchAttempt(5, 1), WallTarget(5, 3)).success)

    def test_unknown_carried_shape_fails(self) -> None:
        verdict = explain(MatchAttempt(3, 7), WallTarget(3, 0))
        self.assertIs(verdict.result, MatchResult.FAILURE)
        self.assertIs(verdict.reason, MatchReason.UNKNOWN_SHAPE)


if __name__ == "__main__":
    unittest.main()
