"""
Tests for the bitrate plan
"""
import unittest

from cliprelay.errors import SizeConstraintInfeasible
from cliprelay.models import plan_bitrate


class TestPlanBitrate(unittest.TestCase):

    def test_nine_mb_over_two_minutes(self):
        """10MB limit at a 90% margin gives a 9MB budget"""
        plan = plan_bitrate(10 * 0.9, 120)
        self.assertEqual(plan.target_bits, 72_000_000)
        self.assertEqual(plan.total_bitrate, 600_000)
        self.assertEqual(plan.audio_bitrate, 64_000)
        self.assertEqual(plan.video_bitrate, 536_000)

    def test_plan_is_reproducible(self):
        self.assertEqual(plan_bitrate(9, 120), plan_bitrate(9, 120))

    def test_division_truncates(self):
        # 72_000_000 / 7 = 10_285_714.28...
        plan = plan_bitrate(9, 7)
        self.assertEqual(plan.total_bitrate, 10_285_714)
        self.assertEqual(plan.video_bitrate, 10_285_714 - 64_000)

    def test_fractional_duration(self):
        plan = plan_bitrate(9, 120.5)
        self.assertEqual(plan.total_bitrate, 597_510)

    def test_zero_duration_is_infeasible(self):
        with self.assertRaises(SizeConstraintInfeasible):
            plan_bitrate(9, 0)

    def test_negative_duration_is_infeasible(self):
        with self.assertRaises(SizeConstraintInfeasible):
            plan_bitrate(9, -3)

    def test_nan_duration_is_infeasible(self):
        with self.assertRaises(SizeConstraintInfeasible):
            plan_bitrate(9, float("nan"))

    def test_budget_too_small_for_duration(self):
        # 72_000_000 / 1125 = 64_000 -> nothing left for video
        with self.assertRaises(SizeConstraintInfeasible):
            plan_bitrate(9, 1125)

    def test_just_feasible(self):
        plan = plan_bitrate(9, 1124)
        self.assertGreater(plan.video_bitrate, 0)


if __name__ == '__main__':
    unittest.main()
