from core.lifecycle import StepContext, StepLifecycleTracker


class TestStepLifecycleTracker:

    def test_three_steps(self):
        tracker = StepLifecycleTracker()
        tracker.start_scenario("X")
        for _ in range(3):
            tracker.complete_step()

        assert tracker.current() == StepContext(scenario_name="X", step_index=3)

    def test_complete_step_returns_post_increment_index(self):
        tracker = StepLifecycleTracker()
        tracker.start_scenario("X")
        assert tracker.complete_step() == 1
        assert tracker.complete_step() == 2

    def test_start_scenario_resets_index(self):
        tracker = StepLifecycleTracker()
        tracker.start_scenario("First")
        tracker.complete_step()
        tracker.start_scenario("Second")

        assert tracker.current() == StepContext(scenario_name="Second", step_index=0)

    def test_current_is_a_snapshot(self):
        tracker = StepLifecycleTracker()
        tracker.start_scenario("X")
        snapshot = tracker.current()
        tracker.complete_step()
        assert snapshot.step_index == 0

    def test_instances_are_independent(self):
        lane_a, lane_b = StepLifecycleTracker(), StepLifecycleTracker()
        lane_a.start_scenario("A")
        lane_b.start_scenario("B")
        lane_a.complete_step()
        lane_a.complete_step()
        lane_b.complete_step()

        assert lane_a.current().step_index == 2
        assert lane_b.current() == StepContext(scenario_name="B", step_index=1)
