"""Unit tests for the day workflow state machine."""

import pytest

from signal2noise.core.clock import FixedClock
from signal2noise.core.state_store import StateStore
from signal2noise.domain.task import Task
from signal2noise.services.workflow_service import (
    CHECKLIST_QUESTIONS,
    PHASE_TRANSITIONS,
    Screen,
    TaskWorkflow,
    WorkflowPhase,
    is_signal,
)


def _sorted_day(workflow: TaskWorkflow, *checked_counts: int) -> list[Task]:
    tasks = workflow.sort_my_day([f"Task {i}" for i in range(len(checked_counts))])
    for count in checked_counts:
        workflow.categorize_current_task(count)
    return tasks


@pytest.mark.unit
class TestStateMachineTable:
    """Tests for the transition table itself."""

    def test_every_phase_has_transitions(self):
        assert set(PHASE_TRANSITIONS) == set(WorkflowPhase)

    def test_recap_leads_back_to_intake(self):
        assert WorkflowPhase.INTAKE in PHASE_TRANSITIONS[WorkflowPhase.RECAP]

    @pytest.mark.parametrize(("checked", "expected"), [(0, False), (2, False), (3, True), (4, True)])
    def test_signal_threshold(self, checked, expected):
        assert is_signal(checked) is expected

    def test_four_checklist_questions(self, workflow: TaskWorkflow):
        assert len(CHECKLIST_QUESTIONS) == 4
        assert workflow.checklist_questions == CHECKLIST_QUESTIONS


@pytest.mark.unit
class TestSortMyDay:
    """Tests for task intake."""

    def test_creates_tasks_and_starts_wizard(self, workflow: TaskWorkflow, store: StateStore, screens: list):
        tasks = workflow.sort_my_day(["Write report", "  ", "", "Email Sam  "])

        assert [task.text for task in tasks] == ["Write report", "Email Sam"]
        assert store.get("tasks") == tasks
        assert store.get("currentTaskIndex") == 0
        assert store.get("signalTasks") == []
        assert store.get("noiseTasks") == []
        assert store.get("analytics.totalTasksCreated") == 2
        assert workflow.phase == WorkflowPhase.CATEGORIZING
        assert screens[-1] == Screen.WIZARD

    def test_empty_input_changes_nothing(self, workflow: TaskWorkflow, store: StateStore, screens: list):
        assert workflow.sort_my_day(["", "   "]) == []

        assert store.get("tasks") == []
        assert workflow.phase == WorkflowPhase.INTAKE
        assert screens == []

    def test_ignored_while_categorizing(self, workflow: TaskWorkflow, store: StateStore):
        workflow.sort_my_day(["One"])

        assert workflow.sort_my_day(["Two"]) == []
        assert [task.text for task in store.get("tasks")] == ["One"]


@pytest.mark.unit
class TestCategorize:
    """Tests for the categorization wizard."""

    def test_threshold_routes_to_buckets(self, workflow: TaskWorkflow, store: StateStore):
        tasks = _sorted_day(workflow, 3, 2, 4)

        assert [t.id for t in store.get("signalTasks")] == [tasks[0].id, tasks[2].id]
        assert [t.id for t in store.get("noiseTasks")] == [tasks[1].id]
        assert workflow.phase == WorkflowPhase.SORTED

    def test_every_task_lands_in_exactly_one_bucket(self, workflow: TaskWorkflow, store: StateStore):
        tasks = _sorted_day(workflow, 0, 4, 1, 3, 2)

        signal_ids = {t.id for t in store.get("signalTasks")}
        noise_ids = {t.id for t in store.get("noiseTasks")}
        assert signal_ids.isdisjoint(noise_ids)
        assert signal_ids | noise_ids == {t.id for t in tasks}

    def test_index_advances_and_screen_stays_on_wizard(
        self, workflow: TaskWorkflow, store: StateStore, screens: list
    ):
        workflow.sort_my_day(["A", "B"])

        workflow.categorize_current_task(4)

        assert store.get("currentTaskIndex") == 1
        assert workflow.current_task().text == "B"
        assert screens[-1] == Screen.WIZARD

    def test_finishing_with_signal_shows_sorted(self, workflow: TaskWorkflow, screens: list):
        _sorted_day(workflow, 3)

        assert screens[-1] == Screen.SORTED

    def test_skip_files_as_noise(self, workflow: TaskWorkflow, store: StateStore):
        workflow.sort_my_day(["A", "B"])

        skipped = workflow.skip_current_task()

        assert store.get("noiseTasks") == [skipped]
        assert store.get("currentTaskIndex") == 1

    @pytest.mark.parametrize("checked", [-1, 5])
    def test_out_of_range_checked_count_raises(self, workflow: TaskWorkflow, checked):
        workflow.sort_my_day(["A"])

        with pytest.raises(ValueError, match="checked_count"):
            workflow.categorize_current_task(checked)

    def test_categorize_without_current_task_is_noop(self, workflow: TaskWorkflow, store: StateStore):
        assert workflow.categorize_current_task(4) is None

        assert store.get("signalTasks") == []
        assert store.get("currentTaskIndex") == 0

    def test_categorize_after_sorted_is_noop(self, workflow: TaskWorkflow, store: StateStore):
        _sorted_day(workflow, 4)

        assert workflow.categorize_current_task(4) is None
        assert len(store.get("signalTasks")) == 1
        assert store.get("currentTaskIndex") == 1

    def test_wizard_progress(self, workflow: TaskWorkflow):
        workflow.sort_my_day(["A", "B", "C", "D"])
        workflow.categorize_current_task(0)

        progress = workflow.get_wizard_progress()

        assert (progress.current, progress.total, progress.percentage) == (2, 4, 50)

    def test_wizard_progress_caps_at_total(self, workflow: TaskWorkflow):
        _sorted_day(workflow, 4, 4)

        progress = workflow.get_wizard_progress()

        assert (progress.current, progress.total, progress.percentage) == (2, 2, 100)


@pytest.mark.unit
class TestZeroSignalRethink:
    """Tests for the all-noise path."""

    def test_all_noise_offers_rethink(self, workflow: TaskWorkflow, screens: list):
        _sorted_day(workflow, 1, 1)

        assert workflow.phase == WorkflowPhase.ZERO_SIGNAL_RETHINK
        assert screens[-1] == Screen.ZERO_SIGNAL_PROMPT

    def test_rethink_restarts_with_same_tasks(self, workflow: TaskWorkflow, store: StateStore, screens: list):
        tasks = _sorted_day(workflow, 1, 1)

        assert workflow.rethink_tasks() is True

        assert store.get("currentTaskIndex") == 0
        assert store.get("signalTasks") == []
        assert store.get("noiseTasks") == []
        assert store.get("tasks") == tasks
        assert workflow.phase == WorkflowPhase.CATEGORIZING
        assert screens[-1] == Screen.WIZARD

    def test_rethink_then_signal_reaches_sorted(self, workflow: TaskWorkflow):
        _sorted_day(workflow, 1, 1)
        workflow.rethink_tasks()

        workflow.categorize_current_task(3)
        workflow.categorize_current_task(0)

        assert workflow.phase == WorkflowPhase.SORTED

    def test_rethink_outside_prompt_is_noop(self, workflow: TaskWorkflow):
        assert workflow.rethink_tasks() is False
        assert workflow.phase == WorkflowPhase.INTAKE


@pytest.mark.unit
class TestSortedAndLocked:
    """Tests for completion toggling and locking."""

    def test_toggle_mirrors_onto_tasks(self, workflow: TaskWorkflow, store: StateStore):
        tasks = _sorted_day(workflow, 4, 0)

        toggled = workflow.toggle_signal_task(tasks[0].id)

        assert toggled.completed is True
        assert store.get("signalTasks")[0].completed is True
        assert store.get("tasks")[0].completed is True
        assert store.get("analytics.signalTasksCompleted") == 1

    def test_toggle_twice_restores(self, workflow: TaskWorkflow, store: StateStore):
        tasks = _sorted_day(workflow, 4)

        workflow.toggle_signal_task(tasks[0].id)
        workflow.toggle_signal_task(tasks[0].id)

        assert store.get("tasks")[0].completed is False
        assert store.get("analytics.signalTasksCompleted") == 0

    def test_toggle_explicit_value_is_idempotent(self, workflow: TaskWorkflow, store: StateStore):
        tasks = _sorted_day(workflow, 4)

        workflow.toggle_signal_task(tasks[0].id, completed=True)
        workflow.toggle_signal_task(tasks[0].id, completed=True)

        assert store.get("analytics.signalTasksCompleted") == 1

    def test_toggle_noise_task_is_ignored(self, workflow: TaskWorkflow, store: StateStore):
        tasks = _sorted_day(workflow, 4, 0)

        assert workflow.toggle_signal_task(tasks[1].id) is None
        assert store.get("noiseTasks")[0].completed is False

    def test_lock(self, workflow: TaskWorkflow, store: StateStore, screens: list):
        _sorted_day(workflow, 4)

        assert workflow.lock_signal_tasks() is True
        assert workflow.lock_signal_tasks() is True

        assert store.get("isLocked") is True
        assert workflow.phase == WorkflowPhase.LOCKED
        assert screens[-1] == Screen.SORTED

    def test_lock_before_sorting_is_noop(self, workflow: TaskWorkflow, store: StateStore):
        assert workflow.lock_signal_tasks() is False
        assert store.get("isLocked") is False


@pytest.mark.unit
class TestRecapAndNewDay:
    """Tests for the end-of-day flow."""

    def test_recap_counts_streak_once(self, workflow: TaskWorkflow, store: StateStore, screens: list):
        tasks = _sorted_day(workflow, 4, 3, 0)
        workflow.toggle_signal_task(tasks[0].id)
        workflow.toggle_signal_task(tasks[1].id)
        workflow.lock_signal_tasks()

        first = workflow.show_recap()
        second = workflow.show_recap()

        assert first == second
        assert first.streak_count == 1
        assert first.signal_completed == 2
        assert first.signal_total == 2
        assert first.noise_total == 1
        assert first.completion_rate == 100
        assert store.get("streakData.lastCompletedDate") == "2024-03-04"
        assert screens[-1] == Screen.RECAP

    def test_recap_with_unfinished_signal_keeps_streak(self, workflow: TaskWorkflow):
        _sorted_day(workflow, 4)

        summary = workflow.show_recap()

        assert summary.streak_count == 0
        assert summary.completion_rate == 0

    def test_recap_before_sorting_is_noop(self, workflow: TaskWorkflow):
        assert workflow.show_recap() is None

    def test_new_day_clears_session_and_keeps_history(
        self, workflow: TaskWorkflow, store: StateStore, screens: list
    ):
        tasks = _sorted_day(workflow, 4, 4)
        workflow.toggle_signal_task(tasks[0].id)
        workflow.toggle_signal_task(tasks[1].id)
        workflow.show_recap()

        assert workflow.start_new_day() is True

        assert store.get("tasks") == []
        assert store.get("signalTasks") == []
        assert store.get("noiseTasks") == []
        assert store.get("currentTaskIndex") == 0
        assert store.get("isLocked") is False
        assert store.get("streakData.count") == 1
        assert store.get("analytics.totalTasksCreated") == 2
        assert store.get("analytics.signalTasksCompleted") == 2
        assert store.get("analytics.averageSignalTasks") == 2.0
        assert store.get("analytics.totalDays") == 1
        assert workflow.phase == WorkflowPhase.INTAKE
        assert screens[-1] == Screen.TASK_INPUT

    def test_new_day_outside_recap_is_noop(self, workflow: TaskWorkflow, store: StateStore):
        _sorted_day(workflow, 4)

        assert workflow.start_new_day() is False
        assert len(store.get("tasks")) == 1

    def test_streak_grows_over_consecutive_days(self, workflow: TaskWorkflow, fixed_clock: FixedClock):
        counts = []
        for _ in range(3):
            tasks = _sorted_day(workflow, 4)
            workflow.toggle_signal_task(tasks[0].id)
            counts.append(workflow.show_recap().streak_count)
            workflow.start_new_day()
            fixed_clock.advance(days=1)

        assert counts == [1, 2, 3]


@pytest.mark.unit
class TestResume:
    """Tests for deriving the phase from restored state."""

    def test_fresh_store_without_goal_shows_north_star(self, workflow: TaskWorkflow, screens: list):
        assert workflow.resume() == WorkflowPhase.INTAKE
        assert screens == [Screen.NORTH_STAR]

    def test_fresh_store_with_goal_shows_task_input(self, workflow: TaskWorkflow, store: StateStore, screens: list):
        store.set("northStar.goal", "Finish the grant application")

        workflow.resume()

        assert screens == [Screen.TASK_INPUT]

    def test_mid_wizard(self, store: StateStore, fixed_clock: FixedClock, screens: list):
        store.set("northStar.goal", "Finish the grant application")
        tasks = [Task(text="A"), Task(text="B")]
        store.set("tasks", tasks)
        store.set("signalTasks", tasks[:1])
        store.set("currentTaskIndex", 1)

        workflow = TaskWorkflow(store, clock=fixed_clock, navigator=screens.append)

        assert workflow.resume() == WorkflowPhase.CATEGORIZING
        assert workflow.current_task().text == "B"
        assert screens == [Screen.WIZARD]

    def test_locked_day(self, store: StateStore, fixed_clock: FixedClock):
        task = Task(text="A")
        store.set("tasks", [task])
        store.set("signalTasks", [task])
        store.set("currentTaskIndex", 1)
        store.set("isLocked", True)

        workflow = TaskWorkflow(store, clock=fixed_clock)

        assert workflow.resume() == WorkflowPhase.LOCKED

    def test_all_noise_day(self, store: StateStore, fixed_clock: FixedClock):
        task = Task(text="A")
        store.set("tasks", [task])
        store.set("noiseTasks", [task])
        store.set("currentTaskIndex", 1)

        assert TaskWorkflow(store, clock=fixed_clock).resume() == WorkflowPhase.ZERO_SIGNAL_RETHINK

    def test_index_beyond_tasks_is_clamped(self, store: StateStore, fixed_clock: FixedClock):
        task = Task(text="A")
        store.set("tasks", [task])
        store.set("signalTasks", [task])
        store.set("currentTaskIndex", 7)

        phase = TaskWorkflow(store, clock=fixed_clock).resume()

        assert phase == WorkflowPhase.SORTED
        assert store.get("currentTaskIndex") == 1
