"""
Test stopping conditions.

Run with: python tests/test_stopping.py
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dataclasses import dataclass

import pytest

from colonizer.hosting import StopReason, StoppingCondition


@dataclass
class Progress:
	best_fitness: int = 100
	current_iteration: int = 0
	iterations_without_improvement: int = 0


def test_no_limits_never_stops():
	assert StoppingCondition().check(Progress(current_iteration=10**6), elapsed=10**6) is None


def test_max_iterations():
	condition = StoppingCondition(max_iterations=50)
	assert condition.check(Progress(current_iteration=49)) is None
	assert condition.check(Progress(current_iteration=50)) == StopReason.MAX_ITERATIONS


def test_max_iterations_counts_from_start_iteration():
	condition = StoppingCondition(max_iterations=50)
	assert condition.check(Progress(current_iteration=120), start_iteration=100) is None
	assert condition.check(Progress(current_iteration=150), start_iteration=100) == StopReason.MAX_ITERATIONS


def test_convergence():
	condition = StoppingCondition(max_iterations_without_improvement=20)
	assert condition.check(Progress(iterations_without_improvement=19)) is None
	assert condition.check(Progress(iterations_without_improvement=20)) == StopReason.CONVERGENCE


def test_target_fitness():
	condition = StoppingCondition(target_fitness=500)
	assert condition.check(Progress(best_fitness=501)) is None
	assert condition.check(Progress(best_fitness=500)) == StopReason.TARGET_REACHED


def test_timeout():
	condition = StoppingCondition(max_seconds=1.5)
	assert condition.check(Progress(), elapsed=1.0) is None
	assert condition.check(Progress(), elapsed=1.5) == StopReason.TIMEOUT


def test_target_takes_precedence():
	condition = StoppingCondition(max_iterations=10, target_fitness=100)
	assert condition.check(Progress(best_fitness=50, current_iteration=10)) == StopReason.TARGET_REACHED


@pytest.mark.parametrize("kwargs", [
	{"max_iterations": -1},
	{"max_iterations_without_improvement": 0},
	{"max_seconds": 0},
])
def test_invalid_limits(kwargs):
	with pytest.raises(ValueError):
		StoppingCondition(**kwargs)


if __name__ == "__main__":
	print("=" * 60)
	print("Stopping Condition Tests")
	print("=" * 60)

	test_no_limits_never_stops()
	test_max_iterations()
	test_max_iterations_counts_from_start_iteration()
	test_convergence()
	test_target_fitness()
	test_timeout()
	test_target_takes_precedence()
	test_invalid_limits({"max_seconds": 0})

	print("\nAll tests passed!")
