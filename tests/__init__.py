"""
Colonizer Test Suite

Run everything with pytest, or any single file as a script:
	python tests/test_population.py

CORE TESTS:
	test_population.py    # Generation step, schedule, cataclysm, best tracking
	test_selection.py     # Weakest-slot scan, healthy selection window
	test_config.py        # PopulationConfig validation and YAML

HOSTING:
	test_stopping.py      # Stopping conditions
	test_task_thread.py   # OptimizationTask, ComputationThread
	test_dispatcher.py    # Thread registry, concurrent access

SURFACES:
	test_tour.py          # Tour reference problem
	test_client.py        # Remote worker client (mocked HTTP)
	test_cli.py           # colonizer CLI
	test_logging.py       # Logger, OptimizationLogger, ProgressTracker
"""
