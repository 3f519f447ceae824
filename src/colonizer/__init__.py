"""
Colonizer: steady-state evolutionary optimizer.

Modules:
	population - Population engine, Individual protocol, PopulationConfig
	hosting - Computation threads, dispatcher, optimization tasks
	transport - HTTP proxy for remote workers
	problems - Reference problems (closed tours)
	logger / progress - Logging and generation progress helpers
"""

from colonizer.logger import Logger, OptimizationLogger, create_logger
from colonizer.population import Individual, Population, PopulationConfig, PopulationFactory
from colonizer.progress import ProgressTracker


__version__ = "0.1.0"

__all__ = [
	'Logger',
	'OptimizationLogger',
	'create_logger',
	'Individual',
	'Population',
	'PopulationConfig',
	'PopulationFactory',
	'ProgressTracker',
]
