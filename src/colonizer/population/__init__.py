"""
Steady-state evolutionary population.

Usage:
	from colonizer.population import Population, PopulationConfig

	config = PopulationConfig(population_size=30)
	population = Population(factory, config, seed=42)

	for _ in range(1000):
		population.advance()

	print(population.best_fitness)
"""

from colonizer.population.config import PopulationConfig
from colonizer.population.individual import Individual, PopulationFactory
from colonizer.population.population import Population


__all__ = [
	'Individual',
	'PopulationFactory',
	'PopulationConfig',
	'Population',
]
