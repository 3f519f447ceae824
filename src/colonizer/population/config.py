"""
Configuration for the steady-state evolutionary population.
"""

from dataclasses import asdict, dataclass, fields
from pathlib import Path

import yaml


@dataclass
class PopulationConfig:
	"""
	Configuration for a steady-state Population.

	Defaults reproduce the classic planet-colonizer schedule:
	- population_size: 10 slots, fixed for the life of the population
	- initial_mutation_rate: 70, a mutation trial fires with probability
	  1/mutation_rate; the rate decays by one per generation (floor 1)
	- initial_cataclysm_countdown: 1000 generations without improvement
	  before the whole population is regenerated
	- crossover/mutation counts per generation: int(N * fraction) + offset
	- max_selection_attempts: redraws allowed to find two distinct parents
	  and a distinct victim before a crossover attempt is skipped
	- preserve_best_on_cataclysm: carry the best individual over into the
	  regenerated population
	- legacy_best_overwrite: record every crossover child as best, even when
	  it did not improve (classic behaviour, off by default)
	"""
	population_size: int = 10
	initial_mutation_rate: int = 70
	initial_cataclysm_countdown: int = 1000
	crossover_fraction: float = 0.03
	crossover_offset: int = 2
	mutation_fraction: float = 0.03
	mutation_offset: int = 2
	max_selection_attempts: int = 32
	preserve_best_on_cataclysm: bool = True
	legacy_best_overwrite: bool = False

	def __post_init__(self):
		self.validate()

	def validate(self) -> None:
		"""Raise ValueError on any out-of-range setting."""
		if self.population_size < 1:
			raise ValueError(f"population_size must be >= 1, got {self.population_size}")
		if self.initial_mutation_rate < 1:
			raise ValueError(f"initial_mutation_rate must be >= 1, got {self.initial_mutation_rate}")
		if self.initial_cataclysm_countdown < 1:
			raise ValueError(f"initial_cataclysm_countdown must be >= 1, got {self.initial_cataclysm_countdown}")
		if self.crossover_fraction < 0 or self.mutation_fraction < 0:
			raise ValueError("crossover_fraction and mutation_fraction must be >= 0")
		if self.crossover_offset < 0 or self.mutation_offset < 0:
			raise ValueError("crossover_offset and mutation_offset must be >= 0")
		if self.max_selection_attempts < 1:
			raise ValueError(f"max_selection_attempts must be >= 1, got {self.max_selection_attempts}")

	@property
	def max_children(self) -> int:
		"""Crossover attempts per generation."""
		return int(self.population_size * self.crossover_fraction) + self.crossover_offset

	@property
	def max_mutations(self) -> int:
		"""Mutation trials per generation."""
		return int(self.population_size * self.mutation_fraction) + self.mutation_offset

	def to_yaml(self) -> str:
		"""Convert config to YAML string."""
		return yaml.dump(asdict(self), default_flow_style=False, sort_keys=False)

	def save_yaml(self, filepath: str) -> None:
		"""Save config to YAML file."""
		path = Path(filepath)
		path.parent.mkdir(parents=True, exist_ok=True)
		with open(path, 'w') as f:
			f.write(self.to_yaml())

	@classmethod
	def from_yaml(cls, yaml_str: str) -> 'PopulationConfig':
		"""Create config from YAML string. Unknown keys are rejected."""
		data = yaml.safe_load(yaml_str) or {}
		if not isinstance(data, dict):
			raise ValueError("Population config must be a YAML mapping")
		known = {f.name for f in fields(cls)}
		unknown = sorted(set(data) - known)
		if unknown:
			raise ValueError(f"Unknown population config keys: {', '.join(unknown)}")
		return cls(**data)

	@classmethod
	def load_yaml(cls, filepath: str) -> 'PopulationConfig':
		"""Load config from YAML file."""
		with open(filepath, 'r') as f:
			return cls.from_yaml(f.read())
