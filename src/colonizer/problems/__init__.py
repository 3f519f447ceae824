"""Reference problems implementing the Individual protocol."""

from colonizer.problems.tour import TourIndividual, TourProblem


__all__ = [
	'TourProblem',
	'TourIndividual',
]
