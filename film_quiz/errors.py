"""
Exceptions raised by the recommender core.
An empty candidate list is a normal outcome and never raises.
"""


class FilmQuizError(Exception):
	"""Base class for all errors raised by this package."""


class StoreUnavailable(FilmQuizError):
	"""The movie catalog could not be reached or a query failed."""


class InvalidAnswers(FilmQuizError):
	"""A quiz answer is outside its recognized values (strict normalization only)."""
