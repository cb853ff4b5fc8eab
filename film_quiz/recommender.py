"""
Recommender module.
Turns quiz answers into catalog criteria, fetches an oversampled candidate pool and ranks it.
"""

from typing import Iterable, List, Optional

from loguru import logger

from . import config
from .catalog import CatalogStore
from .models import Era, Movie, Origin, Popularity, QuizAnswers, RatingLevel, RecommendationResult, SearchCriteria
from .scoring import Scorer


def build_criteria(answers: QuizAnswers, exclude_ids: Iterable[int] = (), limit: int = config.DEFAULT_QUERY_LIMIT) -> SearchCriteria:
	"""Map each answered quiz dimension onto an independent store filter."""
	criteria = SearchCriteria(exclude_ids=list(exclude_ids), limit=limit)

	if answers.genres:
		criteria.genres = sorted(answers.genres)

	if answers.era == Era.OLD:
		criteria.min_year = 1950
		criteria.max_year = 2000
	elif answers.era == Era.MODERN:
		criteria.min_year = 2010

	if answers.origin == Origin.POLISH:
		criteria.is_polish = True
	elif answers.origin == Origin.FOREIGN:
		criteria.is_polish = False

	if answers.rating == RatingLevel.HIGH:
		criteria.min_rating = 7.5
	elif answers.rating == RatingLevel.MEDIUM:
		criteria.min_rating = 6.0

	if answers.popularity == Popularity.POPULAR:
		criteria.min_popularity = 50
	elif answers.popularity == Popularity.NICHE:
		# Niche also carries a quality floor; otherwise it surfaces poor obscure titles
		criteria.max_popularity = 30
		criteria.min_rating = max(criteria.min_rating or 0.0, 7.0)

	return criteria


class Recommender:
	"""
	High-level recommendation API: criteria building, candidate fetch, scoring and selection.
	Stateless apart from its collaborators, so one instance serves all requests.
	"""

	def __init__(self, store: CatalogStore, scorer: Optional[Scorer] = None):
		self.store = store  # injected catalog
		self.scorer = scorer or Scorer()  # rule-based scorer

	def _fetch(self, answers: QuizAnswers, exclude_ids: Iterable[int], limit: int) -> List[Movie]:
		criteria = build_criteria(answers, exclude_ids, limit=limit)
		logger.debug(f"[Recommender] Criteria: {criteria}")
		candidates = self.store.query_movies(criteria)
		logger.debug(f"[Recommender] Retrieved {len(candidates)} candidates (limit {limit})")
		return candidates

	def recommend(self, answers: QuizAnswers, exclude_ids: Iterable[int] = ()) -> Optional[RecommendationResult]:
		"""Single-pick mode: a random choice among the top-scored candidates, or None."""
		candidates = self._fetch(answers, exclude_ids, limit=config.SINGLE_PICK_POOL)
		if not candidates:
			logger.info("[Recommender] No candidates match the answers")
			return None
		pick = self.scorer.pick_one(self.scorer.rank(candidates, answers))
		logger.info(f"[Recommender] Recommending {pick.movie.title} ({pick.movie.id}) score={pick.score:.2f}")
		return pick

	def recommend_many(self, answers: QuizAnswers, exclude_ids: Iterable[int] = (), count: int = config.DEFAULT_COUNT) -> List[RecommendationResult]:
		"""Batch mode: the best count candidates by score, in rank order."""
		candidates = self._fetch(answers, exclude_ids, limit=max(1, count) * config.OVERSAMPLE_FACTOR)
		if not candidates:
			logger.info("[Recommender] No candidates match the answers")
			return []
		results = self.scorer.top_n(self.scorer.rank(candidates, answers), count)
		logger.info(f"[Recommender] Returning top {len(results)} of {len(candidates)} candidates")
		return results

	def random_pick(self, exclude_ids: Iterable[int] = ()) -> Optional[Movie]:
		"""'Surprise me' mode: any decently rated movie, chosen uniformly."""
		movies = self.store.query_movies(SearchCriteria(
			exclude_ids=list(exclude_ids),
			limit=config.RANDOM_PICK_POOL,
			min_rating=config.RANDOM_PICK_MIN_RATING,
		))
		if not movies:
			logger.info("[Recommender] No movies available for a random pick")
			return None
		return self.scorer.rng.choice(movies)
