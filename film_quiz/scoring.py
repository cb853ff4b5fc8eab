"""
Scoring module.
Assigns each candidate an additive affinity score with human-readable reasons,
ranks candidates and selects the final pick or batch.
"""

import random
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple

from loguru import logger

from . import config
from .models import Era, Length, Mood, Movie, Popularity, QuizAnswers, RatingLevel, RecommendationResult

# An extra rule returns (bonus, reason); reason is None when the rule adds nothing worth explaining
ScoringRule = Callable[[Movie, QuizAnswers], Tuple[float, Optional[str]]]

# Genre names (lowercase, Polish and English catalog spellings) and keywords that signal each mood
MOOD_VOCABULARY: Dict[Mood, FrozenSet[str]] = {
	Mood.LIGHT: frozenset({
		'komedia', 'comedy', 'animacja', 'animation', 'familijny', 'family', 'romans', 'romance',
		'musical', 'feel-good', 'friendship', 'holiday',
	}),
	Mood.DARK: frozenset({
		'horror', 'thriller', 'kryminał', 'crime', 'wojenny', 'war',
		'murder', 'serial killer', 'revenge', 'dystopia', 'psychological thriller',
	}),
	Mood.THOUGHTFUL: frozenset({
		'dramat', 'drama', 'historyczny', 'history', 'dokumentalny', 'documentary',
		'based on true story', 'biography', 'philosophy', 'coming of age',
	}),
	Mood.EXCITING: frozenset({
		'akcja', 'action', 'przygodowy', 'adventure', 'sci-fi', 'science fiction', 'fantasy',
		'heist', 'chase', 'superhero', 'space',
	}),
}

MOOD_BONUS = 4.0
RUNTIME_BONUS = 2.0


def mood_rule(movie: Movie, answers: QuizAnswers) -> Tuple[float, Optional[str]]:
	"""Bonus when the movie's genres or keywords hit the vocabulary of the requested mood."""
	if answers.mood is None:
		return 0.0, None
	vocabulary = MOOD_VOCABULARY[answers.mood]
	tags = {g.lower() for g in movie.genres} | {k.lower() for k in (movie.keywords or [])}
	if tags & vocabulary:
		return MOOD_BONUS, f"Mood: {answers.mood.value}"
	return 0.0, None


def runtime_rule(movie: Movie, answers: QuizAnswers) -> Tuple[float, Optional[str]]:
	"""Bonus when the runtime falls in the requested length band; unknown runtimes get nothing."""
	if answers.length is None or not movie.runtime:
		return 0.0, None
	runtime = movie.runtime
	if answers.length == Length.SHORT:
		fits = runtime < 100
	elif answers.length == Length.MEDIUM:
		fits = 90 <= runtime <= 130
	else:
		fits = runtime > 130
	if fits:
		return RUNTIME_BONUS, f"Runtime: {runtime} min"
	return 0.0, None


DEFAULT_EXTRA_RULES: Tuple[ScoringRule, ...] = (mood_rule, runtime_rule)


class Scorer:
	"""
	Computes additive scores from independent rules:
	- base quality: the movie rating (0..10)
	- quiz fit: genre, era, rating threshold and popularity bonuses
	- high-rating kicker for movies rated 8.0 and above
	- pluggable extra rules (mood, runtime by default)
	Every rule is evaluated for every candidate; none short-circuits another.
	"""

	def __init__(
		self,
		genre_bonus: float = 5.0,
		era_bonus: float = 3.0,
		high_rating_bonus: float = 5.0,
		medium_rating_bonus: float = 3.0,
		popularity_bonus: float = 3.0,
		kicker_bonus: float = 3.0,
		popular_threshold: float = 50.0,
		niche_threshold: float = 30.0,
		top_k: int = config.TOP_K,
		extra_rules: Sequence[ScoringRule] = DEFAULT_EXTRA_RULES,
		rng: Optional[random.Random] = None,
	):
		self.genre_bonus = genre_bonus
		self.era_bonus = era_bonus
		self.high_rating_bonus = high_rating_bonus
		self.medium_rating_bonus = medium_rating_bonus
		self.popularity_bonus = popularity_bonus
		self.kicker_bonus = kicker_bonus
		self.popular_threshold = popular_threshold
		self.niche_threshold = niche_threshold
		self.top_k = top_k
		self.extra_rules = list(extra_rules)
		self.rng = rng or random.Random()

	def score(self, movie: Movie, answers: QuizAnswers) -> Tuple[float, List[str]]:
		"""
		Pure scoring of one candidate. Returns (score, reasons), reasons ordered as the rules run.
		"""
		score = movie.rating
		reasons: List[str] = []

		for bonus, reason in (
			self._genre_score(movie, answers),
			self._era_score(movie, answers),
			self._rating_score(movie, answers),
			self._popularity_score(movie, answers),
			self._kicker_score(movie),
		):
			score += bonus
			if reason:
				reasons.append(reason)

		for rule in self.extra_rules:
			bonus, reason = rule(movie, answers)
			score += bonus
			if reason:
				reasons.append(reason)

		return score, reasons

	def _genre_score(self, movie: Movie, answers: QuizAnswers) -> Tuple[float, Optional[str]]:
		if not answers.genres:
			return 0.0, None
		matched = [g for g in movie.genres if g in answers.genres]
		if not matched:
			return 0.0, None
		return self.genre_bonus * len(matched), f"Genre: {', '.join(matched)}"

	def _era_score(self, movie: Movie, answers: QuizAnswers) -> Tuple[float, Optional[str]]:
		if answers.era is None or not movie.year:
			return 0.0, None
		if answers.era == Era.MODERN and movie.year >= 2010:
			return self.era_bonus, f"Modern release ({movie.year})"
		if answers.era == Era.OLD and movie.year < 2000:
			return self.era_bonus, f"Classic from {movie.year}"
		return 0.0, None

	def _rating_score(self, movie: Movie, answers: QuizAnswers) -> Tuple[float, Optional[str]]:
		if answers.rating == RatingLevel.HIGH and movie.rating >= 7.5:
			return self.high_rating_bonus, f"Meets your rating bar: {movie.rating:g}/10"
		if answers.rating == RatingLevel.MEDIUM and movie.rating >= 6.0:
			return self.medium_rating_bonus, None
		return 0.0, None

	def _popularity_score(self, movie: Movie, answers: QuizAnswers) -> Tuple[float, Optional[str]]:
		if answers.popularity == Popularity.POPULAR and movie.popularity > self.popular_threshold:
			return self.popularity_bonus, "Popular title"
		if answers.popularity == Popularity.NICHE and movie.popularity < self.niche_threshold:
			return self.popularity_bonus, "Hidden gem"
		return 0.0, None

	def _kicker_score(self, movie: Movie) -> Tuple[float, Optional[str]]:
		if movie.rating >= 8.0:
			return self.kicker_bonus, f"High rating: {movie.rating:g}/10"
		return 0.0, None

	def rank(self, candidates: List[Movie], answers: QuizAnswers) -> List[RecommendationResult]:
		"""Score all candidates and sort by score, highest first. Ties keep the store order."""
		results: List[RecommendationResult] = []
		for movie in candidates:
			score, reasons = self.score(movie, answers)
			logger.debug(f"[Scorer] {movie.title} ({movie.id}) | score={score:.2f} | reasons={reasons}")
			results.append(RecommendationResult(movie=movie, score=score, reasons=reasons))
		results.sort(key=lambda r: r.score, reverse=True)
		return results

	def pick_one(self, ranked: List[RecommendationResult]) -> Optional[RecommendationResult]:
		"""Uniform random choice among the top-K ranked results, so identical quizzes vary."""
		if not ranked:
			return None
		top = ranked[:min(self.top_k, len(ranked))]
		choice = self.rng.choice(top)
		logger.debug(f"[Scorer] Picked {choice.movie.title} ({choice.movie.id}) from top {len(top)}")
		return choice

	def top_n(self, ranked: List[RecommendationResult], count: int) -> List[RecommendationResult]:
		"""Best-effort batch: the first count ranked results, no randomness."""
		return ranked[:max(0, count)]
