"""
Answer normalization module.
Turns the raw quiz payload sent by the UI into fully resolved QuizAnswers.
"any", missing and unrecognized values become unconstrained; genre names are matched
against the catalog's genres exactly, via synonyms, or fuzzily.
"""

from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Type

from rapidfuzz import fuzz, process  # fuzzy matching utilities

from loguru import logger

from .data_loader import DataLoader  # for genre synonyms
from .errors import InvalidAnswers
from .models import Era, Length, Mood, Origin, Popularity, QuizAnswers, RatingLevel

ANY = 'any'


class AnswerNormalizer:
	"""
	Resolves raw answers into QuizAnswers.
	In lenient mode (default) bad values are logged and treated as unconstrained;
	in strict mode they raise InvalidAnswers.
	"""

	GENRE_SYNONYMS = {k.lower(): v for k, v in DataLoader.GENRE_SYNONYMS.items()}  # variants -> catalog name
	FUZZY_MIN_SCORE = 85

	def __init__(self, known_genres: Optional[Iterable[str]] = None, strict: bool = False):
		self.known_genres = sorted(set(known_genres or []))
		self.strict = strict
		# Lowercase lookup so "dramat" finds "Dramat"
		self._genre_by_lower = {g.lower(): g for g in self.known_genres}
		self._genre_list = list(self._genre_by_lower.keys())
		logger.debug(f"[Answers] Normalizer ready with {len(self.known_genres)} known genres (strict={strict})")

	def normalize(self, raw: Dict[str, Any]) -> QuizAnswers:
		"""Main entry: produce QuizAnswers from a raw mapping."""
		if raw is None:
			raw = {}
		answers = QuizAnswers(
			genres=self._normalize_genres(raw.get('genres')),
			era=self._normalize_choice('era', raw.get('era'), Era),
			rating=self._normalize_choice('rating', raw.get('rating'), RatingLevel),
			popularity=self._normalize_choice('popularity', raw.get('popularity'), Popularity),
			origin=self._normalize_choice('origin', raw.get('origin'), Origin),
			mood=self._normalize_choice('mood', raw.get('mood'), Mood),
			length=self._normalize_choice('length', raw.get('length'), Length),
		)
		logger.debug(f"[Answers] Normalized {raw} -> {answers}")
		return answers

	def _normalize_choice(self, name: str, value: Any, enum_cls: Type[Enum]) -> Optional[Enum]:
		if value is None:
			return None
		if isinstance(value, enum_cls):
			return value
		text = str(value).strip().lower()
		if not text or text == ANY:
			return None
		try:
			return enum_cls(text)
		except ValueError:
			allowed = [m.value for m in enum_cls] + [ANY]
			if self.strict:
				raise InvalidAnswers(f"Invalid value for '{name}': {value!r} (expected one of {allowed})")
			logger.warning(f"[Answers] Unknown {name}={value!r}, treating as '{ANY}'")
			return None

	def _normalize_genres(self, value: Any) -> FrozenSet[str]:
		if value is None:
			return frozenset()
		if isinstance(value, str):
			value = [value]
		elif not isinstance(value, (list, tuple, set, frozenset)):
			if self.strict:
				raise InvalidAnswers(f"Invalid value for 'genres': {value!r} (expected a list of genre names)")
			logger.warning(f"[Answers] Unusable genres value {value!r}, treating genres as '{ANY}'")
			return frozenset()
		raw_names: List[str] = [str(v).strip() for v in value if v is not None and str(v).strip()]
		if any(name.lower() == ANY for name in raw_names):
			return frozenset()

		resolved = set()
		for name in raw_names:
			match = self._match_genre(name)
			if match:
				resolved.add(match)
			elif self.strict:
				raise InvalidAnswers(f"Unknown genre: {name!r}")
			else:
				logger.warning(f"[Answers] Dropping unknown genre {name!r}")

		if raw_names and not resolved:
			logger.warning(f"[Answers] None of the genres {raw_names} matched, treating genres as '{ANY}'")
		return frozenset(resolved)

	def _match_genre(self, name: str) -> Optional[str]:
		lower = name.lower()
		# Exact or case-insensitive hit on a catalog genre
		if lower in self._genre_by_lower:
			return self._genre_by_lower[lower]

		# Synonym mapping (e.g., "comedy" -> "Komedia")
		canonical = self.GENRE_SYNONYMS.get(lower)
		if canonical and (not self.known_genres or canonical in self.known_genres):
			logger.debug(f"[Answers] Genre synonym match: '{name}' -> '{canonical}'")
			return canonical

		# Without a catalog genre list there is nothing to match against; trust the caller
		if not self.known_genres:
			return name

		# Whole-string fuzzy match for small typos and missing diacritics ("kryminal")
		best = process.extractOne(lower, self._genre_list, scorer=fuzz.ratio)
		if best and best[1] >= self.FUZZY_MIN_SCORE:
			logger.debug(f"[Answers] Genre fuzzy match: '{name}' -> '{best[0]}' (score={best[1]:.0f})")
			return self._genre_by_lower[best[0]]
		return None


def normalize_answers(raw: Dict[str, Any], known_genres: Optional[Iterable[str]] = None, strict: bool = False) -> QuizAnswers:
	"""Convenience wrapper for one-off normalization."""
	return AnswerNormalizer(known_genres=known_genres, strict=strict).normalize(raw)
