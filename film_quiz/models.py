"""
Data models for the Film Quiz Recommender.
Defines the catalog record, the quiz answers, the store-facing search criteria and scored results.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
# Enum gives each quiz answer a closed set of values
from enum import Enum  # string-valued enumerations
# Import typing helpers for precise and self-documenting types
from typing import FrozenSet, List, Optional  # sets, lists and optional values


@dataclass
class Movie:
	"""
	Represents a single catalog movie, fully hydrated with its genres, countries and keywords.
	Movies are read-only while recommending; only the catalog loader writes them.
	"""
	id: int  # unique positive identifier
	title: str  # display title from the source
	title_original: str  # title in the original language
	description: str  # synopsis
	rating: float  # aggregate rating on a 0-10 scale
	vote_count: int  # number of votes backing the rating
	popularity: float  # relative popularity score (platform units)
	title_pl: Optional[str] = None  # localized title if known
	poster: Optional[str] = None  # poster image URL
	backdrop: Optional[str] = None  # backdrop image URL
	year: Optional[int] = None  # release year, None if unknown
	runtime: Optional[int] = None  # runtime in minutes
	is_polish: bool = False  # True iff countries contain the Polish code
	genres: List[str] = field(default_factory=list)  # genre names, deduplicated
	countries: List[str] = field(default_factory=list)  # ISO country codes, deduplicated
	keywords: List[str] = field(default_factory=list)  # top keywords by source relevance

	@property
	def display_title(self) -> str:
		"""Localized title when available, otherwise the source title."""
		return self.title_pl or self.title


class Era(str, Enum):
	OLD = 'old'  # released before 2000
	MODERN = 'modern'  # released 2010 or later


class RatingLevel(str, Enum):
	HIGH = 'high'  # 7.5 and up
	MEDIUM = 'medium'  # 6.0 and up


class Popularity(str, Enum):
	POPULAR = 'popular'  # well-known titles
	NICHE = 'niche'  # obscure but good titles


class Origin(str, Enum):
	POLISH = 'polish'
	FOREIGN = 'foreign'


class Mood(str, Enum):
	LIGHT = 'light'
	DARK = 'dark'
	THOUGHTFUL = 'thoughtful'
	EXCITING = 'exciting'


class Length(str, Enum):
	SHORT = 'short'  # under 100 minutes
	MEDIUM = 'medium'  # 90-130 minutes
	LONG = 'long'  # over 130 minutes


@dataclass(frozen=True)
class QuizAnswers:
	"""
	Fully resolved quiz answers.
	None (or an empty genre set) means the user did not constrain that dimension;
	the "any" strings sent by the UI never reach this object.
	"""
	genres: FrozenSet[str] = frozenset()  # requested genres, empty = any genre
	era: Optional[Era] = None
	rating: Optional[RatingLevel] = None
	popularity: Optional[Popularity] = None
	origin: Optional[Origin] = None
	mood: Optional[Mood] = None  # optional extension dimension
	length: Optional[Length] = None  # optional extension dimension


@dataclass
class SearchCriteria:
	"""
	Store-facing filters. Every filter is optional and AND-combined with the others;
	numeric bounds are inclusive.
	"""
	genres: Optional[List[str]] = None  # movie must have at least one of these
	keywords: Optional[List[str]] = None  # movie must have at least one of these
	min_year: Optional[int] = None
	max_year: Optional[int] = None
	min_rating: Optional[float] = None
	is_polish: Optional[bool] = None
	min_runtime: Optional[int] = None
	max_runtime: Optional[int] = None
	min_popularity: Optional[float] = None
	max_popularity: Optional[float] = None
	exclude_ids: List[int] = field(default_factory=list)  # ids never to return
	limit: int = 100  # result cap


@dataclass
class RecommendationResult:
	movie: Movie  # scored candidate
	score: float  # accumulated affinity, not normalized
	reasons: List[str]  # explanations in rule evaluation order
