"""
Data loading and preprocessing module.
Handles loading already-fetched movie records from JSON Lines / JSON dumps and normalizing them
into Movie objects ready to be written to the catalog.
"""

# Standard libs for JSON parsing, typing, and paths
import json  # read JSON lines
from typing import Any, Dict, List, Optional  # type hints
from pathlib import Path  # filesystem-safe paths

# Import our Movie data class used across the project
from .models import Movie  # structured movie record
from . import config  # Polish country code, keyword cap

# Console logging
from loguru import logger  # console logger


class DataLoader:
	"""
	Handles loading and preprocessing of movie data.
	"""

	# Genre synonym mapping: common English/variant spellings → catalog genre name
	GENRE_SYNONYMS = {
		'sci-fi': 'Sci-Fi',  # map hyphenated to canonical
		'sci fi': 'Sci-Fi',  # map spaced form
		'scifi': 'Sci-Fi',  # common variant
		'science-fiction': 'Sci-Fi',  # map with dash
		'science fiction': 'Sci-Fi',  # map with space
		'comedy': 'Komedia',
		'funny': 'Komedia',
		'drama': 'Dramat',
		'action': 'Akcja',
		'adventure': 'Przygodowy',
		'romance': 'Romans',
		'romantic': 'Romans',
		'horror': 'Horror',
		'thriller': 'Thriller',
		'crime': 'Kryminał',
		'animation': 'Animacja',
		'animated': 'Animacja',
		'family': 'Familijny',
		'fantasy': 'Fantasy',
		'mystery': 'Tajemnica',
		'war': 'Wojenny',
		'history': 'Historyczny',
		'documentary': 'Dokumentalny',
		'music': 'Muzyczny',
		'western': 'Western',
	}

	def __init__(self):
		"""Initialize the data loader and expose the synonyms mapping."""
		self.genre_synonyms = self.GENRE_SYNONYMS  # store mapping for reuse

	def load_movies_from_jsonl(self, filepath: str) -> List[Movie]:
		"""
		Load movies from a JSON Lines (JSONL) file where each line is one JSON object.
		Returns a list of Movie objects.
		"""
		movies = []  # accumulator for parsed Movie objects
		filepath = Path(filepath)  # normalize path

		# Validate the file presence early to give clear error messages
		if not filepath.exists():
			raise FileNotFoundError(f"Movie data file not found: {filepath}")

		logger.info(f"[DataLoader] Loading movies from {filepath}...")  # log action

		# Open the file and read line-by-line to handle large datasets efficiently
		with open(filepath, 'r', encoding='utf-8') as f:
			for line_num, line in enumerate(f, 1):  # keep track of line number for diagnostics
				if not line.strip():  # blank separator lines are fine
					continue
				try:
					data = json.loads(line.strip())  # parse JSON object per line
					movie = self._parse_movie_data(data)  # convert dict -> Movie
				except json.JSONDecodeError as e:
					logger.warning(f"[DataLoader] Skipping invalid JSON at line {line_num}: {e}")  # malformed line
					continue  # move on
				except (TypeError, ValueError) as e:
					logger.warning(f"[DataLoader] Error parsing movie at line {line_num}: {e}")  # bad field values
					continue  # move on
				movies.append(movie)  # collect

		logger.info(f"[DataLoader] Successfully loaded {len(movies)} movies.")  # summary
		return movies  # return list

	def load_movies_from_json(self, filepath: str) -> List[Movie]:
		"""
		Load movies from a JSON file holding one array of movie objects (the raw fetch dump format).
		"""
		filepath = Path(filepath)
		if not filepath.exists():
			raise FileNotFoundError(f"Movie data file not found: {filepath}")

		logger.info(f"[DataLoader] Loading movies from {filepath}...")
		with open(filepath, 'r', encoding='utf-8') as f:
			records = json.load(f)
		if not isinstance(records, list):
			raise ValueError(f"Expected a JSON array of movies in {filepath}")

		movies = []
		for position, data in enumerate(records):
			try:
				movies.append(self._parse_movie_data(data))
			except (TypeError, ValueError) as e:
				logger.warning(f"[DataLoader] Error parsing movie #{position}: {e}")
		logger.info(f"[DataLoader] Successfully loaded {len(movies)} movies.")
		return movies

	def _parse_movie_data(self, data: Dict[str, Any]) -> Movie:
		"""
		Convert a raw dictionary (from file) into a strongly-typed Movie object.
		Performs normalization and safe defaults.
		"""
		if not isinstance(data, dict):
			raise TypeError(f"movie record must be an object, got {type(data).__name__}")
		movie_id = int(data.get('id') or 0)  # primary identity
		if movie_id <= 0:
			raise ValueError(f"movie id must be a positive integer, got {data.get('id')!r}")

		# Parse fields that may arrive as comma-separated strings or lists
		genres = self._unique([self._normalize_genre(g) for g in self._parse_comma_separated(data.get('genres'))])
		countries = self._unique([c.upper() for c in self._parse_comma_separated(data.get('countries'))])
		keywords = self._unique(self._parse_comma_separated(data.get('keywords')))[:config.MAX_KEYWORDS]

		title = self._clean_text(data.get('title'))  # display title
		title_pl = self._clean_text(data.get('title_pl')) or None  # localized title if any

		# Parse numeric fields, clamping to the catalog's valid ranges
		rating = min(10.0, max(0.0, float(data.get('rating') or 0.0)))  # 0..10
		popularity = max(0.0, float(data.get('popularity') or 0.0))  # never negative
		vote_count = max(0, int(data.get('vote_count') or 0))  # never negative
		year = self._optional_int(data.get('year'))  # None when unknown
		runtime = self._optional_int(data.get('runtime'))  # None when unknown or zero

		return Movie(
			id=movie_id,
			title=title or title_pl or '',  # fall back to the localized title
			title_original=self._clean_text(data.get('title_original')) or title,
			title_pl=title_pl,
			description=self._clean_text(data.get('description') or data.get('overview')),
			poster=data.get('poster') or None,  # URL or None
			backdrop=data.get('backdrop') or None,  # URL or None
			year=year,
			rating=rating,
			vote_count=vote_count,
			popularity=popularity,
			runtime=runtime,
			is_polish=config.POLISH_COUNTRY_CODE in countries,  # derived from countries
			genres=genres,
			countries=countries,
			keywords=keywords,
		)

	def _parse_comma_separated(self, value) -> List[str]:
		"""
		Normalize a value that may be None, a list, or a comma-separated string
		into a list of clean strings.
		"""
		if value is None:  # missing field
			return []  # treat as empty list
		if isinstance(value, list):  # already a list
			return [str(item).strip() for item in value if item]  # clean each
		if isinstance(value, str):  # comma-separated string
			return [item.strip() for item in value.split(',') if item.strip()]  # split/trim
		return []  # any other type becomes empty

	def _clean_text(self, text: Optional[str]) -> str:
		"""Trim whitespace; None becomes an empty string. Case is kept for display."""
		if not text:
			return ''
		return str(text).strip()

	def _optional_int(self, value) -> Optional[int]:
		if value in (None, ''):
			return None
		number = int(value)
		return number if number > 0 else None

	def _normalize_genre(self, genre: str) -> str:
		"""
		Map a raw genre to its catalog form using synonyms; otherwise keep it as given.
		"""
		return self.genre_synonyms.get(genre.strip().lower(), genre.strip())

	def _unique(self, values: List[str]) -> List[str]:
		"""Drop duplicates and empty strings, keep first-seen order."""
		return [v for v in dict.fromkeys(values) if v]

	def get_all_genres(self, movies: List[Movie]) -> List[str]:
		"""Return a sorted list of all unique genres in the dataset."""
		genres = set()  # unique genres
		for movie in movies:  # iterate
			genres.update(movie.genres)
		return sorted(list(genres))  # sorted output
