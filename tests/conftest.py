"""
Shared fixtures: a small Polish-flavoured catalog, an in-memory SQLite store holding it,
and a recording in-memory store double for recommender tests.
"""

import random
import sys
from pathlib import Path
from typing import List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from film_quiz.catalog import SqlCatalogStore
from film_quiz.errors import StoreUnavailable
from film_quiz.models import Movie, SearchCriteria
from film_quiz.tables import Base


def make_movie(id: int, rating: float = 7.0, popularity: float = 10.0, genres=None, countries=None, **extra) -> Movie:
	countries = countries or ['US']
	fields = dict(
		id=id,
		title=extra.pop('title', f"Movie {id}"),
		title_original=extra.pop('title_original', f"Movie {id}"),
		description=extra.pop('description', ''),
		rating=rating,
		vote_count=extra.pop('vote_count', 1000),
		popularity=popularity,
		genres=list(genres or []),
		countries=list(countries),
		is_polish='PL' in countries,
	)
	fields.update(extra)
	return Movie(**fields)


CATALOG = [
	make_movie(1, 7.9, 12, ['Komedia'], ['PL'], title='Rejs', year=1970, runtime=73),
	make_movie(2, 8.4, 120, ['Akcja', 'Sci-Fi', 'Przygodowy'], ['US', 'GB'], title='Inception', year=2010, runtime=148, keywords=['dream', 'heist']),
	make_movie(3, 8.5, 80, ['Thriller', 'Kryminał'], ['US'], title='Pulp Fiction', year=1994, runtime=154, keywords=['murder']),
	make_movie(4, 7.7, 15, ['Dramat'], ['PL', 'FR'], title='Corpus Christi', title_pl='Boże Ciało', year=2019, runtime=115),
	make_movie(5, 7.5, 40, ['Komedia', 'Familijny', 'Przygodowy'], ['GB', 'FR'], title='Paddington 2', year=2017, runtime=103),
	make_movie(6, 7.4, 8, ['Komedia', 'Dramat'], ['PL'], title='Day of the Wacko', title_pl='Dzień świra', year=2002, runtime=93),
	make_movie(7, 3.6, 10, ['Dramat'], ['US'], title='The Room', year=2003, runtime=99),
	make_movie(8, 8.1, 60, ['Horror', 'Sci-Fi'], ['US', 'GB'], title='Alien', year=1979, runtime=117, keywords=['space']),
	make_movie(9, 7.2, 22, ['Dramat'], ['PL'], title='Suicide Room', title_pl='Sala samobójców', year=2011, runtime=117),
	make_movie(10, 8.3, 150, ['Akcja', 'Sci-Fi', 'Przygodowy'], ['US'], title='Avengers: Endgame', year=2019, runtime=181, keywords=['superhero']),
	make_movie(11, 6.5, 5, ['Dramat'], ['PL'], title='Lost Reel'),
	make_movie(12, 7.0, 18, ['Komedia', 'Kryminał'], ['PL'], title='Kiler', year=1997, runtime=104),
]

# rating desc, popularity desc
CATALOG_ORDER = [3, 2, 10, 8, 1, 4, 5, 6, 9, 12, 11, 7]


class MemoryCatalog:
	"""
	List-backed store double with the same filter semantics as SqlCatalogStore.
	Records every criteria it receives; can be told to fail.
	"""

	def __init__(self, movies: List[Movie], fail: bool = False):
		self.movies = list(movies)
		self.fail = fail
		self.calls: List[SearchCriteria] = []

	def query_movies(self, criteria: SearchCriteria) -> List[Movie]:
		self.calls.append(criteria)
		if self.fail:
			raise StoreUnavailable("catalog offline")
		matched = [m for m in self.movies if self._matches(m, criteria)]
		matched.sort(key=lambda m: (-m.rating, -m.popularity, m.id))
		return matched[:criteria.limit or 100]

	def _matches(self, m: Movie, c: SearchCriteria) -> bool:
		if c.genres and not set(c.genres) & set(m.genres):
			return False
		if c.keywords and not set(c.keywords) & set(m.keywords):
			return False
		if c.min_year is not None and (m.year is None or m.year < c.min_year):
			return False
		if c.max_year is not None and (m.year is None or m.year > c.max_year):
			return False
		if c.min_rating is not None and m.rating < c.min_rating:
			return False
		if c.is_polish is not None and m.is_polish != c.is_polish:
			return False
		if c.min_runtime is not None and (m.runtime is None or m.runtime < c.min_runtime):
			return False
		if c.max_runtime is not None and (m.runtime is None or m.runtime > c.max_runtime):
			return False
		if c.min_popularity is not None and m.popularity < c.min_popularity:
			return False
		if c.max_popularity is not None and m.popularity > c.max_popularity:
			return False
		return m.id not in set(c.exclude_ids)

	def get_movie_by_id(self, movie_id: int) -> Optional[Movie]:
		if self.fail:
			raise StoreUnavailable("catalog offline")
		return next((m for m in self.movies if m.id == movie_id), None)

	def list_genre_names(self) -> List[str]:
		return sorted({g for m in self.movies for g in m.genres})


def _sqlite_session_factory():
	engine = create_engine(
		"sqlite://",
		connect_args={"check_same_thread": False},
		poolclass=StaticPool,
	)
	Base.metadata.create_all(engine)
	return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def empty_sql_store():
	return SqlCatalogStore(_sqlite_session_factory())


@pytest.fixture
def sql_store(empty_sql_store):
	empty_sql_store.add_movies(CATALOG)
	return empty_sql_store


@pytest.fixture
def memory_store():
	return MemoryCatalog(CATALOG)


@pytest.fixture
def memory_catalog_cls():
	return MemoryCatalog


@pytest.fixture
def rng():
	return random.Random(1234)
