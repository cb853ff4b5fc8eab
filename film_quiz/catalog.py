"""
Catalog store module.
Translates SearchCriteria into SQL over the relational movie catalog and hydrates Movie records.
"""

from typing import Dict, List, Optional, Protocol

from sqlalchemy import create_engine, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, sessionmaker

from loguru import logger

from . import config
from .errors import StoreUnavailable
from .models import Movie, SearchCriteria
from .tables import CountryRow, GenreRow, KeywordRow, MovieRow


class CatalogStore(Protocol):
	"""What the recommender needs from a movie catalog."""

	def query_movies(self, criteria: SearchCriteria) -> List[Movie]:
		...

	def get_movie_by_id(self, movie_id: int) -> Optional[Movie]:
		...

	def list_genre_names(self) -> List[str]:
		...


class SqlCatalogStore:
	"""
	SQLAlchemy-backed catalog.
	The session factory is injected; each call opens and closes its own session,
	so one store instance can serve concurrent requests.
	"""

	def __init__(self, session_factory: sessionmaker, fail_soft: bool = True):
		self.session_factory = session_factory  # injected, never owned
		self.fail_soft = fail_soft  # swallow query faults into an empty result

	@classmethod
	def from_url(cls, database_url: str, fail_soft: bool = True) -> 'SqlCatalogStore':
		"""Build a store on a fresh engine for the given database URL."""
		logger.info(f"[Catalog] Connecting to {database_url}")
		engine = create_engine(database_url, pool_pre_ping=True)
		return cls(sessionmaker(autocommit=False, autoflush=False, bind=engine), fail_soft=fail_soft)

	def query_movies(self, criteria: SearchCriteria) -> List[Movie]:
		"""
		Return distinct movies matching every filter in criteria,
		ordered by rating desc, popularity desc (id asc breaks exact ties), capped at criteria.limit.
		"""
		limit = criteria.limit or config.DEFAULT_QUERY_LIMIT
		try:
			with self.session_factory() as session:
				query = self._apply_filters(session.query(MovieRow), criteria)
				query = query.order_by(MovieRow.rating.desc(), MovieRow.popularity.desc(), MovieRow.id.asc())
				rows = query.limit(limit).all()
				movies = [self._to_movie(row) for row in rows]
		except SQLAlchemyError as e:
			if self.fail_soft:
				logger.error(f"[Catalog] Query failed, returning no candidates: {e}")
				return []
			raise StoreUnavailable(f"Catalog query failed: {e}") from e

		logger.debug(f"[Catalog] Query returned {len(movies)} movies (limit {limit})")
		return movies

	def _apply_filters(self, query: Query, criteria: SearchCriteria) -> Query:
		# Membership filters use EXISTS so a movie matching several genres appears once
		if criteria.genres:
			query = query.filter(MovieRow.genres.any(GenreRow.name.in_(list(criteria.genres))))
		if criteria.keywords:
			query = query.filter(MovieRow.keywords.any(KeywordRow.name.in_(list(criteria.keywords))))

		if criteria.min_year is not None:
			query = query.filter(MovieRow.year >= criteria.min_year)
		if criteria.max_year is not None:
			query = query.filter(MovieRow.year <= criteria.max_year)

		if criteria.min_rating is not None:
			query = query.filter(MovieRow.rating >= criteria.min_rating)

		if criteria.is_polish is not None:
			query = query.filter(MovieRow.is_polish == criteria.is_polish)

		if criteria.min_runtime is not None:
			query = query.filter(MovieRow.runtime >= criteria.min_runtime)
		if criteria.max_runtime is not None:
			query = query.filter(MovieRow.runtime <= criteria.max_runtime)

		if criteria.min_popularity is not None:
			query = query.filter(MovieRow.popularity >= criteria.min_popularity)
		if criteria.max_popularity is not None:
			query = query.filter(MovieRow.popularity <= criteria.max_popularity)

		if criteria.exclude_ids:
			query = query.filter(~MovieRow.id.in_(list(criteria.exclude_ids)))
		return query

	def get_movie_by_id(self, movie_id: int) -> Optional[Movie]:
		"""Point lookup; None if the id is not in the catalog."""
		try:
			with self.session_factory() as session:
				row = session.get(MovieRow, movie_id)
				return self._to_movie(row) if row else None
		except SQLAlchemyError as e:
			raise StoreUnavailable(f"Movie lookup failed for id={movie_id}: {e}") from e

	def list_genre_names(self) -> List[str]:
		"""All genre names, sorted alphabetically."""
		try:
			with self.session_factory() as session:
				return [name for (name,) in session.query(GenreRow.name).order_by(GenreRow.name)]
		except SQLAlchemyError as e:
			raise StoreUnavailable(f"Genre listing failed: {e}") from e

	def stats(self) -> Dict[str, float]:
		"""Movie count, average rating and genre count."""
		try:
			with self.session_factory() as session:
				total = session.query(func.count(MovieRow.id)).scalar() or 0
				avg_rating = session.query(func.avg(MovieRow.rating)).scalar()
				genre_count = session.query(func.count(GenreRow.id)).scalar() or 0
		except SQLAlchemyError as e:
			raise StoreUnavailable(f"Stats query failed: {e}") from e
		return {
			"total_movies": total,
			"avg_rating": round(float(avg_rating), 2) if avg_rating is not None else 0.0,
			"genre_count": genre_count,
		}

	def add_movies(self, movies: List[Movie]) -> int:
		"""
		Insert or replace movies together with their genre, country and keyword links.
		Used by the catalog loader script and by tests; the recommender never writes.
		"""
		genres: Dict[str, GenreRow] = {}
		countries: Dict[str, CountryRow] = {}
		keywords: Dict[str, KeywordRow] = {}
		# Last record wins for ids repeated within one batch
		latest = {movie.id: movie for movie in movies}
		with self.session_factory() as session:
			for movie in latest.values():
				row = MovieRow(
					id=movie.id,
					title=movie.title,
					title_pl=movie.title_pl,
					title_original=movie.title_original,
					description=movie.description,
					poster=movie.poster,
					backdrop=movie.backdrop,
					year=movie.year,
					rating=movie.rating,
					vote_count=movie.vote_count,
					popularity=movie.popularity,
					runtime=movie.runtime,
					is_polish=config.POLISH_COUNTRY_CODE in movie.countries,
				)
				row.genres = [self._get_or_create(session, genres, GenreRow, 'name', g) for g in _unique(movie.genres)]
				row.countries = [self._get_or_create(session, countries, CountryRow, 'code', c) for c in _unique(movie.countries)]
				row.keywords = [
					self._get_or_create(session, keywords, KeywordRow, 'name', k)
					for k in _unique(movie.keywords)[:config.MAX_KEYWORDS]
				]
				session.merge(row)
			session.commit()
		logger.info(f"[Catalog] Stored {len(latest)} movies ({len(genres)} genres, {len(countries)} countries)")
		return len(latest)

	def _get_or_create(self, session: Session, cache: Dict, model, attr: str, value: str):
		if value in cache:
			return cache[value]
		row = session.query(model).filter(getattr(model, attr) == value).one_or_none()
		if row is None:
			row = model(**{attr: value})
			session.add(row)
			session.flush()
		cache[value] = row
		return row

	def _to_movie(self, row: MovieRow) -> Movie:
		countries = _unique(c.code for c in row.countries)
		return Movie(
			id=row.id,
			title=row.title,
			title_original=row.title_original or row.title,
			title_pl=row.title_pl,
			description=row.description or '',
			poster=row.poster,
			backdrop=row.backdrop,
			year=row.year,
			rating=float(row.rating or 0.0),
			vote_count=int(row.vote_count or 0),
			popularity=float(row.popularity or 0.0),
			runtime=row.runtime,
			is_polish=config.POLISH_COUNTRY_CODE in countries,
			genres=_unique(g.name for g in row.genres),
			countries=countries,
			keywords=_unique(k.name for k in row.keywords)[:config.MAX_KEYWORDS],
		)


def _unique(values) -> List[str]:
	"""Drop duplicates, keep first-seen order."""
	return list(dict.fromkeys(values))
