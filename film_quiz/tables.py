"""
SQLAlchemy tables for the relational movie catalog.
Movies link to genres, countries and keywords through association tables.
"""

from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


movie_genres = Table(
	"movie_genres",
	Base.metadata,
	Column("movie_id", Integer, ForeignKey("movies.id"), primary_key=True),
	Column("genre_id", Integer, ForeignKey("genres.id"), primary_key=True),
)

movie_countries = Table(
	"movie_countries",
	Base.metadata,
	Column("movie_id", Integer, ForeignKey("movies.id"), primary_key=True),
	Column("country_id", Integer, ForeignKey("countries.id"), primary_key=True),
)

movie_keywords = Table(
	"movie_keywords",
	Base.metadata,
	Column("movie_id", Integer, ForeignKey("movies.id"), primary_key=True),
	Column("keyword_id", Integer, ForeignKey("keywords.id"), primary_key=True),
)


class MovieRow(Base):
	__tablename__ = "movies"

	id = Column(Integer, primary_key=True)
	title = Column(String, nullable=False)
	title_pl = Column(String, nullable=True)
	title_original = Column(String, nullable=True)
	description = Column(Text, nullable=True)
	poster = Column(String, nullable=True)
	backdrop = Column(String, nullable=True)
	year = Column(Integer, nullable=True, index=True)
	rating = Column(Float, default=0.0, index=True)
	vote_count = Column(Integer, default=0)
	popularity = Column(Float, default=0.0, index=True)
	runtime = Column(Integer, nullable=True)
	is_polish = Column(Boolean, default=False, index=True)

	genres = relationship("GenreRow", secondary=movie_genres, lazy="selectin")
	countries = relationship("CountryRow", secondary=movie_countries, lazy="selectin")
	keywords = relationship("KeywordRow", secondary=movie_keywords, lazy="selectin")


class GenreRow(Base):
	__tablename__ = "genres"

	id = Column(Integer, primary_key=True, autoincrement=True)
	name = Column(String, unique=True, nullable=False)


class CountryRow(Base):
	__tablename__ = "countries"

	id = Column(Integer, primary_key=True, autoincrement=True)
	code = Column(String, unique=True, nullable=False)
	name = Column(String, nullable=True)


class KeywordRow(Base):
	__tablename__ = "keywords"

	id = Column(Integer, primary_key=True, autoincrement=True)
	name = Column(String, unique=True, nullable=False)
