"""
Build the SQLite movie catalog from a movie dump.

This script:
1) Loads movies from data/movies.jsonl (or a .json array given as argument)
2) Creates the catalog tables if they do not exist
3) Writes movies with their genres, countries and keywords

Usage:
    python -m scripts.build_catalog [path/to/movies.jsonl]

The API reads the catalog from FILM_QUIZ_DATABASE_URL (default sqlite:///data/movies.db).
"""

import sys  # optional input path argument
import time  # measure step timings
from pathlib import Path  # filesystem-safe paths

from loguru import logger  # console logging
from sqlalchemy import create_engine  # catalog engine
from sqlalchemy.orm import sessionmaker  # session factory for the store

from film_quiz import config  # database URL
from film_quiz.catalog import SqlCatalogStore  # writes movies
from film_quiz.data_loader import DataLoader  # data ingestion
from film_quiz.tables import Base  # table definitions


def main():
	# Headline banner for visibility in console
	logger.info("=" * 60)
	logger.info("Build Movie Catalog")
	logger.info("=" * 60)

	# Resolve project root and key paths
	root = Path(__file__).resolve().parents[1]  # project root
	data_path = Path(sys.argv[1]) if len(sys.argv) > 1 else root / 'data' / 'movies.jsonl'  # input dataset
	(root / 'data').mkdir(parents=True, exist_ok=True)  # default sqlite location

	# 1) Load data
	logger.info("[1/3] Loading movies...")
	loader = DataLoader()  # loader instance
	if data_path.suffix == '.json':
		movies = loader.load_movies_from_json(str(data_path))  # JSON array dump
	else:
		movies = loader.load_movies_from_jsonl(str(data_path))  # one movie per line
	logger.info(f"[OK] Loaded {len(movies)} movies in {len(loader.get_all_genres(movies))} genres")  # confirm count

	# 2) Create tables
	logger.info(f"[2/3] Creating tables in {config.DATABASE_URL}...")
	engine = create_engine(config.DATABASE_URL)
	Base.metadata.create_all(engine)  # no-op for existing tables

	# 3) Write movies
	logger.info("[3/3] Writing movies...")
	t0 = time.time()  # start timer
	store = SqlCatalogStore(sessionmaker(autocommit=False, autoflush=False, bind=engine), fail_soft=False)
	store.add_movies(movies)
	logger.info(f"[OK] Catalog ready in {time.time() - t0:.2f}s: {store.stats()}")  # report

	logger.info("=" * 60)


if __name__ == '__main__':
	main()  # invoke builder
