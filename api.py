"""
FastAPI server exposing the quiz recommendation API.
Endpoints:
- GET /health: basic health check
- POST /recommend: ranked batch of movies for quiz answers
- POST /recommend/one: a single randomized pick from the best matches
- GET /recommend/random: "surprise me" pick ignoring the quiz
- GET /movies, GET /movies/{id}, GET /genres, GET /stats: catalog lookups

Startup connects to the catalog configured by FILM_QUIZ_DATABASE_URL.
"""

# Import standard libraries for timing
import time  # measure startup and request latencies
from typing import Any, Dict, List, Optional  # precise typing for clarity

# Import FastAPI for building the web API and Pydantic for request/response models
from fastapi import FastAPI, HTTPException, Query, Request  # FastAPI primitives
from fastapi.responses import JSONResponse  # custom error payloads
from pydantic import BaseModel, Field  # schema definitions

# Import our internal modules for catalog access and recommendation
from film_quiz import config  # environment-driven settings
from film_quiz.answers import AnswerNormalizer  # raw answers -> QuizAnswers
from film_quiz.catalog import SqlCatalogStore  # relational movie catalog
from film_quiz.errors import InvalidAnswers, StoreUnavailable  # bad input, infrastructure failures
from film_quiz.models import Movie, SearchCriteria  # core data classes
from film_quiz.recommender import Recommender  # quiz -> ranked movies

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger

# Instantiate the FastAPI application with metadata
app = FastAPI(title="Film Quiz Recommender API", version="1.0.0")  # web app

NO_MATCH_MESSAGE = "No matching movies found. Try adjusting your preferences."

# Globals that hold the collaborators and measured startup time
STORE: Optional[SqlCatalogStore] = None  # catalog store
RECOMMENDER: Optional[Recommender] = None  # will point to the initialized recommender
NORMALIZER: AnswerNormalizer = AnswerNormalizer()  # replaced at startup with catalog genres
STARTUP_TIME_S: float = 0.0  # measures how long startup took


# Pydantic model that describes the shape of a single movie in responses
class MovieOut(BaseModel):
	id: int  # unique id
	title: str  # source title
	title_pl: Optional[str] = None  # localized title
	title_original: str  # original-language title
	description: str  # synopsis
	poster: Optional[str] = None  # poster image URL
	backdrop: Optional[str] = None  # backdrop image URL
	year: Optional[int] = None  # release year
	rating: float  # average rating
	vote_count: int  # votes behind the rating
	popularity: float  # popularity score
	runtime: Optional[int] = None  # minutes
	is_polish: bool  # Polish production
	genres: List[str]  # list of genres
	countries: List[str]  # ISO country codes
	keywords: List[str] = []  # top keywords


# Request body for both recommendation modes
class RecommendRequest(BaseModel):
	answers: Dict[str, Any]  # raw quiz answers, normalized server-side
	excludeIds: List[int] = Field(default_factory=list)  # movies rejected this session
	count: int = Field(default=config.DEFAULT_COUNT, ge=1, le=config.MAX_COUNT)  # batch size


# Batch response: movies in rank order, reasons for the top one
class RecommendResponse(BaseModel):
	movies: List[MovieOut]
	reasons: List[str]
	count: int


# Single-pick response
class SingleRecommendResponse(BaseModel):
	movie: MovieOut
	score: float
	reasons: List[str]


def _movie_out(m: Movie) -> MovieOut:
	"""Convert a catalog Movie into its response schema."""
	return MovieOut(
		id=m.id,
		title=m.title,
		title_pl=m.title_pl,
		title_original=m.title_original,
		description=m.description,
		poster=m.poster,
		backdrop=m.backdrop,
		year=m.year,
		rating=m.rating,
		vote_count=m.vote_count,
		popularity=m.popularity,
		runtime=m.runtime,
		is_polish=m.is_polish,
		genres=m.genres,
		countries=m.countries,
		keywords=m.keywords or [],
	)


def _require_recommender() -> Recommender:
	if RECOMMENDER is None:  # must be ready to serve
		logger.warning("[API] Request received but recommender not initialized")  # guard log
		raise HTTPException(status_code=503, detail="Recommender not initialized")
	return RECOMMENDER


def _parse_ids(raw: Optional[str]) -> List[int]:
	"""Parse a comma-separated id list from a query string."""
	if not raw:
		return []
	try:
		return [int(part) for part in raw.split(',') if part.strip()]
	except ValueError:
		raise HTTPException(status_code=422, detail=f"Invalid id list: {raw!r}")


# Store faults are reported generically, never as "no results"
@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
	logger.opt(exception=exc).error(f"[API] Catalog unavailable while serving {request.url.path}")
	return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Answers rejected by strict normalization are a client error
@app.exception_handler(InvalidAnswers)
async def invalid_answers_handler(request: Request, exc: InvalidAnswers):
	logger.warning(f"[API] Rejected answers on {request.url.path}: {exc}")
	return JSONResponse(status_code=422, content={"detail": str(exc)})


# FastAPI startup hook to initialize the recommender once
@app.on_event("startup")
async def startup_event():
	"""Connect to the catalog and build the recommender."""
	global STORE, RECOMMENDER, NORMALIZER, STARTUP_TIME_S  # refer to module-level globals
	start = time.time()  # start timer for startup latency

	logger.info("[API] Startup: connecting to catalog and initializing recommender...")  # log intent
	STORE = SqlCatalogStore.from_url(config.DATABASE_URL, fail_soft=config.STORE_FAIL_SOFT)  # catalog

	# Genre names let the normalizer map UI spellings onto catalog names
	try:
		genres = STORE.list_genre_names()
	except StoreUnavailable as e:
		logger.warning(f"[API] Could not load genre names, answers will not be fuzzy-matched: {e}")
		genres = []
	NORMALIZER = AnswerNormalizer(known_genres=genres)
	RECOMMENDER = Recommender(STORE)  # create recommender

	# Compute and log startup duration
	STARTUP_TIME_S = time.time() - start  # elapsed seconds
	logger.info(f"[API] Startup complete in {STARTUP_TIME_S:.2f}s with {len(genres)} genres.")  # summary log


# Simple health endpoint for readiness checks
@app.get("/health")
async def health():
	"""Return minimal health info for liveness/readiness probes."""
	return {
		"status": "ok",  # constant indicator
		"engine_ready": RECOMMENDER is not None,  # True if recommender initialized
		"startup_seconds": round(STARTUP_TIME_S, 2)  # startup latency
	}


@app.post("/recommend", response_model=RecommendResponse)
def recommend(body: RecommendRequest):
	"""Return a ranked batch of movies for the quiz answers."""
	recommender = _require_recommender()
	start = time.time()  # start timer
	answers = NORMALIZER.normalize(body.answers)  # resolve "any"/unknown values
	logger.debug(f"[API] /recommend answers={answers} exclude={len(body.excludeIds)} count={body.count}")

	results = recommender.recommend_many(answers, exclude_ids=body.excludeIds, count=body.count)
	elapsed_ms = (time.time() - start) * 1000  # compute ms
	if not results:
		logger.info(f"[API] /recommend found no matches in {elapsed_ms:.2f} ms")
		raise HTTPException(status_code=404, detail=NO_MATCH_MESSAGE)

	logger.info(f"[API] /recommend served {len(results)} movies in {elapsed_ms:.2f} ms")  # summary
	return RecommendResponse(
		movies=[_movie_out(r.movie) for r in results],
		reasons=results[0].reasons,
		count=len(results),
	)


@app.post("/recommend/one", response_model=SingleRecommendResponse)
def recommend_one(body: RecommendRequest):
	"""Return one movie picked at random among the best matches."""
	recommender = _require_recommender()
	answers = NORMALIZER.normalize(body.answers)
	result = recommender.recommend(answers, exclude_ids=body.excludeIds)
	if result is None:
		raise HTTPException(status_code=404, detail=NO_MATCH_MESSAGE)
	return SingleRecommendResponse(movie=_movie_out(result.movie), score=round(result.score, 3), reasons=result.reasons)


@app.get("/recommend/random")
def recommend_random(exclude: Optional[str] = Query(None, description="Comma-separated movie ids to skip")):
	"""Return any well-rated movie, ignoring quiz answers."""
	recommender = _require_recommender()
	movie = recommender.random_pick(exclude_ids=_parse_ids(exclude))
	if movie is None:
		raise HTTPException(status_code=404, detail=NO_MATCH_MESSAGE)
	return {"movie": _movie_out(movie)}


@app.get("/movies/{movie_id}")
def get_movie(movie_id: int):
	"""Return one movie by id."""
	recommender = _require_recommender()
	movie = recommender.store.get_movie_by_id(movie_id)
	if movie is None:
		raise HTTPException(status_code=404, detail="Movie not found")
	return {"movie": _movie_out(movie)}


@app.get("/movies")
def search_movies(
	genres: Optional[str] = Query(None, description="Comma-separated genre names"),
	minYear: Optional[int] = None,
	maxYear: Optional[int] = None,
	minRating: Optional[float] = None,
	limit: int = Query(config.DEFAULT_QUERY_LIMIT, ge=1, le=10000),
):
	"""Browse the catalog with simple filters, best rated first."""
	recommender = _require_recommender()
	criteria = SearchCriteria(
		genres=[g.strip() for g in genres.split(',') if g.strip()] if genres else None,
		min_year=minYear,
		max_year=maxYear,
		min_rating=minRating,
		limit=limit,
	)
	movies = recommender.store.query_movies(criteria)
	return {"movies": [_movie_out(m) for m in movies], "count": len(movies)}


@app.get("/genres")
def list_genres():
	"""Return all catalog genre names."""
	recommender = _require_recommender()
	return {"genres": recommender.store.list_genre_names()}


@app.get("/stats")
def catalog_stats():
	"""Return basic catalog statistics."""
	if STORE is None:
		raise HTTPException(status_code=503, detail="Catalog not initialized")
	return STORE.stats()
