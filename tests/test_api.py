"""
API tests: drive the FastAPI app with collaborators wired to the in-memory SQLite catalog.
The startup hook is not run; globals are patched instead.
"""

import pytest
from fastapi.testclient import TestClient

import api
from conftest import CATALOG
from film_quiz.answers import AnswerNormalizer
from film_quiz.recommender import Recommender
from film_quiz.scoring import Scorer


@pytest.fixture
def client(monkeypatch, sql_store, rng):
	monkeypatch.setattr(api, 'STORE', sql_store)
	monkeypatch.setattr(api, 'RECOMMENDER', Recommender(sql_store, Scorer(rng=rng)))
	monkeypatch.setattr(api, 'NORMALIZER', AnswerNormalizer(known_genres=sql_store.list_genre_names()))
	return TestClient(api.app)


def test_health(client):
	body = client.get('/health').json()
	assert body['status'] == 'ok'
	assert body['engine_ready'] is True


def test_recommend_batch(client):
	resp = client.post('/recommend', json={'answers': {'genres': ['komedia'], 'origin': 'polish', 'era': 'any'}, 'count': 5})
	assert resp.status_code == 200
	body = resp.json()
	assert [m['id'] for m in body['movies']] == [1, 6, 12]
	assert body['count'] == 3
	assert body['reasons'] == ["Genre: Komedia"]
	assert body['movies'][1]['title_pl'] == 'Dzień świra'


def test_recommend_respects_exclusions(client):
	resp = client.post('/recommend', json={'answers': {'genres': ['Komedia'], 'origin': 'polish'}, 'excludeIds': [1, 12]})
	assert [m['id'] for m in resp.json()['movies']] == [6]


def test_recommend_no_match_is_404(client):
	resp = client.post('/recommend', json={'answers': {'genres': ['Horror'], 'origin': 'polish'}})
	assert resp.status_code == 404
	assert resp.json()['detail'] == api.NO_MATCH_MESSAGE


def test_recommend_validates_body(client):
	assert client.post('/recommend', json={}).status_code == 422
	assert client.post('/recommend', json={'answers': {}, 'count': 0}).status_code == 422


def test_store_failure_is_500_not_empty(monkeypatch, client, memory_catalog_cls):
	monkeypatch.setattr(api, 'RECOMMENDER', Recommender(memory_catalog_cls(CATALOG, fail=True)))
	resp = client.post('/recommend', json={'answers': {}})
	assert resp.status_code == 500
	assert resp.json() == {'detail': 'Internal server error'}


def test_recommend_one(client):
	resp = client.post('/recommend/one', json={'answers': {'rating': 'high'}, 'excludeIds': [3]})
	assert resp.status_code == 200
	body = resp.json()
	assert body['movie']['id'] != 3
	assert body['movie']['rating'] >= 7.5
	assert any(r.startswith("Meets your rating bar") for r in body['reasons'])


def test_recommend_random(client):
	resp = client.get('/recommend/random', params={'exclude': '3,2'})
	assert resp.status_code == 200
	movie = resp.json()['movie']
	assert movie['id'] not in (2, 3)
	assert movie['rating'] >= 6.5
	assert client.get('/recommend/random', params={'exclude': 'x,1'}).status_code == 422


def test_get_movie(client):
	resp = client.get('/movies/4')
	assert resp.status_code == 200
	assert resp.json()['movie']['title_pl'] == 'Boże Ciało'
	assert client.get('/movies/999').status_code == 404


def test_search_movies(client):
	body = client.get('/movies', params={'genres': 'Dramat', 'minRating': 7.0}).json()
	assert [m['id'] for m in body['movies']] == [4, 6, 9]
	assert body['count'] == 3


def test_genres_and_stats(client):
	genres = client.get('/genres').json()['genres']
	assert 'Komedia' in genres and genres == sorted(genres)
	stats = client.get('/stats').json()
	assert stats['total_movies'] == 12


def test_not_initialized_is_503(monkeypatch):
	monkeypatch.setattr(api, 'RECOMMENDER', None)
	monkeypatch.setattr(api, 'STORE', None)
	client = TestClient(api.app)
	assert client.post('/recommend', json={'answers': {}}).status_code == 503
	assert client.get('/stats').status_code == 503


def test_malformed_genres_are_not_a_server_error(client):
	resp = client.post('/recommend', json={'answers': {'genres': 5, 'origin': 'polish'}})
	assert resp.status_code == 200
	assert {m['id'] for m in resp.json()['movies']} == {1, 4, 6, 9, 11, 12}


def test_strict_answers_are_rejected_with_422(monkeypatch, client):
	monkeypatch.setattr(api, 'NORMALIZER', AnswerNormalizer(known_genres=['Dramat'], strict=True))
	resp = client.post('/recommend', json={'answers': {'genres': True}})
	assert resp.status_code == 422
	assert 'genres' in resp.json()['detail']
