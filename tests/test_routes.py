import importlib
import time
from typing import Any

import pytest


def import_app(monkeypatch: pytest.MonkeyPatch) -> Any:
	"""
	Import app.py with the background reaper disabled. Returns the loaded module.
	"""
	monkeypatch.setenv("APP_ENV", "test")
	monkeypatch.setenv("LOG_LEVEL", "WARNING")
	monkeypatch.delenv("REDIS_URL", raising=False)
	return importlib.import_module("micro_kv.app")


class FakeClock:
	def __init__(self, start: float = 0.0):
		self.now = start

	def __call__(self) -> float:
		return self.now


@pytest.fixture
def clock():
	return FakeClock()


@pytest.fixture
def store(clock):
	memory_store = importlib.import_module("micro_kv.store.memory_store")
	return memory_store.MemoryStore(clock=clock)


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch, store):
	app = import_app(monkeypatch)
	return app.create_app(app.settings, store).test_client()


def test_health_ok(client):
	r = client.get("/health")
	assert r.status_code == 200
	assert r.get_json() == {"status": "healthy", "backend": "MemoryStore"}


def test_module_app_uses_memory_store(monkeypatch: pytest.MonkeyPatch):
	app = import_app(monkeypatch)
	assert type(app.datastore).__name__ == "MemoryStore"
	assert app.reaper is None
	r = app.app.test_client().get("/health")
	assert r.status_code == 200


def test_insert_and_get(client):
	r = client.post("/a?ttl=1", json={"x": 1})
	assert r.status_code == 200
	assert r.get_json() == {"status": "inserted", "key": "a"}

	r = client.get("/a")
	assert r.status_code == 200
	assert r.get_json() == {"x": 1}

	r = client.get("/ttl/a")
	assert r.status_code == 200
	assert r.get_json() == {"ttl": pytest.approx(1.0), "status": "success"}


def test_expired_key_is_not_found_everywhere(client, clock):
	client.post("/a?ttl=2", json="v")
	clock.now += 2

	r = client.get("/a")
	assert r.status_code == 404
	assert r.get_json() == {"status": "Key not found: a"}

	r = client.get("/ttl/a")
	assert r.status_code == 404
	assert r.get_json() == {"status": "Key not found: a"}

	assert client.get("/").get_json() == {}


def test_absent_key_not_found(client):
	r = client.get("/missing")
	assert r.status_code == 404
	assert r.get_json()["status"] == "Key not found: missing"
	assert client.get("/ttl/missing").status_code == 404


def test_permanent_without_ttl(client, clock):
	client.post("/p", json=[1, 2])
	clock.now += 10**6
	assert client.get("/p").get_json() == [1, 2]
	assert client.get("/ttl/p").get_json() == {"ttl": None, "status": "success"}


def test_default_ttl_from_settings(monkeypatch: pytest.MonkeyPatch, store, clock):
	app = import_app(monkeypatch)
	conf = app.Settings(default_ttl_seconds=300)
	client = app.create_app(conf, store).test_client()
	client.post("/d", json=True)
	assert client.get("/ttl/d").get_json()["ttl"] == pytest.approx(300.0)
	clock.now += 300
	assert client.get("/d").status_code == 404


def test_upsert_overwrites(client):
	client.post("/k?ttl=100", json="v1")
	client.post("/k?ttl=5", json="v2")
	assert client.get("/k").get_json() == "v2"
	assert client.get("/ttl/k").get_json()["ttl"] == pytest.approx(5.0)


def test_get_all_lists_live_entries(client, clock):
	client.post("/short?ttl=1", json=1)
	client.post("/long?ttl=10", json={"a": "b"})
	client.post("/perm", data="null", content_type="application/json")
	clock.now += 1

	r = client.get("/")
	assert r.status_code == 200
	assert r.get_json() == {
		"long": {"value": {"a": "b"}, "ttl": pytest.approx(9.0)},
		"perm": {"value": None, "ttl": None},
	}


def test_delete(client):
	client.post("/k", json="v")
	r = client.delete("/k")
	assert r.status_code == 200
	assert r.get_json()["status"] == "deleted"

	r = client.delete("/k")
	assert r.status_code == 200
	assert r.get_json()["status"] == "not found"
	assert client.get("/k").status_code == 404


@pytest.mark.parametrize("ttl", ["abc", "-3", "nan"])
def test_invalid_ttl_rejected(client, store, ttl):
	r = client.post(f"/k?ttl={ttl}", json="v")
	assert r.status_code == 400
	assert "ttl" in r.get_json()["status"]
	assert len(store) == 0


def test_malformed_body_rejected(client, store):
	r = client.post("/k", data="{not json", content_type="application/json")
	assert r.status_code == 400
	assert r.get_json() == {"status": "Malformed JSON body"}

	r = client.post("/k", data="", content_type="application/json")
	assert r.status_code == 400
	assert len(store) == 0


def test_invalid_utf8_body_rejected(client, store):
	r = client.post("/u", data=b'"\xff\xfe"', content_type="application/json")
	assert r.status_code == 400
	assert r.get_json() == {"status": "Malformed JSON body"}
	assert len(store) == 0
	assert client.get("/u").status_code == 404


def test_body_without_json_content_type_accepted(client):
	r = client.post("/plain", data='{"a": 1}', content_type="text/plain")
	assert r.status_code == 200
	assert client.get("/plain").get_json() == {"a": 1}


def test_long_key_accepted(client):
	key = "k" * 300
	r = client.post(f"/{key}", json={"x": 1})
	assert r.status_code == 200
	assert r.get_json() == {"status": "inserted", "key": key}
	assert client.get(f"/{key}").get_json() == {"x": 1}


def test_serialization_failure_reports_status(client, store):
	client.post("/k", json="original")
	# NaN parses as a JSON body but cannot be stored as strict JSON
	r = client.post("/k", data='{"n": NaN}', content_type="application/json")
	assert r.status_code == 200
	assert r.get_json() == {"status": "Error Creating Item"}
	assert client.get("/k").get_json() == "original"


def test_deserialization_fault_is_500(client, store):
	models = importlib.import_module("micro_kv.models")
	store._table["bad"] = models.Entry(b"{not json", None)
	r = client.get("/bad")
	assert r.status_code == 500
	assert r.get_json() == {"status": "Error deserializing JSON"}


def test_concrete_scenario_over_http(monkeypatch: pytest.MonkeyPatch):
	app = import_app(monkeypatch)
	client = app.create_app(app.settings, app.MemoryStore()).test_client()
	client.post("/a?ttl=1", json={"x": 1})
	assert client.get("/a").get_json() == {"x": 1}
	assert client.get("/ttl/a").get_json()["ttl"] == pytest.approx(1.0, abs=0.1)
	time.sleep(1.2)
	assert client.get("/a").status_code == 404


def test_start_reaper_respects_config(monkeypatch: pytest.MonkeyPatch, store):
	app = import_app(monkeypatch)
	assert app.start_reaper(app.Settings(reaper_enabled=False), store) is None

	reaper = app.start_reaper(app.Settings(reaper_max_interval_seconds=0.05), store)
	try:
		assert reaper is not None and reaper.running
	finally:
		reaper.stop(timeout=2)


def test_redis_backend_selected_by_url(monkeypatch: pytest.MonkeyPatch):
	app = import_app(monkeypatch)
	conf = app.Settings(redis_url="redis://localhost:6379/0", redis_key_prefix="t:")
	# redis-py connects lazily, so no server is needed to build the store
	store = app.build_datastore(conf)
	assert isinstance(store, app.RedisStore)
	assert app.start_reaper(conf, store) is None
