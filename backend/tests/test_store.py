import json
from unittest.mock import MagicMock

import pytest

from db.itinerary_store import InMemoryItineraryStore, RedisItineraryStore
from modules.validation import ItineraryNotFoundError


@pytest.fixture
def itinerary(make_location, build_itinerary):
    return build_itinerary([[make_location("a", 0.0), make_location("b", 2.0)]], itinerary_id="itin-store")


def test_memory_store_keeps_snapshots(itinerary):
    store = InMemoryItineraryStore()
    store.save(itinerary)
    itinerary.items.clear()

    loaded = store.get("itin-store")
    assert [it.location.id for it in loaded.ordered_items()] == ["a", "b"]
    assert loaded.items[0].transport_to_next.mode == "grab_bike"
    assert len(store) == 1


def test_memory_store_missing_id():
    store = InMemoryItineraryStore()
    with pytest.raises(ItineraryNotFoundError):
        store.get("nope")
    store.delete("nope")


def test_redis_store_uses_ttl_key(itinerary):
    client = MagicMock()
    store = RedisItineraryStore(client=client, ttl=60)

    store.save(itinerary)

    key, ttl, payload = client.setex.call_args.args
    assert key == "itinerary:itin-store"
    assert ttl == 60
    assert json.loads(payload)["id"] == "itin-store"


def test_redis_store_reads_bytes_and_misses(itinerary):
    client = MagicMock()
    client.get.return_value = json.dumps(itinerary.to_dict()).encode("utf-8")
    store = RedisItineraryStore(client=client)
    assert store.get("itin-store").estimated_budget == itinerary.estimated_budget

    client.get.return_value = None
    with pytest.raises(ItineraryNotFoundError):
        store.get("itin-store")

    store.delete("itin-store")
    client.delete.assert_called_once_with("itinerary:itin-store")
