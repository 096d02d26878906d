import asyncio

from gql_extract.core.ports.sink import ComponentSink
from gql_extract.models import FeatureFlags
from gql_extract.store import InMemoryComponentStore


def test_in_memory_store_keeps_latest_features(in_memory_store: InMemoryComponentStore) -> None:
    asyncio.run(in_memory_store.set_component_features("/src/a.js", FeatureFlags(config=True)))
    asyncio.run(in_memory_store.set_component_features("/src/a.js", FeatureFlags(head=True)))

    assert in_memory_store.features_for("/src/a.js") == FeatureFlags(head=True)
    assert in_memory_store.events_for("/src/a.js") == ["features", "features"]
    assert in_memory_store.features_for("/src/b.js") is None


def test_in_memory_store_tracks_extraction_state(in_memory_store: InMemoryComponentStore) -> None:
    sink: ComponentSink = in_memory_store

    asyncio.run(sink.set_component_features("/src/a.js", FeatureFlags(server_data=True)))
    asyncio.run(sink.extraction_failed("/src/a.js", ValueError("bad fragment")))
    asyncio.run(sink.extraction_succeeded("/src/a.js"))

    assert in_memory_store.state_for("/src/a.js") == "success"
    assert in_memory_store.features_for("/src/a.js") == FeatureFlags(server_data=True)
    assert in_memory_store.events_for("/src/a.js") == ["features", "failed", "success"]
    assert in_memory_store.events[1].error == "bad fragment"


def test_in_memory_store_state_survives_feature_updates(in_memory_store: InMemoryComponentStore) -> None:
    asyncio.run(in_memory_store.extraction_failed("/src/a.js"))
    asyncio.run(in_memory_store.set_component_features("/src/a.js", FeatureFlags()))

    assert in_memory_store.state_for("/src/a.js") == "failed"
    assert in_memory_store.events[0].error is None
