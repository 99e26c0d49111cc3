"""Tests for the session store and per-agent disclosure state."""

import threading

import pytest

from carnet.core.session import OrderedSet, SessionState, SessionStore
from carnet.errors import NotFoundError


def test_ordered_set_keeps_insertion_order():
    items = OrderedSet(["b", "a"])
    items.add("c")
    items.add("a")
    items.update(["d", "b"])
    assert list(items) == ["b", "a", "c", "d"]
    assert "c" in items
    assert len(items) == 4


def test_snapshot_is_detached():
    session = SessionState("agent", ["s1"], ["t1"], ["tool1"])
    copy = session.snapshot()
    session.discovered_skills.add("s2")

    assert list(copy.discovered_skills) == ["s1"]
    assert copy != session


def test_store_creates_lazily_and_once():
    calls = []

    def seed(name):
        calls.append(name)
        return SessionState(name, ["initial"])

    store = SessionStore(seed)
    assert store.get("agent") is None
    first = store.get_or_create("agent")
    second = store.get_or_create("agent")

    assert first is second
    assert calls == ["agent"]
    assert "agent" in store


def test_store_reset_reseeds():
    store = SessionStore(lambda name: SessionState(name, ["initial"]))
    session = store.get_or_create("agent")
    session.discovered_skills.add("extra")

    fresh = store.reset("agent")

    assert list(fresh.discovered_skills) == ["initial"]
    assert store.get("agent") is fresh


def test_engine_sessions_seeded_from_initial_skills(carnet):
    assert carnet.get_session_state("researcher") is None
    carnet.get_tools("researcher")

    state = carnet.get_session_state("researcher")
    assert list(state.discovered_skills) == ["webSearch"]
    assert list(state.loaded_toolsets) == ["search"]
    assert list(state.exposed_domain_tools) == ["basicSearch", "advancedSearch"]


def test_get_session_state_does_not_create(carnet):
    carnet.get_session_state("researcher")
    assert carnet.get_session_state("researcher") is None
    assert carnet.get_discovered_skills("researcher") == []
    assert carnet.get_available_tools("researcher") == []


def test_skill_load_is_idempotent(carnet):
    carnet._update_session_on_skill_load("researcher", "dataAnalysis")
    once = carnet.get_session_state("researcher")
    carnet._update_session_on_skill_load("researcher", "dataAnalysis")
    twice = carnet.get_session_state("researcher")

    assert once == twice
    assert list(twice.discovered_skills) == ["webSearch", "dataAnalysis"]
    assert list(twice.loaded_toolsets) == ["search", "analysis"]
    assert list(twice.exposed_domain_tools) == ["basicSearch", "advancedSearch", "analyzeData"]


def test_unknown_skill_does_not_change_session(carnet):
    carnet.get_tools("researcher")
    before = carnet.get_session_state("researcher")
    carnet._update_session_on_skill_load("researcher", "doesNotExist")

    assert carnet.get_session_state("researcher") == before


def test_reset_restores_seeded_state(carnet):
    carnet.get_system_prompt("researcher")
    seeded = carnet.get_session_state("researcher")

    carnet._update_session_on_skill_load("researcher", "dataAnalysis")
    carnet.reset_session("researcher")

    assert carnet.get_session_state("researcher") == seeded


def test_reset_unknown_agent_is_noop(carnet):
    carnet.reset_session("nobody")
    assert carnet.get_session_state("nobody") is None


def test_session_state_is_a_copy(carnet):
    carnet.get_tools("researcher")
    state = carnet.get_session_state("researcher")
    state.discovered_skills.add("tampered")

    assert "tampered" not in carnet.get_discovered_skills("researcher")


def test_sessions_isolated_between_engines(manifest_data):
    from carnet.engine import Carnet

    one = Carnet(manifest_data, environ=dict)
    two = Carnet(manifest_data, environ=dict)
    one._update_session_on_skill_load("researcher", "dataAnalysis")

    assert "dataAnalysis" in one.get_discovered_skills("researcher")
    assert two.get_session_state("researcher") is None


def test_session_for_unknown_agent_raises(carnet):
    with pytest.raises(NotFoundError):
        carnet.get_tools("nobody")


def _assert_consistent(state, manifest):
    for skill_name in state.discovered_skills:
        for toolset_name in manifest.skills[skill_name].toolsets:
            assert toolset_name in state.loaded_toolsets
            for tool_name in manifest.toolsets[toolset_name].tools:
                assert tool_name in state.exposed_domain_tools


def test_concurrent_loads_and_reads_never_see_partial_state(carnet):
    carnet.get_tools("researcher")
    snapshots = []
    start = threading.Barrier(8)

    def loader():
        start.wait()
        for _ in range(200):
            carnet._update_session_on_skill_load("researcher", "dataAnalysis")
            carnet.reset_session("researcher")

    def reader():
        start.wait()
        for _ in range(200):
            snapshots.append(carnet.get_session_state("researcher"))

    threads = [threading.Thread(target=loader) for _ in range(4)]
    threads += [threading.Thread(target=reader) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(snapshots) == 800
    for state in snapshots:
        _assert_consistent(state, carnet.manifest)


def test_reset_waits_for_in_flight_skill_load(carnet, monkeypatch):
    carnet.get_tools("researcher")
    apply_skill = carnet._apply_skill
    resetter = threading.Thread(target=carnet.reset_session, args=("researcher",))
    observed = {}

    def apply_during_reset(session, skill_name):
        if skill_name == "dataAnalysis":
            resetter.start()
            resetter.join(timeout=0.2)
            observed["reset_blocked"] = resetter.is_alive()
        return apply_skill(session, skill_name)

    monkeypatch.setattr(carnet, "_apply_skill", apply_during_reset)
    carnet._update_session_on_skill_load("researcher", "dataAnalysis")
    resetter.join()

    # The load landed on the live session and the reset ran strictly after it.
    assert observed["reset_blocked"] is True
    assert carnet.get_discovered_skills("researcher") == ["webSearch"]


def test_store_update_applies_to_current_session():
    store = SessionStore(lambda name: SessionState(name, ["initial"]))
    store.get_or_create("agent")
    store.reset("agent")

    added = store.update("agent", lambda session: session.discovered_skills.add("extra"))

    assert added is None
    assert list(store.get("agent").discovered_skills) == ["initial", "extra"]
