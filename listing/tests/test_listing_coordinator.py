"""
Tests for ListingCoordinator.
"""

import asyncio
import logging
from unittest.mock import AsyncMock, patch

import pytest

from listing.coordinator import ListingCoordinator, ListingPhase, ListingState
from sources.base import StorageSource
from sources.registry import SourceRegistry
from sources.types import ScriptFile


def make_files(source_id, *names):
    return [ScriptFile(id=f"{source_id}:{name}", name=name, source_id=source_id) for name in names]


class ControlledSource(StorageSource):
    """Source whose listings resolve only when the test says so."""

    def __init__(self, source_id):
        self._source_id = source_id
        self.pending: list[asyncio.Future] = []

    @property
    def source_id(self):
        return self._source_id

    @property
    def name(self):
        return self._source_id.title()

    @property
    def calls(self):
        return len(self.pending)

    async def list_files(self):
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future

    def resolve(self, files, call=-1):
        self.pending[call].set_result(files)

    def fail(self, error, call=-1):
        self.pending[call].set_exception(error)


class StaticSource(StorageSource):
    """Source that lists a fixed set of files."""

    def __init__(self, source_id, files):
        self._source_id = source_id
        self._files = files

    @property
    def source_id(self):
        return self._source_id

    @property
    def name(self):
        return self._source_id

    async def list_files(self):
        return self._files


async def drain():
    """Let scheduled tasks run up to their next suspension point."""
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def registry():
    return SourceRegistry()


class TestInitialState:
    """Tests for an unbound coordinator."""

    def test_idle_without_source(self, registry):
        coordinator = ListingCoordinator(registry)

        assert coordinator.state == ListingState()
        assert coordinator.state.phase == ListingPhase.IDLE
        assert coordinator.files == ()
        assert coordinator.is_loading is False
        assert coordinator.source_id is None

    def test_refresh_while_idle_does_nothing(self, registry):
        coordinator = ListingCoordinator(registry)

        coordinator.refresh()

        assert coordinator.state == ListingState()

    def test_bind_requires_running_loop(self, registry):
        coordinator = ListingCoordinator(registry)

        with pytest.raises(RuntimeError):
            coordinator.bind("my-scripts")


class TestLoading:
    """Tests for single loads."""

    @pytest.mark.asyncio
    async def test_success_round_trip(self, registry):
        """Test that a successful listing is published verbatim."""
        files = make_files("a", "one", "two")
        registry.register("a", StaticSource("a", files))

        coordinator = ListingCoordinator(registry, "a")
        state = await coordinator.settle()

        assert state.files == tuple(files)
        assert state.is_loading is False
        assert state.phase == ListingPhase.READY
        assert state.source_id == "a"
        assert state.generation == 1

    @pytest.mark.asyncio
    async def test_loading_flag_set_synchronously(self, registry):
        """Test that bind publishes the loading state before any await."""
        source = ControlledSource("a")
        registry.register("a", source)
        coordinator = ListingCoordinator(registry)

        coordinator.bind("a")

        assert coordinator.is_loading is True
        assert coordinator.state.phase == ListingPhase.LOADING
        assert coordinator.state.generation == 1

        await drain()
        source.resolve([])
        await coordinator.settle()

    @pytest.mark.asyncio
    async def test_order_and_duplicates_preserved(self, registry):
        """Test that the listing is neither sorted nor de-duplicated."""
        files = make_files("a", "zeta", "alpha", "zeta")
        registry.register("a", StaticSource("a", files))

        coordinator = ListingCoordinator(registry, "a")
        await coordinator.settle()

        assert [f.name for f in coordinator.files] == ["zeta", "alpha", "zeta"]

    @pytest.mark.asyncio
    async def test_failure_is_absorbed(self, registry):
        """Test that a failing source publishes an empty listing."""
        source = ControlledSource("a")
        registry.register("a", source)

        coordinator = ListingCoordinator(registry, "a")
        await drain()
        source.fail(ConnectionError("backend down"))
        state = await coordinator.settle()

        assert state.files == ()
        assert state.is_loading is False
        assert state.phase == ListingPhase.READY

    @pytest.mark.asyncio
    async def test_failure_replaces_previous_listing(self, registry):
        """Test that a failed refresh publishes empty instead of keeping old files."""
        source = ControlledSource("a")
        registry.register("a", source)
        coordinator = ListingCoordinator(registry, "a")
        await drain()
        source.resolve(make_files("a", "one"))
        await coordinator.settle()

        coordinator.refresh()
        await drain()
        source.fail(OSError("gone"))
        await coordinator.settle()

        assert coordinator.files == ()

    @pytest.mark.asyncio
    async def test_absent_source_publishes_empty(self, registry):
        """Test that an unregistered identifier resolves to an empty listing."""
        coordinator = ListingCoordinator(registry, "missing")
        state = await coordinator.settle()

        assert state.files == ()
        assert state.is_loading is False
        assert state.source_id == "missing"

    @pytest.mark.asyncio
    async def test_bind_same_source_is_noop(self, registry):
        """Test that re-binding the bound identifier does not reload."""
        registry.register("a", StaticSource("a", []))
        coordinator = ListingCoordinator(registry, "a")
        await coordinator.settle()

        with patch.object(registry.get_source("a"), "list_files", new_callable=AsyncMock) as mock_list:
            coordinator.bind("a")
            await coordinator.settle()

            mock_list.assert_not_awaited()
        assert coordinator.state.generation == 1


class TestStaleSuppression:
    """Tests for discarding superseded loads."""

    @pytest.mark.asyncio
    async def test_late_result_of_previous_source_is_discarded(self, registry):
        """Bind A (slow), then B (fast): A's late result never overwrites B."""
        slow = ControlledSource("a")
        fast = ControlledSource("b")
        registry.register("a", slow)
        registry.register("b", fast)
        b_files = make_files("b", "bee")

        coordinator = ListingCoordinator(registry, "a")
        await drain()
        coordinator.bind("b")
        await drain()

        fast.resolve(b_files)
        await drain()
        assert coordinator.files == tuple(b_files)
        assert coordinator.is_loading is False

        slow.resolve(make_files("a", "ay"))
        state = await coordinator.settle()

        assert state.files == tuple(b_files)
        assert state.source_id == "b"
        assert state.generation == 2

    @pytest.mark.asyncio
    async def test_early_result_of_previous_source_is_discarded(self, registry):
        """A resolves while B is still loading: state keeps waiting for B."""
        slow_b = ControlledSource("b")
        a = ControlledSource("a")
        registry.register("a", a)
        registry.register("b", slow_b)

        coordinator = ListingCoordinator(registry, "a")
        await drain()
        coordinator.bind("b")
        await drain()

        a.resolve(make_files("a", "ay"))
        await drain()
        assert coordinator.is_loading is True
        assert coordinator.files == ()

        slow_b.resolve(make_files("b", "bee"))
        await coordinator.settle()
        assert [f.name for f in coordinator.files] == ["bee"]

    @pytest.mark.asyncio
    async def test_out_of_order_refreshes(self, registry):
        """Only the most recent refresh may publish."""
        source = ControlledSource("a")
        registry.register("a", source)
        coordinator = ListingCoordinator(registry, "a")
        await drain()
        coordinator.refresh()
        await drain()

        source.resolve(make_files("a", "newest"), call=1)
        await drain()
        source.resolve(make_files("a", "oldest"), call=0)
        await coordinator.settle()

        assert [f.name for f in coordinator.files] == ["newest"]
        assert coordinator.state.generation == 2

    @pytest.mark.asyncio
    async def test_stale_failure_is_discarded(self, registry):
        """A superseded load that fails does not clear the winning listing."""
        source = ControlledSource("a")
        registry.register("a", source)
        coordinator = ListingCoordinator(registry, "a")
        await drain()
        coordinator.refresh()
        await drain()

        source.resolve(make_files("a", "fresh"), call=1)
        await drain()
        source.fail(RuntimeError("late failure"), call=0)
        await coordinator.settle()

        assert [f.name for f in coordinator.files] == ["fresh"]


class TestRefresh:
    """Tests for manual refresh."""

    @pytest.mark.asyncio
    async def test_refresh_invokes_source_once(self, registry):
        registry.register("a", StaticSource("a", make_files("a", "one")))
        coordinator = ListingCoordinator(registry, "a")
        await coordinator.settle()

        with patch.object(registry.get_source("a"), "list_files", new_callable=AsyncMock) as mock_list:
            mock_list.return_value = make_files("a", "one", "two")

            coordinator.refresh()
            assert coordinator.is_loading is True

            await coordinator.settle()

            mock_list.assert_awaited_once()
        assert [f.name for f in coordinator.files] == ["one", "two"]
        assert coordinator.is_loading is False
        assert coordinator.state.generation == 2

    @pytest.mark.asyncio
    async def test_refresh_returns_none(self, registry):
        registry.register("a", StaticSource("a", []))
        coordinator = ListingCoordinator(registry, "a")

        assert coordinator.refresh() is None
        await coordinator.settle()

    @pytest.mark.asyncio
    async def test_refresh_picks_up_late_registration(self, registry):
        """Test that a source registered after an empty load is found on refresh."""
        coordinator = ListingCoordinator(registry, "late")
        await coordinator.settle()
        assert coordinator.files == ()

        registry.register("late", StaticSource("late", make_files("late", "x")))
        coordinator.refresh()
        await coordinator.settle()

        assert [f.name for f in coordinator.files] == ["x"]


class TestLazyListings:
    """Tests for sources that return lazy iterables."""

    @pytest.mark.asyncio
    async def test_iterable_failing_midway_publishes_empty(self, registry):
        """A generator that raises while being read still ends the load."""

        class VanishingSource(StaticSource):
            async def list_files(self):
                def scan():
                    yield from self._files
                    raise OSError("directory vanished mid-scan")

                return scan()

        registry.register("a", VanishingSource("a", make_files("a", "one")))

        coordinator = ListingCoordinator(registry, "a")
        state = await coordinator.settle()

        assert state.files == ()
        assert state.is_loading is False
        assert state.phase == ListingPhase.READY

    @pytest.mark.asyncio
    async def test_generator_listing_is_materialized(self, registry):
        files = make_files("a", "one", "two")

        class GeneratorSource(StaticSource):
            async def list_files(self):
                return (f for f in self._files)

        registry.register("a", GeneratorSource("a", files))

        coordinator = ListingCoordinator(registry, "a")
        await coordinator.settle()

        assert coordinator.files == tuple(files)


class TestNoFlashToEmpty:
    """Tests for keeping the previous listing visible while loading."""

    @pytest.mark.asyncio
    async def test_rebind_keeps_previous_files(self, registry):
        a_files = make_files("a", "one")
        registry.register("a", StaticSource("a", a_files))
        b = ControlledSource("b")
        registry.register("b", b)

        coordinator = ListingCoordinator(registry, "a")
        await coordinator.settle()

        observed: list[ListingState] = []
        coordinator.subscribe(observed.append)
        coordinator.bind("b")
        await drain()

        assert coordinator.is_loading is True
        assert coordinator.files == tuple(a_files)

        b.resolve(make_files("b", "two"))
        await coordinator.settle()

        assert [(s.is_loading, [f.name for f in s.files]) for s in observed] == [
            (True, ["one"]),
            (False, ["two"]),
        ]

    @pytest.mark.asyncio
    async def test_refresh_keeps_previous_files(self, registry):
        source = ControlledSource("a")
        registry.register("a", source)
        coordinator = ListingCoordinator(registry, "a")
        await drain()
        source.resolve(make_files("a", "one"))
        await coordinator.settle()

        coordinator.refresh()

        assert coordinator.is_loading is True
        assert [f.name for f in coordinator.files] == ["one"]

        await drain()
        source.resolve(make_files("a", "one"))
        await coordinator.settle()


class TestSubscriptions:
    """Tests for state listeners."""

    @pytest.mark.asyncio
    async def test_listener_receives_every_state(self, registry):
        registry.register("a", StaticSource("a", make_files("a", "one")))
        coordinator = ListingCoordinator(registry)
        states: list[ListingState] = []
        coordinator.subscribe(states.append)

        coordinator.bind("a")
        await coordinator.settle()

        assert [s.phase for s in states] == [ListingPhase.LOADING, ListingPhase.READY]
        assert states[-1] is coordinator.state

    @pytest.mark.asyncio
    async def test_unsubscribe(self, registry):
        registry.register("a", StaticSource("a", []))
        coordinator = ListingCoordinator(registry)
        states: list[ListingState] = []
        unsubscribe = coordinator.subscribe(states.append)

        unsubscribe()
        unsubscribe()
        coordinator.bind("a")
        await coordinator.settle()

        assert states == []

    @pytest.mark.asyncio
    async def test_failing_listener_is_logged(self, registry, caplog):
        """Test that a raising listener does not stop publishing."""
        registry.register("a", StaticSource("a", make_files("a", "one")))
        coordinator = ListingCoordinator(registry)
        states: list[ListingState] = []

        def broken(state):
            raise ValueError("render failed")

        coordinator.subscribe(broken)
        coordinator.subscribe(states.append)

        with caplog.at_level(logging.ERROR, logger="listing.coordinator"):
            coordinator.bind("a")
            await coordinator.settle()

        assert len(states) == 2
        assert coordinator.is_loading is False
        assert "Listing state listener failed" in caplog.text


class TestClose:
    """Tests for closing a coordinator."""

    @pytest.mark.asyncio
    async def test_results_after_close_are_dropped(self, registry):
        source = ControlledSource("a")
        registry.register("a", source)
        coordinator = ListingCoordinator(registry, "a")
        await drain()

        coordinator.close()
        source.resolve(make_files("a", "one"))
        await coordinator.settle()

        assert coordinator.files == ()
        assert coordinator.is_loading is True

    @pytest.mark.asyncio
    async def test_bind_after_close_is_ignored(self, registry):
        registry.register("a", StaticSource("a", []))
        coordinator = ListingCoordinator(registry)
        coordinator.close()

        coordinator.bind("a")
        coordinator.refresh()

        assert coordinator.state == ListingState()
