import anyio
import httpx
import pytest

from src.service.check_in_client.driven_adapter.http.connectivity_monitor_impl import (
    ConnectivityMonitorImpl,
)


pytestmark = pytest.mark.unit

BASE_URL = 'http://redemption.test'


class _Server:
    """Toggleable /health endpoint."""

    def __init__(self) -> None:
        self.up = False
        self.probes = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.probes += 1
        if not self.up:
            raise httpx.ConnectError('connection refused', request=request)
        return httpx.Response(200, json={'status': 'healthy'})


def _monitor(server: _Server, probe_interval: float = 15.0) -> ConnectivityMonitorImpl:
    client = httpx.AsyncClient(transport=httpx.MockTransport(server.handler), base_url=BASE_URL)
    return ConnectivityMonitorImpl(base_url=BASE_URL, probe_interval=probe_interval, client=client)


class TestConnectivityMonitor:
    @pytest.mark.asyncio
    async def test_starts_offline_until_a_probe_succeeds(self):
        server = _Server()
        monitor = _monitor(server)

        assert monitor.is_online is False
        assert await monitor.probe() is False

        server.up = True
        assert await monitor.probe() is True
        assert monitor.is_online is True

    @pytest.mark.asyncio
    async def test_listeners_fire_on_each_reconnect_only(self):
        # Given
        server = _Server()
        monitor = _monitor(server)
        reconnects: list[str] = []
        monitor.add_reconnect_listener(lambda: reconnects.append('up'))

        # When: down -> up -> up -> down -> up
        await monitor.probe()
        server.up = True
        await monitor.probe()
        await monitor.probe()
        server.up = False
        await monitor.probe()
        server.up = True
        await monitor.probe()

        # Then: one call per offline -> online transition
        assert reconnects == ['up', 'up']

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_block_others(self):
        server = _Server()
        server.up = True
        monitor = _monitor(server)
        reconnects: list[str] = []

        def broken() -> None:
            raise RuntimeError('boom')

        monitor.add_reconnect_listener(broken)
        monitor.add_reconnect_listener(lambda: reconnects.append('up'))

        await monitor.probe()

        assert reconnects == ['up']

    @pytest.mark.asyncio
    async def test_removed_listener_is_not_called(self):
        server = _Server()
        server.up = True
        monitor = _monitor(server)
        reconnects: list[str] = []
        remove = monitor.add_reconnect_listener(lambda: reconnects.append('up'))

        remove()
        await monitor.probe()

        assert reconnects == []

    @pytest.mark.asyncio
    async def test_server_error_counts_as_offline(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
        monitor = ConnectivityMonitorImpl(base_url=BASE_URL, client=client)

        assert await monitor.probe() is False

    @pytest.mark.asyncio
    async def test_probe_loop_runs_until_stopped(self):
        server = _Server()
        server.up = True
        monitor = _monitor(server, probe_interval=0.01)

        async with anyio.create_task_group() as tg:
            await monitor.start(task_group=tg)
            with anyio.fail_after(2):
                while server.probes < 3:
                    await anyio.sleep(0.005)
            monitor.stop()

        assert monitor.is_online is True
        await monitor.aclose()
