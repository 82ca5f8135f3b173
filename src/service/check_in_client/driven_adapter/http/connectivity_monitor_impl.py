from typing import Callable, Optional

import anyio
from anyio.abc import TaskGroup
import httpx

from src.platform.logging.loguru_io import Logger
from src.service.check_in_client.app.interface.i_connectivity_monitor import (
    IConnectivityMonitor,
    ReconnectListener,
)


HEALTH_PATH = '/health'


class ConnectivityMonitorImpl(IConnectivityMonitor):
    """Polls the server's /health; reaching it is what "online" means for the device."""

    def __init__(
        self,
        *,
        base_url: str,
        probe_interval: float = 15.0,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip('/')
        self.probe_interval = probe_interval
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)
        self._online = False
        self._listeners: list[ReconnectListener] = []
        self._cancel_scope: Optional[anyio.CancelScope] = None

    @property
    def is_online(self) -> bool:
        return self._online

    def add_reconnect_listener(self, listener: ReconnectListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def start(self, *, task_group: TaskGroup) -> None:
        task_group.start_soon(self._probe_loop)  # pyrefly: ignore[bad-argument-type]
        Logger.base.info(
            f'📶 [CONNECTIVITY] Probing {self.base_url}{HEALTH_PATH} every {self.probe_interval}s'
        )

    def stop(self) -> None:
        if self._cancel_scope is not None:
            self._cancel_scope.cancel()
            self._cancel_scope = None

    async def aclose(self) -> None:
        self.stop()
        await self._client.aclose()

    async def _probe_loop(self) -> None:
        with anyio.CancelScope() as scope:
            self._cancel_scope = scope
            while True:
                await self.probe()
                await anyio.sleep(self.probe_interval)

    async def probe(self) -> bool:
        try:
            response = await self._client.get(HEALTH_PATH)
            online = response.is_success
        except httpx.HTTPError:
            online = False
        self._set_online(online)
        return online

    def _set_online(self, online: bool) -> None:
        was_online, self._online = self._online, online
        if online == was_online:
            return

        if not online:
            Logger.base.warning('📴 [CONNECTIVITY] Server unreachable, scans will be queued')
            return

        Logger.base.info('📶 [CONNECTIVITY] Back online')
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                Logger.base.exception(f'❌ [CONNECTIVITY] Reconnect listener failed: {e}')
