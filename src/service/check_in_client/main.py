"""
Check-in Device Entry Point

Usage:
    check-in-client
    PYTHONPATH=$PWD uv run python src/service/check_in_client/main.py

Runs the connectivity monitor and the Sync Manager until SIGINT/SIGTERM.
Scans are captured through client_container.capture_check_in_use_case().
"""

import signal

import anyio

from src.platform.config.client_di import client_container
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.service.check_in_client.domain.value_object.sync_state import SyncStats, SyncStatus


def log_sync_status(status: SyncStatus, stats: SyncStats) -> None:
    Logger.base.info(
        f'📋 [Check-in Device] sync={status.value} total={stats.total} '
        f'successful={stats.successful} rejected={stats.rejected} failed={stats.failed}'
    )


async def main() -> None:
    Logger.base.info('🚀 [Check-in Device] Starting...')

    tracing = TracingConfig(service_name='check-in-device')
    tracing.setup()

    connectivity_monitor = client_container.connectivity_monitor()
    sync_manager = client_container.sync_manager()
    gateway = client_container.redemption_gateway()
    sync_manager.subscribe(log_sync_status)

    shutdown_event = anyio.Event()

    try:
        with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:

            async def signal_watcher() -> None:
                async for signum in signals:
                    Logger.base.info(f'🛑 [Check-in Device] Received signal {signum}')
                    shutdown_event.set()
                    break

            async with anyio.create_task_group() as tg:
                tg.start_soon(signal_watcher)  # type: ignore[arg-type]
                await sync_manager.start(task_group=tg)
                await connectivity_monitor.start(task_group=tg)

                await shutdown_event.wait()

                sync_manager.stop()
                connectivity_monitor.stop()
                tg.cancel_scope.cancel()
    finally:
        await gateway.aclose()
        await connectivity_monitor.aclose()
        client_container.local_database().dispose()
        tracing.shutdown()
        Logger.base.info('👋 [Check-in Device] Shutdown complete')


def run() -> None:
    anyio.run(main)  # type: ignore[arg-type]


if __name__ == '__main__':
    run()
