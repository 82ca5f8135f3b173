"""
Redemption Service - Main Application
Serves the check-in endpoint and the purchase flow that owns ticket inventory.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.db_setting import create_db_and_tables, get_engine
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig

# Register ORM models on Base.metadata before create_all
import src.service.redemption.driven_adapter.model  # noqa: F401


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifespan: startup and shutdown"""
    Logger.base.info('🚀 [Redemption Service] Starting up...')

    tracing = TracingConfig(service_name='redemption-service')
    tracing.setup()
    Logger.base.info('📊 [Redemption Service] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Redemption Service] Dependency injection wired')

    await create_db_and_tables()
    tracing.instrument_sqlalchemy(engine=get_engine())
    Logger.base.info('🗄️ [Redemption Service] Database ready')

    Logger.base.info('✅ [Redemption Service] Startup complete')

    yield

    Logger.base.info('🛑 [Redemption Service] Shutting down...')

    await container.database().engine_manager.dispose()

    tracing.shutdown()
    Logger.base.info('📊 [Redemption Service] Tracing shutdown complete')

    container.unwire()

    Logger.base.info('👋 [Redemption Service] Shutdown complete')


app = create_app(lifespan=lifespan)
