from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI

from healthpath.api.routes.catalog import router as catalog_router
from healthpath.api.routes.children import router as children_router
from healthpath.api.routes.profile import router as profile_router
from healthpath.api.routes.reports import router as reports_router
from healthpath.api.state import AppState
from healthpath.config import load_config
from healthpath.growth.bmi import BmiThresholds
from healthpath.growth.reference import GrowthReferenceParams
from healthpath.logging_config import configure_logging, get_logger
from healthpath.reference_data import vaccination_schedule
from healthpath.services.ai_analysis import AnalysisTracker, GeminiClient, TextGenerator
from healthpath.services.child_repository import ChildRepository
from healthpath.services.events import EventBus, get_event_bus
from healthpath.services.storage import StoragePort, create_storage


logger = get_logger(__name__)


def build_state(
    config: Dict[str, Any],
    storage: Optional[StoragePort] = None,
    ai_client: Optional[TextGenerator] = None,
    bus: Optional[EventBus] = None,
) -> AppState:
    bus = bus if bus is not None else get_event_bus()
    repository = ChildRepository(
        storage or create_storage(config),
        bus,
        storage_key=config["storage"]["key"],
        event_name=config["events"]["profile_updated"],
    )
    return AppState(
        config=config,
        repository=repository,
        bus=bus,
        schedule=vaccination_schedule(),
        reference_params=GrowthReferenceParams.from_config(config["growth"].get("reference")),
        bmi_thresholds=BmiThresholds.from_config(config["growth"].get("bmi")),
        tracker=AnalysisTracker(),
        ai_client=ai_client if ai_client is not None else GeminiClient.from_config(config),
    )


def create_app(
    config: Optional[Dict[str, Any]] = None,
    storage: Optional[StoragePort] = None,
    ai_client: Optional[TextGenerator] = None,
    bus: Optional[EventBus] = None,
) -> FastAPI:
    """Build the API. Without an explicit bus the app joins the process-wide one."""
    config = config or load_config()
    configure_logging(config.get("logging"))
    state = build_state(config, storage=storage, ai_client=ai_client, bus=bus)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load the stored profile and follow saves made by other components."""
        state.repository.load()
        state.subscription = state.repository.watch()
        logger.info("Profile loaded", children=len(state.repository.children))
        try:
            yield
        finally:
            state.subscription.unsubscribe()

    app = FastAPI(title="HealthPath Child Health API", version="0.1.0", lifespan=lifespan)
    app.state.healthpath = state

    app.include_router(children_router)
    app.include_router(profile_router)
    app.include_router(catalog_router)
    app.include_router(reports_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
