from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from topic_hub.api.health_router import router as health_router
from topic_hub.api.push_router import router as push_router
from topic_hub.config.settings import settings
from topic_hub.core.dispatcher import TopicDispatcher
from topic_hub.core.periodic.periodic_timer import PeriodicTimerCoordinator
from topic_hub.core.push.gateway import PushGateway
from topic_hub.core.registry import HandlerRegistry, load_handlers
from topic_hub.core.subscriber.push_subscriber import PushSubscriber
from topic_hub.core.topic.topic_manager import TopicManager
from topic_hub.dal.push_store import RedisPushStore
from topic_hub.utils.logger import setup_logger

logger = setup_logger(__name__)


def build_state(app: FastAPI, registry: HandlerRegistry, push_store: Optional[RedisPushStore] = None) -> None:
    topics = TopicManager()
    periodic_timer = PeriodicTimerCoordinator()
    gateway = PushGateway(registry, topics)
    store = push_store or RedisPushStore()

    app.state.registry = registry
    app.state.topics = topics
    app.state.periodic_timer = periodic_timer
    app.state.dispatcher = TopicDispatcher(registry, periodic_timer)
    app.state.push_gateway = gateway
    app.state.push_store = store
    app.state.push_subscriber = PushSubscriber(store, gateway)


def create_app(registry: Optional[HandlerRegistry] = None, push_store: Optional[RedisPushStore] = None, *, run_background: bool = True) -> FastAPI:
    if registry is None:
        registry = HandlerRegistry()
        load_handlers(registry, settings.TOPIC_HANDLERS)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if run_background:
            app.state.periodic_timer.start()
            await app.state.push_subscriber.start()
        logger.info("%s started with %d topic handler(s)", settings.APP_NAME, len(registry))

        try:
            yield
        finally:
            logger.info("Starting shutdown procedures...")
            if run_background:
                await app.state.push_subscriber.stop()
                app.state.periodic_timer.shutdown()

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)
    build_state(app, registry, push_store)
    Instrumentator().instrument(app).expose(app)

    # CORS permissive for local use
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(health_router)
    app.include_router(push_router)

    return app
