"""
Shipping Microservice

Responsibilities:
- Shipment CRUD over HTTP
- Dispatch command consumption from Kafka with correlated fulfillment replies
- Best-effort analytics notifications over NATS

One shipment repository is created per application and shared by the HTTP
routes and the dispatch consumer. Everything runs on a single event loop.
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Query, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import ShippingConfig, get_settings
from core.kafka_client import close_client, get_consumer, get_producer
from core.logger import setup_service_logger

from .events.handlers import DispatchCommandConsumer
from .events.publishers import FulfillmentReplyEmitter
from .factory import create_dispatch_handler, create_shipping_service
from .protocols import ShipmentValidationError
from .shipment_repository import InMemoryShipmentRepository
from .shipping_service import ShippingService

logger = logging.getLogger(__name__)


# ==================== Dispatch Consumer Lifecycle ====================

def _on_consumer_exit(task: asyncio.Task) -> None:
    if task.cancelled():
        logger.info("Dispatch command consumer task cancelled")
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Dispatch command consumer halted: {error}", exc_info=error)


async def start_dispatch_consumer(app: FastAPI) -> bool:
    """Connect to Kafka and start the consumption loop as a background task"""
    config: ShippingConfig = app.state.config

    consumer = await asyncio.to_thread(
        get_consumer,
        config.dispatch_command_topic,
        brokers=config.kafka_brokers,
        client_id=config.kafka_client_id,
        group_id=config.kafka_group_id,
    )
    producer = await asyncio.to_thread(get_producer, config.kafka_brokers, config.kafka_client_id)

    if consumer is None or producer is None:
        logger.error(f"{config.service_name} kafka listener failed to start")
        await close_client(consumer, "consumer")
        await close_client(producer, "producer")
        return False

    reply_emitter = FulfillmentReplyEmitter(
        producer,
        topic=config.fulfillment_reply_topic,
        send_timeout=config.kafka_send_timeout_seconds,
    )
    handler = create_dispatch_handler(config, app.state.repository, reply_emitter)
    dispatch_consumer = DispatchCommandConsumer(consumer, handler, poll_timeout_ms=config.kafka_poll_timeout_ms)

    task = asyncio.create_task(dispatch_consumer.run())
    task.add_done_callback(_on_consumer_exit)

    app.state.kafka_consumer = consumer
    app.state.kafka_producer = producer
    app.state.dispatch_consumer = dispatch_consumer
    app.state.consumer_task = task

    logger.info(
        f"{config.service_name} kafka listener started on "
        f"brokers={','.join(config.kafka_brokers)} topic={config.dispatch_command_topic}"
    )
    return True


async def shutdown(app: FastAPI) -> None:
    """Stop consuming, let notifications settle, then disconnect Kafka clients within the settle budget"""
    config: ShippingConfig = app.state.config
    settle = config.shutdown_settle_seconds

    dispatch_consumer = getattr(app.state, "dispatch_consumer", None)
    task = getattr(app.state, "consumer_task", None)
    if dispatch_consumer is not None:
        dispatch_consumer.stop()
    if task is not None and not task.done():
        done, _ = await asyncio.wait({task}, timeout=settle)
        if not done:
            logger.warning("Dispatch command consumer did not stop in time, cancelling")
            task.cancel()

    publisher = app.state.shipping_service.notification_publisher
    if publisher is not None:
        await publisher.drain()

    try:
        await asyncio.wait_for(
            asyncio.gather(
                close_client(getattr(app.state, "kafka_consumer", None), "consumer"),
                close_client(getattr(app.state, "kafka_producer", None), "producer"),
            ),
            timeout=settle,
        )
    except asyncio.TimeoutError:
        logger.warning(f"Kafka clients did not disconnect within {settle}s")

    logger.info(f"{config.service_name} shutdown completed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    config: ShippingConfig = app.state.config

    if config.kafka_enabled:
        await start_dispatch_consumer(app)
    else:
        logger.info("Kafka disabled, dispatch command consumer not started")

    logger.info(f"{config.service_name} listening on http://{config.host}:{config.port}")

    yield

    await shutdown(app)


# ==================== Routes ====================

router = APIRouter()


def get_shipping_service(request: Request) -> ShippingService:
    """Get shipping service instance"""
    return request.app.state.shipping_service


@router.get("/health")
async def health_check(request: Request):
    """Service health check; degraded once the dispatch consumer has halted on an error"""
    dispatch_consumer = getattr(request.app.state, "dispatch_consumer", None)
    task = getattr(request.app.state, "consumer_task", None)
    halted = task is not None and task.done() and not task.cancelled() and task.exception() is not None
    return {
        "status": "degraded" if halted else "healthy",
        "service": request.app.state.config.service_name,
        "shipments": request.app.state.repository.count(),
        "consumer_running": bool(dispatch_consumer and dispatch_consumer.running),
    }


@router.post("/shipments", status_code=status.HTTP_201_CREATED)
async def create_shipment(
    request: Request,
    shipping_service: ShippingService = Depends(get_shipping_service)
):
    """Create a shipment for an order"""
    body = await request.body()
    try:
        payload = json.loads(body) if body.strip() else {}
    except ValueError:
        raise ShipmentValidationError("Invalid request body")

    shipment = await shipping_service.create_shipment(payload)
    return shipment.to_view().model_dump(by_alias=True, mode="json")


@router.get("/shipments")
async def list_shipments(
    order_id: Optional[str] = Query(None, alias="orderId", description="Filter by order ID"),
    shipping_service: ShippingService = Depends(get_shipping_service)
):
    """List shipments, optionally for one order"""
    shipments = await shipping_service.list_shipments(order_id)
    return [s.to_view().model_dump(by_alias=True, mode="json") for s in shipments]


@router.get("/shipments/{shipment_id}")
async def get_shipment(
    shipment_id: str,
    shipping_service: ShippingService = Depends(get_shipping_service)
):
    """Get a shipment; unknown ids resolve to a synthesized in-transit shipment"""
    shipment = await shipping_service.get_shipment(shipment_id)
    return shipment.to_view().model_dump(by_alias=True, mode="json")


@router.post("/shipments/{shipment_id}/cancel")
async def cancel_shipment(
    shipment_id: str,
    shipping_service: ShippingService = Depends(get_shipping_service)
):
    """Cancel a shipment"""
    shipment = await shipping_service.cancel_shipment(shipment_id)
    return shipment.to_view().model_dump(by_alias=True, mode="json")


# ==================== Error Handlers ====================

async def validation_error_handler(request: Request, exc: ShipmentValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # unknown path and unsupported method are both reported as not found
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": "Not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


# ==================== Application ====================

def create_app(
    config: Optional[ShippingConfig] = None,
    repository: Optional[InMemoryShipmentRepository] = None,
    notification_publisher=None,
) -> FastAPI:
    """
    Build the shipping application.

    Args:
        config: Settings (defaults to the environment)
        repository: Shipment store to share with the dispatch consumer
        notification_publisher: Analytics publisher override

    Returns:
        FastAPI app; Kafka is connected when the lifespan starts
    """
    config = config or get_settings()
    setup_service_logger(config.service_name)

    repository = repository or InMemoryShipmentRepository()
    shipping_service = create_shipping_service(
        config,
        repository=repository,
        notification_publisher=notification_publisher,
    )

    app = FastAPI(
        title="Shipping Service",
        description="Shipment lifecycle tracking and fulfillment dispatch bridge",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.repository = repository
    app.state.shipping_service = shipping_service
    app.state.dispatch_consumer = None
    app.state.consumer_task = None
    app.state.kafka_consumer = None
    app.state.kafka_producer = None

    app.include_router(router)
    app.add_exception_handler(ShipmentValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "microservices.shipping_service.main:app",
        host=settings.host,
        port=settings.port,
        log_level="info"
    )


if __name__ == "__main__":
    run()
