"""
SAP Employee Basic Data Adapter - FastAPI application and queue consumer
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel
import uvicorn

from . import __version__
from .settings import Settings
from .utils.logging import setup_logging, get_logger, LoggingContext
from .utils.metrics import metrics
from .utils.correlation import generate_correlation_id
from .sap_client import SAPClient
from .rmq_client import RabbitMQClient
from .workers.employee_sync import BranchResult, EmployeeSyncWorker

logger = get_logger(__name__)


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    status: str
    checks: Dict[str, bool]
    details: Dict[str, str]


class FetchResponse(BaseModel):
    results: List[BranchResult]


async def stop_consumer(consumer_task: Optional[asyncio.Task]) -> None:
    """Cancel the consumer task; a failure it already ended with is logged, not raised"""
    if consumer_task is None:
        return

    if not consumer_task.done():
        consumer_task.cancel()

    try:
        await consumer_task
    except asyncio.CancelledError:
        pass
    except Exception as e:
        logger.error("Consumer task failed", error=str(e), error_type=type(e).__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build clients and worker, run the consumer for the app's lifetime"""
    settings: Settings = app.state.settings

    logger.info("Starting SAP Employee Basic Data Adapter", version=__version__)

    sap_client = SAPClient(
        base_url=settings.sap_base_url,
        api_key=settings.sap_api_key,
        timeout=settings.sap_request_timeout_seconds,
    )
    rmq_client = RabbitMQClient(
        url=settings.rmq_url,
        queue_from=settings.rmq_queue_from,
        queue_to=settings.rmq_queue_to,
        prefetch_count=settings.rmq_prefetch_count,
        connect_attempts=settings.rmq_connect_attempts,
    )
    worker = EmployeeSyncWorker(
        sap_client,
        rmq_client,
        output_queue=settings.rmq_queue_to[0],
        requeue_on_failure=settings.rmq_requeue_on_failure,
    )
    consumer_task: Optional[asyncio.Task] = None

    try:
        await sap_client.connect()
        await rmq_client.connect()

        app.state.sap_client = sap_client
        app.state.rmq_client = rmq_client
        app.state.worker = worker

        if settings.consumer_enabled:
            consumer_task = asyncio.create_task(worker.start())
            app.state.consumer_task = consumer_task

        logger.info("SAP Employee Basic Data Adapter started successfully")

        yield

    except Exception as e:
        logger.error("Failed to start application", error=str(e))
        raise
    finally:
        logger.info("Shutting down SAP Employee Basic Data Adapter")

        await worker.stop()
        await stop_consumer(consumer_task)

        await rmq_client.close()
        await sap_client.close()

        logger.info("SAP Employee Basic Data Adapter stopped")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Application factory"""
    settings = settings or Settings()
    setup_logging(settings)

    app = FastAPI(
        title="SAP Employee Basic Data Adapter",
        description="Reads SAP employee master data on request and republishes it to RabbitMQ",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if not settings.testing else None,
        redoc_url="/redoc" if not settings.testing else None,
    )
    app.state.settings = settings
    app.state.sap_client = None
    app.state.rmq_client = None
    app.state.worker = None
    app.state.consumer_task = None

    @app.middleware("http")
    async def add_correlation_middleware(request: Request, call_next):
        """Add correlation ID to every request"""
        correlation_id = generate_correlation_id()

        with LoggingContext(correlation_id=correlation_id):
            response = await call_next(request)
            response.headers["X-Correlation-ID"] = correlation_id
            return response

    @app.get("/healthz", response_model=HealthResponse, tags=["monitoring"])
    async def health_check():
        """Liveness check - service is running"""
        return HealthResponse(
            status="healthy",
            service="sap-employee-basic-data-adapter",
            version=__version__,
        )

    @app.get("/readyz", response_model=ReadinessResponse, tags=["monitoring"])
    async def readiness_check(request: Request):
        """Readiness check - broker connected, SAP reachable and consumer running"""
        checks = {}
        details = {}

        rmq_client = request.app.state.rmq_client
        if rmq_client:
            try:
                checks["rabbitmq"] = await rmq_client.health_check()
                details["rabbitmq"] = "Connected" if checks["rabbitmq"] else "Connection closed"
            except Exception as e:
                checks["rabbitmq"] = False
                details["rabbitmq"] = f"Error: {str(e)}"
        else:
            checks["rabbitmq"] = False
            details["rabbitmq"] = "Client not initialized"

        sap_client = request.app.state.sap_client
        if sap_client:
            try:
                checks["sap"] = await sap_client.health_check()
                details["sap"] = "Reachable" if checks["sap"] else "Connection failed"
            except Exception as e:
                checks["sap"] = False
                details["sap"] = f"Error: {str(e)}"
        else:
            checks["sap"] = False
            details["sap"] = "Client not initialized"

        consumer_task = request.app.state.consumer_task
        if consumer_task is not None:
            checks["consumer"] = not consumer_task.done()
            details["consumer"] = "Running" if checks["consumer"] else "Stopped"

        status = "ready" if all(checks.values()) else "not_ready"

        return ReadinessResponse(status=status, checks=checks, details=details)

    @app.get("/metrics", tags=["monitoring"])
    async def get_metrics():
        """Prometheus metrics endpoint"""
        return PlainTextResponse(
            content=metrics.get_metrics(),
            media_type=metrics.get_content_type(),
        )

    @app.post("/admin/fetch", response_model=FetchResponse, tags=["admin"])
    async def fetch_employee_data(request: Request, payload: Dict[str, Any] = Body(...)):
        """Run the fetch/publish flow for a payload shaped like an inbound message"""
        worker: Optional[EmployeeSyncWorker] = request.app.state.worker
        if not worker:
            raise HTTPException(status_code=503, detail="Employee sync worker not available")

        logger.info("Manual fetch requested", payload_keys=list(payload.keys()))

        try:
            results = await worker.process_payload(payload)
        except Exception as e:
            logger.error("Manual fetch failed", error=str(e))
            raise HTTPException(status_code=500, detail=f"Fetch error: {str(e)}")

        return FetchResponse(results=results)

    return app


def main():
    """Main entry point"""
    settings = Settings()
    uvicorn.run(
        "sap_employee_adapter.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.http_port,
        log_config=None,
        access_log=False,
    )


if __name__ == "__main__":
    main()
