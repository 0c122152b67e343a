from fastapi import FastAPI, HTTPException
from contextlib import asynccontextmanager
import logging

from config import get_settings
from orchestrator import get_orchestrator
from models import (
    InvokeRequest,
    InvokeResponse,
    SetTokenRequest,
    SetTokenResponse,
    OperationList,
    OperationSummary,
)
from remote_execution import OperationSchemaGenerator, format_result

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Bunnyshell operations service...")
    orchestrator = get_orchestrator()
    await orchestrator.initialize()

    yield

    # Shutdown
    logger.info("Shutting down...")
    await orchestrator.shutdown()


app = FastAPI(
    title="Bunnyshell Operations",
    description="Bunnyshell environment operations for AI assistants",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": "bunnyshell-operations"}


@app.get("/operations", response_model=OperationList)
async def list_operations():
    """List available operations with their parameter schemas."""
    orchestrator = get_orchestrator()
    generator = OperationSchemaGenerator()
    summaries = []
    for definition in orchestrator.registry.list_operations():
        schema = generator.generate_schema(definition)
        summaries.append(OperationSummary(
            name=definition.name,
            description=definition.description,
            backend=definition.backend.value,
            parameters=schema["parameters"],
        ))
    return OperationList(operations=summaries)


@app.post("/operations/{name}", response_model=InvokeResponse)
async def invoke_operation(name: str, request: InvokeRequest):
    """
    Invoke one operation.

    Failures of the operation itself are part of the result; only an
    unknown operation name is reported with an HTTP error status.
    """
    orchestrator = get_orchestrator()
    if not orchestrator.registry.exists(name):
        raise HTTPException(status_code=404, detail=f"Unknown operation: {name}")

    logger.info(f"Received invocation: {name}")
    result = await orchestrator.invoke(
        name,
        request.parameters,
        token=request.token,
        timeout_seconds=request.timeout_seconds,
    )
    return InvokeResponse(result=result, text=format_result(result))


@app.post("/session/token", response_model=SetTokenResponse)
async def set_session_token(request: SetTokenRequest):
    """Remember an API token for the rest of this process's lifetime."""
    get_orchestrator().set_session_token(request.token)
    return SetTokenResponse(
        message=(
            "Bunnyshell API token has been set successfully. You can now use other "
            "Bunnyshell commands without specifying the token again."
        )
    )


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
