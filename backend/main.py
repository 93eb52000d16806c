from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from colorama import Fore
import logging

from agent.main import EgressAgent
from .config import CONFIG_PATH, CORS_ORIGINS, LOG_LEVEL
from .routers import egress

# --- Centralized Logging ---
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger("egresscheck")

# --- Global Exception Handler ---
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global Exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"status": "error", "message": "An internal server error occurred."}
    )

@asynccontextmanager
async def lifespan(app: FastAPI):
    # STARTUP
    app.state.agent = EgressAgent(CONFIG_PATH)
    print(f"{Fore.GREEN}[+] Egress check service is online (config: {CONFIG_PATH}).")
    yield
    # SHUTDOWN
    print(f"\n{Fore.YELLOW}[!] Server stopping...")

app = FastAPI(
    title="Egress Check | VPN & Proxy Risk",
    lifespan=lifespan,
    exception_handlers={Exception: global_exception_handler}
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

@app.get("/api/ping")
async def ping():
    return {"status": "pong"}

# Routers
app.include_router(egress.router)
