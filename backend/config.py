import os

from dotenv import load_dotenv

load_dotenv()

# Agent JSON config consumed by EgressAgent
CONFIG_PATH = os.getenv("EGRESS_CONFIG_PATH", "core/config.json")

CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
HOST = os.getenv("EGRESS_HOST", "127.0.0.1")
PORT = int(os.getenv("EGRESS_PORT", "8000"))
LOG_LEVEL = os.getenv("EGRESS_LOG_LEVEL", "INFO").upper()
