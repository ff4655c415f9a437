# config.py
import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

DATA_DIR = os.environ.get("DATA_DIR", os.path.join(BASE_DIR, "data"))
ASSETS_DIR = os.environ.get("ASSETS_DIR", os.path.join(BASE_DIR, "assets"))

# "json" (documentos en DATA_DIR) o "sqlite" (DB_NAME)
STORE_BACKEND = os.environ.get("STORE_BACKEND", "json")
DB_NAME = os.environ.get("DB_NAME", os.path.join(DATA_DIR, "pos.db"))
DB_TIMEOUT = float(os.environ.get("DB_TIMEOUT", "5"))

# Segundos máximos de espera por el lock de una venta
TRANSACTION_TIMEOUT = float(os.environ.get("TRANSACTION_TIMEOUT", "10"))

CACHE_TYPE = os.environ.get("CACHE_TYPE", "SimpleCache")
CACHE_DEFAULT_TIMEOUT = int(os.environ.get("CACHE_DEFAULT_TIMEOUT", "300"))
CACHE_HOST = os.environ.get("CACHE_HOST")
CACHE_PORT = os.environ.get("CACHE_PORT", "6379")
CACHE_DB = os.environ.get("CACHE_DB", "0")

CORS_ORIGIN = os.environ.get("CORS_ORIGIN", "*")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "3000"))
