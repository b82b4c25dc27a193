"""
Gunicorn configuration for ClearFund production deployment.

Usage:
    gunicorn clearfund.main:app -c gunicorn.conf.py

PORT and WEB_CONCURRENCY override the bind port and worker count.
"""

import multiprocessing
import os

bind = f"0.0.0.0:{os.getenv('PORT', '8000')}"

# Score updates are short DB transactions; CPU cores * 2 + 1 unless overridden
workers = int(os.getenv("WEB_CONCURRENCY", str(multiprocessing.cpu_count() * 2 + 1)))

# Use Uvicorn's ASGI worker for FastAPI
worker_class = "uvicorn.workers.UvicornWorker"

# Request timeout (seconds)
timeout = 30
graceful_timeout = 20

# Keep-alive connections (seconds)
keepalive = 5

# Logging
accesslog = "-"  # stdout
errorlog = "-"   # stderr
loglevel = os.getenv("LOG_LEVEL", "info")
