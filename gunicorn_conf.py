import os

# A single worker keeps topic membership and periodic timers in one process
bind = os.getenv("BIND", "0.0.0.0:8080")
workers = int(os.getenv("WORKERS", 1))
worker_class = "uvicorn.workers.UvicornWorker"

# Concurrency and performance
worker_connections = int(os.getenv("WORKER_CONNECTIONS", 1000))

# Timeouts
timeout = int(os.getenv("TIMEOUT", 30))
graceful_timeout = int(os.getenv("GRACEFUL_TIMEOUT", 30))
keepalive = int(os.getenv("KEEPALIVE", 5))

# Logging
accesslog = "-"   # stdout
errorlog = "-"    # stderr
loglevel = os.getenv("LOG_LEVEL", "info")

forwarded_allow_ips = "*"
proxy_allow_ips = "*"


def on_starting(server):
    server.log.info(f"Starting Gunicorn with {workers} worker(s)")


def when_ready(server):
    server.log.info("Gunicorn workers are ready to serve requests")


def worker_exit(server, worker):
    server.log.info(f"Worker {worker.pid} exited")
