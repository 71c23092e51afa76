import os
import multiprocessing

# Base settings
bind = f"0.0.0.0:{os.environ.get('PORT', '5050')}"
workers = int(os.environ.get('WEB_CONCURRENCY', multiprocessing.cpu_count() * 2 + 1))
worker_class = 'uvicorn.workers.UvicornWorker'

# Gateway calls can take a while
timeout = 60
graceful_timeout = 30
keepalive = 5

max_requests = 1000
max_requests_jitter = 50

accesslog = '-'
errorlog = '-'
loglevel = os.environ.get('LOG_LEVEL', 'info')

# Settings are validated once in the master before forking
preload_app = True


def on_starting(server):
    """Called just before the master process is initialized."""
    server.log.info("Starting Zythorix360 API...")


def post_fork(server, worker):
    server.log.info(f"Worker spawned (pid: {worker.pid})")


def worker_int(worker):
    """Called just after a worker exited on SIGINT or SIGQUIT."""
    worker.log.info(f"Worker interrupted (pid: {worker.pid})")
