import os

# Bind & workers
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
threads = int(os.getenv("GUNICORN_THREADS", "4"))  # engine and redis pools are thread-safe
timeout = 60
graceful_timeout = 30
keepalive = 5

# App entrypoint
wsgi_app = "todo_api:create_app()"

# Logs to stdout/stderr; the app emits JSON access lines itself
accesslog = None
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# Trust proxy headers (ProxyFix handles them inside the app)
forwarded_allow_ips = "*"
proxy_protocol = False
