"""
FastAPI server for Podboard.

This module provides the web server for Podboard: the JSON API the dashboard
polls, a health endpoint, the index page, and the mapping from Podboard
errors to HTTP status codes.

Key Components:
- create_app: Build the FastAPI application around a ClusterResolver
- error_status: Map a PodboardError to an HTTP status code
- run_server: Main server startup and configuration

Routes:
- GET /health: Liveness probe
- GET /api/clusters: Clusters in the kubeconfig, or inCluster=true
- GET /api/namespaces?cluster=: Namespace names
- GET /api/pods?cluster=&namespace=&labelSelector=: Pod records
- DELETE /api/pods/{namespace}/{name}?cluster=: Delete a pod

Every request resolves its own cluster client; nothing is shared between
requests.

Example:
    ```python
    await run_server(ServerConfig(host="0.0.0.0", port=9999))
    ```
"""

import logging
import os
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse

from .constants import DEFAULT_LOG_LEVEL, DEFAULT_NAMESPACE, ENV_LOG_LEVEL
from .exceptions import (
    ApiError, ClientConstructionError, ClusterNotFoundError, ConfigUnavailableError,
    CredentialNotFoundError, PodboardError
)
from .kube import ClusterClient, ClusterResolver
from .models import ServerConfig
from .pods import delete_pod, list_namespaces, list_pods, run_blocking

# Logging setup (level via PODBOARD_LOG_LEVEL env or default INFO)
logging.basicConfig(
    level=getattr(logging, os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper(), logging.INFO),
    format='[%(asctime)s] %(levelname)s %(message)s'
)
log = logging.getLogger('podboard')

# Load HTML from file
try:
    INDEX_HTML = (Path(__file__).parent / 'index.html').read_text(encoding='utf-8')
except FileNotFoundError:
    INDEX_HTML = """<!DOCTYPE html><html><body><h2>podboard - Kubernetes Pod Dashboard</h2><p>Embedded index.html missing in package. The JSON API is available under /api.</p></body></html>"""


def error_status(exc: PodboardError) -> int:
    """Map a Podboard error to the HTTP status returned to the dashboard."""
    if isinstance(exc, (ClusterNotFoundError, CredentialNotFoundError)):
        return 404
    if isinstance(exc, ConfigUnavailableError):
        return 503
    if isinstance(exc, ApiError):
        if exc.cancelled:
            return 504
        if exc.status and 400 <= exc.status < 600:
            return exc.status
        return 502
    if isinstance(exc, ClientConstructionError):
        return 502
    return 500


def create_app(resolver: ClusterResolver, request_timeout: Optional[float] = None) -> FastAPI:
    """
    Build the Podboard application.

    Args:
        resolver: Resolver used to build a cluster client for every request
        request_timeout: Seconds to wait on each kubeconfig read, client build and API call

    Returns:
        FastAPI: Application with all routes registered
    """
    app = FastAPI(title="podboard")

    @app.exception_handler(PodboardError)
    async def podboard_error_handler(request: Request, exc: PodboardError):
        status = error_status(exc)
        log.log(logging.ERROR if status >= 500 else logging.WARNING,
                f"[server] {request.method} {request.url.path} -> {status}: {exc}")
        return JSONResponse(status_code=status, content={'error': str(exc)})

    async def get_client(cluster: str) -> ClusterClient:
        # reads the kubeconfig from disk and may run exec credential plugins
        return await run_blocking("resolve cluster client", resolver.client_for, cluster, timeout=request_timeout)

    @app.get("/health")
    async def health():
        return {'status': 'healthy'}

    @app.get("/")
    async def index():
        return HTMLResponse(INDEX_HTML)

    @app.get("/api/clusters")
    async def get_clusters():
        if resolver.is_in_cluster():
            return {'inCluster': True, 'clusters': []}
        clusters = await run_blocking("list clusters", resolver.list_clusters, timeout=request_timeout)
        return {'inCluster': False, 'clusters': [c.to_dict() for c in clusters]}

    @app.get("/api/namespaces")
    async def get_namespaces(cluster: str = ""):
        kube = await get_client(cluster)
        try:
            return {'namespaces': await list_namespaces(kube, timeout=request_timeout)}
        finally:
            kube.close()

    @app.get("/api/pods")
    async def get_pods(
        cluster: str = "",
        namespace: str = DEFAULT_NAMESPACE,
        label_selector: str = Query("", alias="labelSelector"),
    ):
        kube = await get_client(cluster)
        try:
            pods = await list_pods(kube, namespace, label_selector, timeout=request_timeout)
        finally:
            kube.close()
        return {'pods': [p.to_dict() for p in pods]}

    @app.delete("/api/pods/{namespace}/{name}")
    async def remove_pod(namespace: str, name: str, cluster: str = ""):
        kube = await get_client(cluster)
        try:
            await delete_pod(kube, namespace, name, timeout=request_timeout)
        finally:
            kube.close()
        return {'message': 'Pod deleted successfully'}

    return app


async def run_server(server_config: ServerConfig) -> None:
    """Run the Podboard server with the given configuration."""
    logging.getLogger().setLevel(server_config.log_level)
    log.setLevel(server_config.log_level)
    if server_config.domain:
        log.info(f"[server] domain={server_config.domain}")

    resolver = ClusterResolver(
        kubeconfig=server_config.kubeconfig,
        request_timeout=server_config.request_timeout,
    )
    app = create_app(resolver, request_timeout=server_config.request_timeout)

    log.info(f"[server] starting address={server_config.host}:{server_config.port}")

    import uvicorn
    config = uvicorn.Config(app, host=server_config.host, port=server_config.port,
                            log_level=server_config.uvicorn_log_level)
    server = uvicorn.Server(config)
    await server.serve()
