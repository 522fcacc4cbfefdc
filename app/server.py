"""FastAPI server setup and routes"""
import os
import time
from typing import Optional
from fastapi import FastAPI, Response, HTTPException
from fastapi.responses import HTMLResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST
from config import Config
from collectors.base import DigitalOceanSource
from collectors.digitalocean import CollectionError
from metrics.registry import MetricsRegistry
from middleware.request_logging import RequestLoggingMiddleware
from provider.service import DigitalOceanService
from logging_config import get_logger


logger = get_logger(__name__)


class MetricsServer:
    """FastAPI server exposing DigitalOcean account metrics"""

    def __init__(self, config: Config, source: Optional[DigitalOceanSource] = None):
        self.config = config
        self.app = FastAPI(
            title="DigitalOcean Exporter",
            version=config.service_version,
            docs_url=None,
            redoc_url=None,
            openapi_url=None
        )
        self.registry = MetricsRegistry(config, source or DigitalOceanService.from_config(config))
        self.start_time = time.time()

        if self.config.enable_request_logging:
            self.app.add_middleware(RequestLoggingMiddleware)

        self._setup_routes()
        self._setup_events()

    def _setup_routes(self):
        """Setup FastAPI routes"""

        @self.app.get(self.config.metrics_path, response_class=Response)
        def get_metrics():
            """Scrape the account and serve the Prometheus text format"""
            try:
                content = self.registry.render()
            except CollectionError as e:
                return PlainTextResponse(
                    f"An error has occurred while serving metrics:\n\n{e}\n",
                    status_code=500
                )
            return Response(content, media_type=CONTENT_TYPE_LATEST)

        @self.app.get('/health')
        def health_check():
            """Healthy unless the most recent scrape failed"""
            is_healthy = not self.registry.last_scrape_failed()
            health_data = {
                "status": "healthy" if is_healthy else "unhealthy",
                "total_scrapes": self.registry.scrape_count,
                "scrape_errors": self.registry.scrape_errors,
                "last_error": self.registry.last_error,
            }

            if not is_healthy:
                raise HTTPException(status_code=503, detail=health_data)

            return health_data

        @self.app.get('/status')
        def get_status():
            """Detailed status information"""
            return {
                "service": {
                    "name": self.config.service_name,
                    "version": self.config.service_version,
                    "uptime_seconds": round(time.time() - self.start_time, 1),
                    "hostname": os.uname().nodename
                },
                "scrapes": self.registry.get_status(),
                "config": {
                    "api_url": self.config.digitalocean_api_url,
                    "namespace": self.config.namespace,
                    "metrics_path": self.config.metrics_path,
                    "scrape_error_handling": self.config.scrape_error_handling,
                }
            }

        @self.app.get('/', response_class=HTMLResponse)
        def index():
            """Landing page"""
            return self._generate_html_interface()

    def _setup_events(self):
        """Setup FastAPI startup/shutdown events"""

        @self.app.on_event("startup")
        async def startup_event():
            self.start_time = time.time()
            logger.info(
                "Application startup completed",
                service_name=self.config.service_name,
                metrics_path=self.config.metrics_path,
                metrics=[d.name for d in self.registry.collector.describe_metrics()],
                event_type="server_startup"
            )

        @self.app.on_event("shutdown")
        async def shutdown_event():
            logger.info("Shutting down DigitalOcean exporter", event_type="server_shutdown")
            self.registry.cleanup()

    def _generate_html_interface(self) -> str:
        """Generate HTML landing page"""
        path = self.config.metrics_path
        metrics = ''.join(
            f'<li><strong>{d.name}</strong> - {d.help_text}</li>'
            for d in self.registry.collector.describe_metrics()
        )

        return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <title>DigitalOcean Exporter</title>
            <style>
                body {{ font-family: Arial, sans-serif; margin: 40px; background-color: #f5f5f5; }}
                .container {{ max-width: 960px; margin: 0 auto; background-color: white; padding: 20px; border-radius: 8px; }}
                .endpoint {{ margin: 10px 0; padding: 10px; background-color: #f8f9fa; border-radius: 4px; }}
                .endpoint a {{ text-decoration: none; color: #0066cc; font-weight: bold; }}
            </style>
        </head>
        <body>
            <div class="container">
                <h1>DigitalOcean Exporter</h1>
                <div class="endpoint"><a href="{path}">{path}</a> - Prometheus metrics</div>
                <div class="endpoint"><a href="/health">/health</a> - Health check</div>
                <div class="endpoint"><a href="/status">/status</a> - Status information</div>
                <h2>Metrics:</h2>
                <ul>{metrics}</ul>
            </div>
        </body>
        </html>
        """

    def get_app(self) -> FastAPI:
        """Get the FastAPI application"""
        return self.app
