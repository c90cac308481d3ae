# main.py
import uvicorn
from syncwatch.adapters.aiohttp_client_adapter import AioHttpClientAdapter
from syncwatch.adapters.airbyte_job_status_client import AirbyteJobStatusClient
from syncwatch.adapters.logging_adapter import LoggingAdapter
from syncwatch.adapters.metrics_inmemory import InMemoryMetricsAdapter
from syncwatch.adapters.retry_tenacity import TenacityRetryAdapter
from syncwatch.adapters.web.fastapi import create_app
from syncwatch.core.config import WatchConfig
from syncwatch.core.logging_config import configure_logging
from syncwatch.core.managers.job_watcher import JobWatcher
from syncwatch.core.settings import app_settings, logger


# main lives at the outermost layer (not in core)
# Instantiates all the concrete adapters
# Wires dependencies together
# Starts the application

def main():
    # Central logging configuration BEFORE anything logs so uvicorn adopts level/format
    configure_logging(app_settings.SYNCWATCH_LOG_LEVEL)
    app_settings.print_settings(logger)

    http_client = AioHttpClientAdapter(default_timeout=app_settings.SYNCWATCH_HTTP_TIMEOUT)
    metrics = InMemoryMetricsAdapter()
    watch_config = WatchConfig.from_app_settings(app_settings)
    job_log = LoggingAdapter("syncwatch.job", app_settings.SYNCWATCH_LOG_LEVEL)

    def secret(value):
        return value.get_secret_value() if value is not None else None

    # Factory passed to web adapter keeps composition here
    def watcher_factory(client):
        status_client = AirbyteJobStatusClient(
            client,
            str(app_settings.SYNCWATCH_API_URL),
            username=app_settings.SYNCWATCH_API_USERNAME,
            password=secret(app_settings.SYNCWATCH_API_PASSWORD),
            token=secret(app_settings.SYNCWATCH_API_TOKEN),
            request_timeout=app_settings.SYNCWATCH_HTTP_TIMEOUT,
            retry_port=TenacityRetryAdapter(wait_initial=0.2, wait_max=2.0),
            max_retries=app_settings.SYNCWATCH_FETCH_MAX_RETRIES,
        )
        return JobWatcher(status_client, metrics, config=watch_config, job_log=job_log)

    app = create_app(http_client=http_client, watcher_factory=watcher_factory, metrics=metrics)

    # Let uvicorn inherit existing logging (separate sinks & correlation ids)
    uvicorn.run(
        app,
        host=app_settings.SYNCWATCH_SERVER_HOST,
        port=app_settings.SYNCWATCH_SERVER_PORT,
        log_config=None,
        log_level=str(app_settings.SYNCWATCH_LOG_LEVEL).lower(),
    )


if __name__ == "__main__":
    main()
