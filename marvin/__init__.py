from marvin.config.settings import Settings, get_settings
from marvin.core.exceptions import ClientConfigError, MarvinBaseError, MarvinError
from marvin.execution.executor import RequestExecutor, parse_json, parse_retry_after, parse_text
from marvin.execution.http_client import HttpxTransport, Transport, TransportRequest
from marvin.services.client import MarvinClient
from marvin.services.organization import OrganizationApi
from marvin.services.tasks import TasksApi
from marvin.services.time_tracking import TimeTrackingApi

__all__ = [
    "ClientConfigError",
    "HttpxTransport",
    "MarvinBaseError",
    "MarvinClient",
    "MarvinError",
    "OrganizationApi",
    "RequestExecutor",
    "Settings",
    "TasksApi",
    "TimeTrackingApi",
    "Transport",
    "TransportRequest",
    "get_settings",
    "parse_json",
    "parse_retry_after",
    "parse_text",
]
