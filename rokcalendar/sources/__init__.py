"""Template sources: the remote catalog fetcher, its adapter and the template store."""

from .adapter import templates_from_payload, to_template
from .remote_fetcher import (
    CatalogFetchError,
    CatalogHTTPError,
    CatalogNetworkError,
    CatalogPayloadError,
    CatalogServerError,
    CatalogTimeoutError,
    RemoteCatalogFetcher,
)
from .template_store import HorizonMode, HorizonPolicy, StoreStatus, TemplateStore

__all__ = [
    "CatalogFetchError",
    "CatalogHTTPError",
    "CatalogNetworkError",
    "CatalogPayloadError",
    "CatalogServerError",
    "CatalogTimeoutError",
    "HorizonMode",
    "HorizonPolicy",
    "RemoteCatalogFetcher",
    "StoreStatus",
    "TemplateStore",
    "templates_from_payload",
    "to_template",
]
