"""mirage: every URL is a page the model writes on the spot."""

from .config import MirageConfig, load_config
from .models import InjectionConfig, PageResponse, RequestContext
from .pipeline import RequestPipeline

__version__ = "1.0.0"

__all__ = [
    "InjectionConfig",
    "MirageConfig",
    "PageResponse",
    "RequestContext",
    "RequestPipeline",
    "load_config",
]
