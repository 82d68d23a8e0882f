from .admin import AdminReportPipeline
from .client import ClientReportPipeline

__all__ = ["AdminReportPipeline", "ClientReportPipeline"]
