"""Remote service connectors."""

from spvm.platform.connectors.sharepoint import (
    ConnectorResponse,
    SharePointConnector,
    describe_status,
)

__all__ = ["ConnectorResponse", "SharePointConnector", "describe_status"]
