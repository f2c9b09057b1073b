"""SharePoint versioning manager."""
