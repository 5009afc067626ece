"""TFS Assets — extract tenant configuration from TFS / Azure DevOps repositories."""

__version__ = "0.4.0"
