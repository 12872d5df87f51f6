"""Backend package providing the REST API for business expense tracking."""

__all__ = [
    "database",
    "models",
    "schemas",
    "crud",
    "sample_data",
    "server",
]
