from .pipeline import (
    FileReport,
    IngestReport,
    IngestionError,
    IngestionPipeline,
    list_knowledge_files,
)

__all__ = [
    "FileReport",
    "IngestReport",
    "IngestionError",
    "IngestionPipeline",
    "list_knowledge_files",
]
