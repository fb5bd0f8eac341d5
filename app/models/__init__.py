"""Data models for the document generation system."""

from .input import FileCategory, UploadedFile, FileContent
from .document import (
    DocumentTypeId,
    DocumentFormat,
    DocumentOption,
    GenerationRequest,
    GenerationResult,
    GeneratedDoc,
)
from .pipeline import (
    PipelineState,
    PipelineTrigger,
    DocStatus,
    ClarifyingQuestion,
    PipelineRun,
    PipelineEvent,
)
from .work_item import AdoProject, WorkItem, WorkItemSearch, WorkItemImportRequest
from .error import ErrorResponse

__all__ = [
    # Input models
    "FileCategory",
    "UploadedFile",
    "FileContent",
    # Document models
    "DocumentTypeId",
    "DocumentFormat",
    "DocumentOption",
    "GenerationRequest",
    "GenerationResult",
    "GeneratedDoc",
    # Pipeline models
    "PipelineState",
    "PipelineTrigger",
    "DocStatus",
    "ClarifyingQuestion",
    "PipelineRun",
    "PipelineEvent",
    # Work item models
    "AdoProject",
    "WorkItem",
    "WorkItemSearch",
    "WorkItemImportRequest",
    # Error models
    "ErrorResponse",
]
