"""Services for the document generation system."""

from .claude_client import ClaudeClient, get_claude_client
from .events import EventEmitter
from .generation_client import GenerationClient, CategorizationResult, CALL_PROFILES
from .state_machine import TRANSITIONS, transition
from .orchestrator import PipelineOrchestrator
from .run_store import RunStore, get_run_store
from .ado_client import AzureDevOpsClient, get_ado_client

__all__ = [
    "ClaudeClient",
    "get_claude_client",
    "EventEmitter",
    "GenerationClient",
    "CategorizationResult",
    "CALL_PROFILES",
    "TRANSITIONS",
    "transition",
    "PipelineOrchestrator",
    "RunStore",
    "get_run_store",
    "AzureDevOpsClient",
    "get_ado_client",
]
