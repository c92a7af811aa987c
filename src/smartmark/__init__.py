"""SmartMark - AI bookmark classification and migration core.

Classifies a bookmark into a hierarchical folder path by querying a pluggable
LLM backend, and re-organizes already-stored bookmarks out of generic
top-level folders through a propose/approve/execute workflow:
- Taxonomy caching of the user's folder tree
- Token-budget-aware prompt context
- Provider adapters (Gemini, LM Studio, Ollama, OpenAI, OpenRouter, Claude)
- Defensive validation of model output

Python Version: 3.10+ required
"""

# Logging Configuration - configure before other imports
from .logging_config import StructuredFormatter, configure_logging

# Initialize structured logging on module import
configure_logging()

from .classifier import ClassificationOrchestrator
from .config import SmartMarkConfig, get_config, reset_config
from .errors import (
    APIError,
    BookmarkError,
    ConfigurationError,
    ErrorSeverity,
    NetworkError,
    OperationTimeoutError,
    SmartMarkError,
    ValidationError,
    get_error_severity,
)
from .migration import (
    GENERIC_TOP_LEVEL_FOLDERS,
    MigrationPlanner,
    MigrationState,
    MigrationWorkflowResult,
)
from .models import (
    FolderPath,
    Metadata,
    MigrationProposal,
    MigrationResult,
    ProviderDescriptor,
    ProviderName,
    Suggestion,
)
from .providers import BaseProvider, create_current_provider, create_provider
from .recovery import RecoveryStrategy, execute_with_recovery, with_deadline
from .saver import BookmarkSaver, classify_with_fallback
from .store import BookmarkNode, BookmarkStore, InMemoryBookmarkStore
from .taxonomy import TaxonomyCache
from .tokens import TokenBudgetOptimizer

__version__ = "1.0.0"

__all__ = [
    "GENERIC_TOP_LEVEL_FOLDERS",
    "APIError",
    "BaseProvider",
    "BookmarkError",
    "BookmarkNode",
    "BookmarkSaver",
    "BookmarkStore",
    "ClassificationOrchestrator",
    "ConfigurationError",
    "ErrorSeverity",
    "FolderPath",
    "InMemoryBookmarkStore",
    "Metadata",
    "MigrationPlanner",
    "MigrationProposal",
    "MigrationResult",
    "MigrationState",
    "MigrationWorkflowResult",
    "NetworkError",
    "OperationTimeoutError",
    "ProviderDescriptor",
    "ProviderName",
    "RecoveryStrategy",
    "SmartMarkConfig",
    "SmartMarkError",
    "StructuredFormatter",
    "Suggestion",
    "TaxonomyCache",
    "TokenBudgetOptimizer",
    "ValidationError",
    "classify_with_fallback",
    "configure_logging",
    "create_current_provider",
    "create_provider",
    "execute_with_recovery",
    "get_config",
    "get_error_severity",
    "reset_config",
    "with_deadline",
]
