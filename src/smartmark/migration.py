"""Migration of bookmarks out of generic top-level folders.

Two-phase workflow:

    IDLE -> PROPOSING -> REVIEWING -> EXECUTING -> COMPLETE
                             |
                             +-> CANCELLED
    (a store failure while proposing -> ERROR)

Proposals are generated by re-classifying bookmarks that sit directly in a
generic single-level folder ("AI", "Tech", "Reading", ...). Approved moves are
executed sequentially; one failed move never aborts the batch.
"""

import inspect
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .errors import SmartMarkError
from .metrics import record_migration_move, record_proposals
from .models import FolderPath, Metadata, MigrationProposal, MigrationResult
from .store import (
    BOOKMARKS_BAR_ID,
    ROOT_ID,
    BookmarkNode,
    BookmarkStore,
    find_or_create_folder,
    is_root_container,
)

logger = logging.getLogger("smartmark.migration")

__all__ = [
    "GENERIC_TOP_LEVEL_FOLDERS",
    "MigrationPlanner",
    "MigrationState",
    "MigrationStateError",
    "MigrationWorkflowResult",
    "collect_bookmarks",
    "is_generic_folder",
]

# Common generic top-level folders that benefit from re-classification
GENERIC_TOP_LEVEL_FOLDERS = frozenset(
    name.lower()
    for name in (
        "AI", "Tech", "Programming", "Software", "Development", "Code",
        "News", "Articles", "Reading", "To Read", "Bookmarks",
        "Personal", "Work", "Office", "Business", "Projects", "Tasks",
        "Shopping", "Travel", "Recipes", "Food", "Health", "Fitness",
        "Finance", "Money", "Investing", "Education", "Learning", "Courses",
        "Entertainment", "Media", "Videos", "Music", "Games", "Fun",
        "Sports", "Hobbies", "Interests", "General", "Miscellaneous", "Other",
        "Reference", "Resources", "Tools", "Utilities", "Archive", "Old",
    )
)


def is_generic_folder(name: str) -> bool:
    return (name or "").strip().lower() in GENERIC_TOP_LEVEL_FOLDERS


class MigrationState(str, Enum):
    """Migration workflow states."""

    IDLE = "idle"
    PROPOSING = "proposing"
    REVIEWING = "reviewing"
    EXECUTING = "executing"
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    ERROR = "error"


_BUSY_STATES = {MigrationState.PROPOSING, MigrationState.EXECUTING}


class MigrationStateError(SmartMarkError):
    """Operation not allowed in the planner's current state."""

    default_code = "MIGRATION_STATE_ERROR"


@dataclass
class MigrationWorkflowResult:
    """Summary of a full propose/review/execute run."""

    state: MigrationState
    proposals: int = 0
    approved: int = 0
    successful: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    message: str = ""


def collect_bookmarks(tree: Iterable[BookmarkNode]) -> list[tuple[BookmarkNode, str]]:
    """Flatten a tree into (bookmark, folder path) pairs, depth-first.

    The unnamed root and first-level root containers are not part of the
    path; a bookmark directly inside a root container has path "".
    """
    found: list[tuple[BookmarkNode, str]] = []

    def traverse(nodes: Iterable[BookmarkNode], current: str) -> None:
        for node in nodes:
            if not node.is_folder:
                found.append((node, current))
                continue
            title = (node.title or "").strip()
            if node.id == ROOT_ID or not title or (
                not current and is_root_container(title)
            ):
                traverse(node.children, current)
                continue
            traverse(node.children, f"{current}/{title}" if current else title)

    traverse(tree or [], "")
    return found


class MigrationPlanner:
    """Proposes and executes moves of bookmarks into more specific folders.

    Attributes:
        store: Item store
        orchestrator: ClassificationOrchestrator (anything with classify())
        cache: Optional TaxonomyCache invalidated when folders are created
        state: Current MigrationState
        proposals: Proposals from the last propose_moves() call
    """

    def __init__(
        self,
        store: BookmarkStore,
        orchestrator: Any,
        cache: Optional[Any] = None,
        start_parent_id: str = BOOKMARKS_BAR_ID,
    ):
        self.store = store
        self.orchestrator = orchestrator
        self.cache = cache if cache is not None else getattr(orchestrator, "cache", None)
        self.start_parent_id = start_parent_id
        self.state = MigrationState.IDLE
        self.proposals: list[MigrationProposal] = []

    def _ensure_not_busy(self, operation: str) -> None:
        if self.state in _BUSY_STATES:
            raise MigrationStateError(
                f"Cannot {operation} while migration is {self.state.value}",
                details={"state": self.state.value, "operation": operation},
            )

    async def propose_moves(self) -> list[MigrationProposal]:
        """Re-classify bookmarks in generic single-level folders.

        Returns:
            Proposals, one per bookmark whose top suggestion is an improvement

        Raises:
            MigrationStateError: If a run is already in progress
            Exception: Whatever the store raises when reading the tree
        """
        self._ensure_not_busy("propose moves")
        self.state = MigrationState.PROPOSING
        self.proposals = []
        logger.info("migration_propose_started")

        # Any failed exit, cancellation included, ends in ERROR
        try:
            try:
                tree = await self.store.get_tree()
            except Exception as e:
                logger.error("migration_tree_fetch_failed", extra={"error": str(e)})
                raise

            bookmarks = collect_bookmarks(tree)
            candidates = 0
            for node, current_path in bookmarks:
                segments = [part for part in current_path.split("/") if part.strip()]
                if len(segments) != 1 or not is_generic_folder(segments[0]):
                    continue
                candidates += 1
                proposal = await self._propose_for(node, segments[0])
                if proposal is not None:
                    self.proposals.append(proposal)
        except BaseException:
            self.state = MigrationState.ERROR
            raise

        record_proposals(len(self.proposals))
        self.state = (
            MigrationState.REVIEWING if self.proposals else MigrationState.COMPLETE
        )
        logger.info(
            "migration_propose_complete",
            extra={
                "bookmarks": len(bookmarks),
                "candidates": candidates,
                "proposals": len(self.proposals),
            },
        )
        return list(self.proposals)

    async def _propose_for(
        self, node: BookmarkNode, current_folder: str
    ) -> Optional[MigrationProposal]:
        metadata = Metadata.from_bookmark(
            node.title,
            node.url or "",
            main_content=f"Existing folder: {current_folder}",
        )
        try:
            suggestions = await self.orchestrator.classify(metadata)
        except Exception as e:
            logger.error(
                "migration_reclassify_failed",
                extra={"bookmark_id": node.id, "error": str(e)},
            )
            return None

        if not suggestions:
            return None

        top = suggestions[0]
        suggested = top.folder_path
        if str(suggested).lower() == current_folder.lower() or (
            suggested.depth <= 1 and is_generic_folder(suggested.root)
        ):
            logger.debug(
                "migration_suggestion_not_better",
                extra={"bookmark_id": node.id, "suggested": str(suggested)},
            )
            return None

        logger.info(
            "migration_move_proposed",
            extra={
                "bookmark_id": node.id,
                "from": current_folder,
                "to": str(suggested),
                "confidence": top.confidence,
            },
        )
        return MigrationProposal(
            item_id=node.id,
            title=node.title,
            url=node.url or "",
            original_path=FolderPath((current_folder,)),
            suggested_path=suggested,
            confidence=top.confidence,
        )

    def cancel(self) -> None:
        """Abandon the proposals under review."""
        if self.state is not MigrationState.REVIEWING:
            raise MigrationStateError(
                f"Cannot cancel while migration is {self.state.value}",
                details={"state": self.state.value, "operation": "cancel"},
            )
        self.state = MigrationState.CANCELLED
        logger.info("migration_cancelled", extra={"proposals": len(self.proposals)})

    async def execute_migration(
        self, approved: Iterable[MigrationProposal]
    ) -> MigrationResult:
        """Move each approved bookmark, one at a time.

        Resolves or creates the destination folder, then moves the item. A
        failure is recorded and processing continues with the next move.

        Args:
            approved: Approved proposals

        Returns:
            MigrationResult with successful/failed counts and messages
        """
        self._ensure_not_busy("execute migration")
        moves = list(approved)
        self.state = MigrationState.EXECUTING
        result = MigrationResult()
        logger.info("migration_execute_started", extra={"moves": len(moves)})

        try:
            for move in moves:
                try:
                    folder_id = await find_or_create_folder(
                        self.store,
                        move.suggested_path,
                        self.start_parent_id,
                        cache=self.cache,
                    )
                    await self.store.move(move.item_id, folder_id)
                except Exception as e:
                    message = e.message if isinstance(e, SmartMarkError) else str(e)
                    error_message = f'Failed to move "{move.title}": {message}'
                    result.failed += 1
                    result.errors.append(error_message)
                    record_migration_move(False)
                    logger.error(
                        "migration_move_failed",
                        extra={"bookmark_id": move.item_id, "error": message},
                    )
                    continue

                result.successful += 1
                record_migration_move(True)
                logger.info(
                    "migration_move_complete",
                    extra={"bookmark_id": move.item_id, "to": str(move.suggested_path)},
                )
        except BaseException:
            self.state = MigrationState.ERROR
            raise

        self.state = MigrationState.COMPLETE
        logger.info(
            "migration_execute_complete",
            extra={"successful": result.successful, "failed": result.failed},
        )
        return result

    async def run_workflow(
        self, review: Callable[[list[MigrationProposal]], Any]
    ) -> MigrationWorkflowResult:
        """Propose, hand proposals to review, then execute or cancel.

        Args:
            review: Sync or async callable returning the approved subset

        Returns:
            MigrationWorkflowResult; store failures are reported with state
            ERROR rather than raised
        """
        try:
            proposals = await self.propose_moves()
        except MigrationStateError:
            raise
        except Exception as e:
            return MigrationWorkflowResult(
                state=MigrationState.ERROR,
                errors=[str(e)],
                message="Migration workflow encountered an error.",
            )

        if not proposals:
            return MigrationWorkflowResult(
                state=MigrationState.COMPLETE,
                message="No bookmarks need migration to hierarchical folders.",
            )

        approved = review(list(proposals))
        if inspect.isawaitable(approved):
            approved = await approved
        approved = list(approved or [])

        if not approved:
            self.cancel()
            return MigrationWorkflowResult(
                state=MigrationState.CANCELLED,
                proposals=len(proposals),
                message="Migration cancelled by user.",
            )

        outcome = await self.execute_migration(approved)
        return MigrationWorkflowResult(
            state=self.state,
            proposals=len(proposals),
            approved=len(approved),
            successful=outcome.successful,
            failed=outcome.failed,
            errors=list(outcome.errors),
            message=(
                f"Migration complete. {outcome.successful} successful, "
                f"{outcome.failed} failed."
            ),
        )
