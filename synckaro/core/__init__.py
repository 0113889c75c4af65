"""Core domain logic: seeding, rollups, connections and the panic button."""

from synckaro.core.aggregation import RollupService, apply_rollup, platform_stats, rollup
from synckaro.core.connections import ConnectionWorkflow, ResultStatus, WorkflowResult
from synckaro.core.panic import PanicHandler, get_panic_handler
from synckaro.core.seed import SeedData, SeedGenerator, SeedLoader, SeedParameters
from synckaro.core.session import Session

__all__ = [
    "ConnectionWorkflow",
    "PanicHandler",
    "ResultStatus",
    "RollupService",
    "SeedData",
    "SeedGenerator",
    "SeedLoader",
    "SeedParameters",
    "Session",
    "WorkflowResult",
    "apply_rollup",
    "get_panic_handler",
    "platform_stats",
    "rollup",
]
