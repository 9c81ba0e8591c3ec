"""Repository sync module - GitHub to database synchronization.

Services:
- SyncService: One repository sync (fetch metadata -> fetch commits -> store)
- PollWorker: Periodic incremental sync of one repository
- MonitorSupervisor: Bootstrap, registration and shutdown of all workers
"""

from .enums import OutputFormat, SyncStage, WorkerState
from .results import SyncResult
from .service import SyncService
from .supervisor import MonitorSupervisor
from .worker import PollWorker

__all__ = [
    "MonitorSupervisor",
    "OutputFormat",
    "PollWorker",
    "SyncResult",
    "SyncService",
    "SyncStage",
    "WorkerState",
]
