from .pool_job import PoolMonitorJob, TickResult
from .reset_job import DailyResetJob
from .alpha_job import AlphaMonitorJob
from .scheduler import DailyAt, Every, JobScheduler
from .service import MonitorService

__all__ = [
    "PoolMonitorJob",
    "TickResult",
    "DailyResetJob",
    "AlphaMonitorJob",
    "DailyAt",
    "Every",
    "JobScheduler",
    "MonitorService",
]
