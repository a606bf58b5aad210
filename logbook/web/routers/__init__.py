"""Router exports."""

# 日本語: 各機能ルーターを集約して application.py から一括 import 可能にする / English: Re-export feature routers for centralized app wiring
from .log_router import router as log_router
from .report_router import router as report_router
from .session_router import router as session_router
from .settings_router import router as settings_router
from .task_router import router as task_router
from .week_router import router as week_router

__all__ = [
    "task_router",
    "week_router",
    "log_router",
    "report_router",
    "settings_router",
    "session_router",
]
