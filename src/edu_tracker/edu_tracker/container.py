from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .admin.service import AdminGate
from .attendance.service import AttendanceStateManager
from .core import constants
from .insights.service import InsightsService, build_llm
from .reports.service import ReportService
from .runtime.loop import LoopRunner
from .storage.json_store import JsonFileStore
from .sync.client import JsonBinClient
from .sync.repository import BlobStore
from .sync.service import CloudSyncService


@dataclass(frozen=True)
class Container:
    runner: LoopRunner
    store: JsonFileStore

    state: AttendanceStateManager
    blob_client: BlobStore

    sync_service: CloudSyncService
    admin_gate: AdminGate
    insights_service: InsightsService
    report_service: ReportService

    def start(self) -> None:
        """Start the loop, load local state, then silently reconnect the bin."""
        self.runner.start()
        self.runner.call(self.state.load)
        self.runner.run(self.sync_service.start())

    def shutdown(self) -> None:
        if not self.runner.running:
            return
        self.runner.run(self.sync_service.stop())
        self.runner.run(self.blob_client.close())
        self.runner.stop()


def build_container(*, app_config: Mapping[str, Any], blob_client: Optional[BlobStore] = None) -> Container:
    runner = LoopRunner()
    store = JsonFileStore(app_config.get("DATA_DIR", "data"))

    state = AttendanceStateManager(store)
    client = blob_client or JsonBinClient(
        app_config.get("JSONBIN_BASE_URL", constants.JSONBIN_BASE_URL),
        timeout=float(app_config.get("REQUEST_TIMEOUT_SECONDS", constants.DEFAULT_REQUEST_TIMEOUT_SECONDS)),
    )

    sync_service = CloudSyncService(
        state,
        client,
        store,
        push_debounce=float(app_config.get("PUSH_DEBOUNCE_SECONDS", constants.DEFAULT_PUSH_DEBOUNCE_SECONDS)),
        poll_interval=float(app_config.get("POLL_INTERVAL_SECONDS", constants.DEFAULT_POLL_INTERVAL_SECONDS)),
    )
    admin_gate = AdminGate(store)
    insights_service = InsightsService(
        build_llm(app_config.get("GROQ_API_KEY"), app_config.get("LLM_MODEL", "llama-3.1-8b-instant"))
    )

    return Container(
        runner=runner,
        store=store,
        state=state,
        blob_client=client,
        sync_service=sync_service,
        admin_gate=admin_gate,
        insights_service=insights_service,
        report_service=ReportService(),
    )
