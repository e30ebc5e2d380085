import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from .artifacts import save_blueprint
from .blueprint_validation import validate_blueprint_semantics
from .config import Settings
from .generator import ask_assistant, request_blueprint
from .models import (
    Blueprint,
    BuildLogEntry,
    GenerationPhase,
    GenerationState,
    ImageRequest,
    Severity,
    Template,
)
from .templates import get_template

logger = logging.getLogger(__name__)

LogListener = Callable[[BuildLogEntry], None]

PHASE_MESSAGES = {
    GenerationPhase.COMPOSE_PROMPT: "Composing blueprint prompt from configuration...",
    GenerationPhase.REQUEST: "Consulting AI Architect for optimal partitioning and package dependencies...",
    GenerationPhase.VALIDATE: "Validating generated artifacts against the blueprint schema...",
}


class ForgeSession:
    """Holds the current image request, its last blueprint and the build log.

    Only one generation may be outstanding; a second call while
    ``state`` is ``GENERATING`` is ignored and never reaches the client.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        client: Any | None = None,
        request: ImageRequest | None = None,
    ):
        self.settings = settings
        self.client = client
        self.request = request or ImageRequest()
        self.artifacts: Blueprint = []
        self.logs: list[BuildLogEntry] = []
        self.state = GenerationState.IDLE
        self.last_error: Exception | None = None
        self._listeners: list[LogListener] = []

    def on_log(self, listener: LogListener) -> None:
        self._listeners.append(listener)

    def add_log(self, message: str, severity: Severity = "info") -> BuildLogEntry:
        entry = BuildLogEntry(
            timestamp=datetime.now().strftime("%H:%M:%S"),
            message=message,
            severity=severity,
        )
        self.logs.append(entry)
        for listener in self._listeners:
            listener(entry)
        return entry

    def update(self, **fields) -> ImageRequest:
        self.request = self.request.updated(**fields)
        return self.request

    def add_package(self, name: str) -> ImageRequest:
        self.request = self.request.with_package(name)
        return self.request

    def remove_package(self, name: str) -> ImageRequest:
        self.request = self.request.without_package(name)
        return self.request

    def load_template(self, template: Template | str) -> ImageRequest:
        if isinstance(template, str):
            template = get_template(template)
        self.request = template.request
        self.artifacts = []
        self.logs = []
        self.last_error = None
        self.add_log(f"Loaded {template.request.distribution.value} template configuration.")
        return self.request

    def _on_phase(self, phase: GenerationPhase) -> None:
        self.add_log(PHASE_MESSAGES[phase])

    def generate(self) -> Blueprint:
        """Run one blueprint generation for the current request.

        Failures never propagate: they leave an empty artifact list and a
        single error entry in the log.
        """
        if self.state is GenerationState.GENERATING:
            logger.warning("Generation already in progress; ignoring request")
            return self.artifacts

        self.state = GenerationState.GENERATING
        self.artifacts = []
        self.logs = []
        self.last_error = None
        snapshot = self.request
        try:
            self.add_log("Initializing ISOForge AI engine...")
            self.add_log(
                f"Target Distribution: {snapshot.distribution.value} {snapshot.distribution_version}"
            )
            try:
                result = request_blueprint(
                    snapshot,
                    client=self.client,
                    api_key=self.settings.api_key,
                    model=self.settings.model,
                    max_tokens=self.settings.max_tokens,
                    on_phase=self._on_phase,
                )
            except Exception as exc:
                logger.debug("Blueprint generation failed", exc_info=True)
                self.last_error = exc
                self.add_log(f"Architectural failure: {exc}", "error")
                return self.artifacts

            self.artifacts = result.artifacts
            for warning in validate_blueprint_semantics(result.artifacts):
                self.add_log(warning, "warning")
            self.add_log("ISO Blueprint successfully synthesized!", "success")
            return self.artifacts
        finally:
            self.state = GenerationState.IDLE

    def export(self, out_dir: str | Path = ".") -> Path:
        path = save_blueprint(self.artifacts, self.request.distribution, out_dir)
        self.add_log("Blueprint bundle downloaded successfully.", "success")
        return path

    def ask(self, query: str) -> str:
        return ask_assistant(
            query,
            self.request,
            client=self.client,
            api_key=self.settings.api_key,
            model=self.settings.model,
            max_tokens=self.settings.max_tokens,
        )
