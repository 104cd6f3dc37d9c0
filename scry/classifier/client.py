"""Ask an OpenAI chat model which layout suits the buffered logs."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, List, Optional, Sequence, Tuple

import openai
from pydantic import ValidationError

from ..config import ClassifierConfig, get_config
from ..core.cleaner import sanitize_for_display
from ..core.constants import ANALYSIS_QUEUE_SIZE
from ..errors import ClassifierError
from ..plugins import ToolRegistry
from ..utils.persistence import get_api_key
from .models import JSON, AnalysisResult, ModelResponse, PLAIN, ViewKind, ViewType

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are selecting the best terminal UI layout for viewing incoming logs. Respond ONLY with JSON. Available layouts:

Built-in views:
- Plain: good for freeform unstructured lines.
- KeyValue: good for lines with key=value pairs.
- Json: good for structured JSON logs.
{tools}
If an external tool would provide a better viewing experience (e.g., jless for complex JSON, visidata for tabular data, lnav for log files with timestamps), prefer it over built-in views. Otherwise, use a built-in view.

Respond with JSON:
{{ "view": "Plain" }} OR
{{ "view": "KeyValue" }} OR
{{ "view": "Json" }} OR
{{ "view": "ExternalTool", "tool": "tool_name" }}"""


class Classifier:
    """Synchronous classifier around the OpenAI chat-completions API."""

    def __init__(
        self,
        config: Optional[ClassifierConfig] = None,
        registry: Optional[ToolRegistry] = None,
        client: Any = None,
    ):
        self.config = config or get_config().classifier
        self.registry = registry or ToolRegistry()
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = openai.OpenAI(
                api_key=get_api_key(),
                base_url=self.config.base_url,
                timeout=self.config.timeout,
            )
        return self._client

    def build_system_prompt(self) -> str:
        descriptions = self.registry.get_available_descriptions()
        tools = f"\nExternal tools (if installed):\n{descriptions}\n" if descriptions else ""
        return SYSTEM_PROMPT.format(tools=tools)

    def build_user_message(self, lines: Sequence[str]) -> str:
        sample = list(lines)[-self.config.sample_lines :] if self.config.sample_lines > 0 else []
        text = "\n".join(
            sanitize_for_display(line, self.config.max_line_chars) for line in sample
        )
        header = "Analyze these log lines and select the best view:\n\n"
        limit = self.config.max_message_chars
        if len(text) > limit:
            return f"{header}{text[:limit]}...\n[truncated {len(text) - limit} chars]"
        return header + text

    def analyze(self, lines: Sequence[str]) -> AnalysisResult:
        """Classify ``lines`` and return the chosen view with a summary.

        Raises:
            ClassifierError: If the request fails or the answer is unusable
        """
        model = self.config.model
        messages = [
            {"role": "system", "content": self.build_system_prompt()},
            {"role": "user", "content": self.build_user_message(lines)},
        ]
        logger.info(f"Requesting layout from {model} for {len(lines)} lines")
        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=messages,
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as exc:
            raise ClassifierError(
                f"Failed to send request to OpenAI API "
                f"(POST /v1/chat/completions with model {model}): {exc}"
            ) from exc

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as exc:
            raise ClassifierError("No content in OpenAI response") from exc
        if not content:
            raise ClassifierError("No content in OpenAI response")

        try:
            parsed = ModelResponse.model_validate_json(content)
        except ValidationError as exc:
            raise ClassifierError("Failed to parse model response as JSON") from exc

        view, view_name = self.resolve_view(parsed)
        summary = f"OpenAI API ({model}) → Selected view: {view_name}"
        logger.info(summary)
        return AnalysisResult(view, summary)

    def resolve_view(self, response: ModelResponse) -> Tuple[ViewKind, str]:
        if response.view == ViewType.EXTERNAL_TOOL.value:
            if not response.tool:
                raise ClassifierError("ExternalTool view requires 'tool' field")
            tool = self.registry.get(response.tool)
            if tool is None:
                raise ClassifierError(f"Unknown external tool: {response.tool}")
            if not tool.is_available():
                return JSON, f"Json ({response.tool} not available)"
            return ViewKind.external(response.tool), f"External: {response.tool}"

        try:
            view_type = ViewType(response.view)
        except ValueError as exc:
            raise ClassifierError(f"Unknown view type: {response.view}") from exc
        return ViewKind(view_type), view_type.value


class AnalysisWorker:
    """Run one classification per request on a daemon thread.

    Results land in a small bounded queue that the session drains each
    iteration. Requests are not deduplicated; the last result drained wins.
    """

    def __init__(
        self,
        classifier: Classifier,
        results: "Optional[queue.Queue[AnalysisResult]]" = None,
    ):
        self.classifier = classifier
        self.results: "queue.Queue[AnalysisResult]" = results or queue.Queue(
            maxsize=ANALYSIS_QUEUE_SIZE
        )

    def request(self, lines: Sequence[str]) -> threading.Thread:
        snapshot = list(lines)
        thread = threading.Thread(
            target=self._run, args=(snapshot,), name="scry-analysis", daemon=True
        )
        thread.start()
        return thread

    def _run(self, lines: List[str]) -> None:
        try:
            result = self.classifier.analyze(lines)
        except Exception as exc:
            logger.warning(f"Layout analysis failed: {exc}")
            result = AnalysisResult(PLAIN, f"OpenAI API error: {exc}")
        self.results.put(result)

    def drain(self) -> List[AnalysisResult]:
        drained: List[AnalysisResult] = []
        while True:
            try:
                drained.append(self.results.get_nowait())
            except queue.Empty:
                return drained


__all__ = ["AnalysisWorker", "Classifier", "SYSTEM_PROMPT"]
