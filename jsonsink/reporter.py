"""Reporter callbacks driven by the host metrics framework."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional, Union

from jsonsink.config import ReporterConfig, ReporterState, resolve_state
from jsonsink.metric import Segment, build_envelope, envelope_to_json
from jsonsink.sender import SinkSender, SinkTransportError

IGNORE = "ignore"


@dataclass(frozen=True)
class ReportResult:
    """Outcome of a single report call."""

    state: ReporterState
    status_code: Optional[int] = None
    error: Optional[SinkTransportError] = None

    @property
    def ok(self) -> bool:
        """True unless the sink could not be reached."""
        return self.error is None


class BaseReporter(ABC):
    """Callback surface a host reporting framework drives.

    The host owns subscriptions and scheduling and serializes calls to a
    reporter instance. Only init() and report() carry behavior; the other
    callbacks accept their input and hand the state back.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize reporter.

        Args:
            logger: Logger to report to. Defaults to the module logger.
        """
        self.logger = logger or logging.getLogger(__name__)

    @abstractmethod
    def init(self, options: Any) -> ReporterState:
        """Build the reporter state from host supplied options."""
        pass

    @abstractmethod
    def report(
        self,
        metric: Sequence[Segment],
        datapoint: Any,
        extra: Any,
        value: Any,
        state: ReporterState,
    ) -> ReportResult:
        """Forward one metric value."""
        pass

    def subscribe(
        self, metric: Any, datapoint: Any, extra: Any, interval: Any, state: ReporterState
    ) -> ReporterState:
        """Accept a subscription. The host keeps track of it."""
        return state

    def unsubscribe(
        self, metric: Any, datapoint: Any, extra: Any, state: ReporterState
    ) -> ReporterState:
        """Accept an unsubscription."""
        return state

    def call(self, message: Any, sender: Any, state: ReporterState) -> ReporterState:
        """Log and ignore a synchronous host message."""
        self.logger.info(f"Unknown call {message!r} from {sender!r}")
        return state

    def cast(self, message: Any, state: ReporterState) -> ReporterState:
        """Log and ignore an asynchronous host message."""
        self.logger.info(f"Unknown cast: {message!r}")
        return state

    def info(self, message: Any, state: ReporterState) -> ReporterState:
        """Log and ignore any other message."""
        self.logger.info(f"Unknown info: {message!r}")
        return state

    def newentry(self, entry: Any, state: ReporterState) -> ReporterState:
        """Accept notice of a newly created metric entry."""
        return state

    def setopts(
        self, metric: Any, options: Any, status: Any, state: ReporterState
    ) -> ReporterState:
        """Accept changed options for a metric."""
        return state

    def terminate(self, reason: Any, state: Optional[ReporterState]) -> str:
        """Tell the host there is nothing to clean up.

        Returns:
            IGNORE
        """
        return IGNORE


class JsonReporter(BaseReporter):
    """Forwards each metric value as a JSON document to an HTTP sink."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        super().__init__(logger)
        self._sender: Optional[SinkSender] = None

    def init(self, options: Union[ReporterConfig, Mapping[str, Any], None] = None) -> ReporterState:
        """Resolve options into the reporter state.

        Unknown request types fall back to PUT and "auto" hostnames are
        looked up here, so initialization does not fail on odd input.

        Args:
            options: ReporterConfig or a mapping of options

        Returns:
            ReporterState
        """
        if options is None:
            config = ReporterConfig()
        elif isinstance(options, ReporterConfig):
            config = options
        else:
            config = ReporterConfig(**dict(options))

        state = resolve_state(config)
        self.close()
        self._sender = SinkSender(timeout=state.timeout, logger=self.logger)
        self.logger.debug(
            f"Reporter initialized: {state.request_method.value} {state.sink_url} "
            f"(host: {state.hostname})"
        )
        return state

    @property
    def sender(self) -> SinkSender:
        """Get the sink sender (created by init, or lazily with defaults)."""
        if self._sender is None:
            self._sender = SinkSender(logger=self.logger)
        return self._sender

    def report(
        self,
        metric: Sequence[Segment],
        datapoint: Any,
        extra: Any,
        value: Any,
        state: ReporterState,
    ) -> ReportResult:
        """Send one metric value to the sink.

        Any HTTP response, including 4xx and 5xx, counts as success. Only a
        transport failure is returned as an error. The state is never changed.

        Args:
            metric: Metric identifier, e.g. ["cpu", "load"]
            datapoint: Datapoint label, e.g. "mean"
            extra: Host supplied context (unused)
            value: JSON serializable value
            state: Reporter state from init()

        Returns:
            ReportResult carrying the unchanged state
        """
        envelope = build_envelope(metric, datapoint, value, state.hostname)
        payload = envelope_to_json(envelope)

        try:
            status_code = self.sender.send(
                payload,
                url=state.sink_url,
                method=state.request_method,
                headers=dict(state.headers),
            )
        except SinkTransportError as e:
            return ReportResult(state=state, error=e)

        return ReportResult(state=state, status_code=status_code)

    def terminate(self, reason: Any, state: Optional[ReporterState]) -> str:
        """Release the HTTP client."""
        self.close()
        return IGNORE

    def close(self) -> None:
        """Close the HTTP client."""
        if self._sender is not None:
            self._sender.close()
            self._sender = None
