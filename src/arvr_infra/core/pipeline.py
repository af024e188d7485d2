"""
Deployment pipeline.

Sequences provisioning steps in dependency order and halts the whole
deployment on the first step that fails terminally.

State Machine:
    NOT_STARTED → VALIDATING → RUNNING(step) → SUCCEEDED | FAILED(step, cause)

    SUCCEEDED and FAILED are terminal; a pipeline object runs once.

Execution Modes:
    - sequential: steps run one by one in declaration order (reference)
    - concurrent: steps of the same dependency wave run together; the wave
      completes only when all of its steps have finished

Failure Policy:
    - Connectivity validation fails → no provisioning step runs
    - A step raises StepExhaustionError → no later step runs, nothing is
      rolled back, the error propagates to the caller
"""

import asyncio
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from .config import DeploymentConfig
from .exceptions import ConnectivityError, RetryExhaustedError, StepExhaustionError
from .graph import DependencyGraph
from .protocols import ResourceClients
from .reporter import Reporter
from .retry import RetryExecutor


class PipelineState(str, Enum):
    NOT_STARTED = "not_started"
    VALIDATING = "validating"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class StepContext:
    """Everything a step may read while it runs."""

    config: DeploymentConfig
    clients: ResourceClients
    executor: RetryExecutor
    reporter: Reporter
    outputs: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def output_of(self, step_key: str, name: str) -> Any:
        try:
            return self.outputs[step_key][name]
        except KeyError:
            raise KeyError(f"Output '{name}' of step '{step_key}' is not available") from None


StepFunction = Callable[[StepContext], Awaitable[Optional[Dict[str, Any]]]]


@dataclass(frozen=True)
class Step:
    """
    One unit of the pipeline.

    Attributes:
        key: Short identifier used for dependencies and outputs
        name: Display name used in events and errors
        run: Coroutine function performing the step
        depends_on: Keys of steps that must complete first
    """

    key: str
    name: str
    run: StepFunction
    depends_on: Tuple[str, ...] = ()


@dataclass(frozen=True)
class StepResult:
    step_key: str
    step_name: str
    succeeded: bool
    outputs: Dict[str, Any] = field(default_factory=dict)
    error: Optional[StepExhaustionError] = None

    @property
    def attempts(self) -> Optional[int]:
        return self.error.attempts if self.error else None


@dataclass(frozen=True)
class DeploymentResult:
    state: PipelineState
    results: Tuple[StepResult, ...]

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.SUCCEEDED


def execution_batches(graph: DependencyGraph[Step], concurrent: bool) -> List[List[Step]]:
    """Dependency waves when concurrent, otherwise one step per batch."""
    if concurrent:
        return graph.waves()
    return [[step] for step in graph.ordered()]


async def fan_out(*operations: Awaitable[Any]) -> List[Any]:
    """
    Run independent operations concurrently and wait for all of them.

    Every operation finishes (successfully or not) before this returns or
    raises; the first failure in argument order is then re-raised.
    """
    outcomes = await asyncio.gather(*operations, return_exceptions=True)
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            raise outcome
    return list(outcomes)


@contextmanager
def step_errors(
    step_name: str,
    resource_type: str,
    resource_name: str,
    details: Optional[Dict[str, Any]] = None,
    action: str = "create"
) -> Iterator[None]:
    """
    Translate an exhausted retry into a domain-tagged StepExhaustionError.

    `details` must only carry non-secret values; they end up in messages
    and logs.
    """
    try:
        yield
    except RetryExhaustedError as e:
        raise StepExhaustionError(
            step_name=step_name,
            resource_type=resource_type,
            resource_name=resource_name,
            cause=e.last_error,
            attempts=e.attempts,
            details={k: str(v) for k, v in (details or {}).items()},
            provider="azure",
            action=action,
        ) from e


class DeploymentPipeline:
    """
    Runs a fixed set of steps against one environment.

    Args:
        steps: Step declarations; order is the sequential execution order
        config: Resolved deployment configuration
        clients: Resource Client handles
        executor: Retry executor shared by all steps
        reporter: Event sink (defaults to the executor's reporter)
        concurrent: Run independent steps of a wave together
    """

    def __init__(
        self,
        steps: Sequence[Step],
        config: DeploymentConfig,
        clients: ResourceClients,
        executor: RetryExecutor,
        reporter: Optional[Reporter] = None,
        concurrent: bool = False
    ):
        self.graph: DependencyGraph[Step] = DependencyGraph(steps)
        self.config = config
        self.clients = clients
        self.executor = executor
        self.reporter = reporter or executor.reporter
        self.concurrent = concurrent

        self.state = PipelineState.NOT_STARTED
        self.current_step: Optional[str] = None
        self.failure: Optional[BaseException] = None
        self.results: List[StepResult] = []

        self._context = StepContext(
            config=config,
            clients=clients,
            executor=executor,
            reporter=self.reporter,
        )

    def plan(self) -> List[List[Step]]:
        """Execution batches in the order they will run."""
        return execution_batches(self.graph, self.concurrent)

    async def validate_connectivity(self) -> None:
        subscription_id = self.config.subscription_id
        self.reporter.validating(subscription_id)
        try:
            await self.clients.subscription.get_subscription(subscription_id)
        except Exception as e:
            raise ConnectivityError(subscription_id, e) from e
        self.reporter.validated()

    async def _run_step(self, step: Step, index: int, total: int) -> StepResult:
        self.reporter.step_started(step.name, index, total)
        try:
            outputs = await step.run(self._context) or {}
        except StepExhaustionError as e:
            self.reporter.step_failed(step.name, e)
            return StepResult(step.key, step.name, succeeded=False, error=e)

        self._context.outputs[step.key] = outputs
        self.reporter.step_succeeded(step.name)
        return StepResult(step.key, step.name, succeeded=True, outputs=outputs)

    async def _run_batch(self, batch: List[Step], first_index: int, total: int) -> List[StepResult]:
        self.current_step = ", ".join(step.name for step in batch)
        if len(batch) == 1:
            return [await self._run_step(batch[0], first_index, total)]
        return await fan_out(*(
            self._run_step(step, first_index + offset, total)
            for offset, step in enumerate(batch)
        ))

    def _fail(self, step_name: Optional[str], error: BaseException) -> None:
        self.state = PipelineState.FAILED
        self.current_step = step_name
        self.failure = error
        self.reporter.pipeline_failed(step_name, error)

    async def deploy(self) -> DeploymentResult:
        """
        Validate connectivity, then run every step in dependency order.

        Returns:
            DeploymentResult with state SUCCEEDED and one StepResult per step.

        Raises:
            ConnectivityError: The subscription could not be resolved.
            StepExhaustionError: The first step that failed terminally.
        """
        if self.state is not PipelineState.NOT_STARTED:
            raise RuntimeError(f"Pipeline already ran (state: {self.state.value}); create a new one")

        batches = self.plan()
        total = len(self.graph)
        self.reporter.pipeline_started(total, "concurrent" if self.concurrent else "sequential")

        self.state = PipelineState.VALIDATING
        try:
            await self.validate_connectivity()
        except ConnectivityError as e:
            self._fail(None, e)
            raise

        self.state = PipelineState.RUNNING
        index = 1
        for batch in batches:
            try:
                batch_results = await self._run_batch(batch, index, total)
            except Exception as e:
                self._fail(self.current_step, e)
                raise
            self.results.extend(batch_results)
            index += len(batch)

            failed = [r for r in batch_results if not r.succeeded]
            if failed:
                first = failed[0]
                self._fail(first.step_name, first.error)
                raise first.error

        self.state = PipelineState.SUCCEEDED
        self.current_step = None
        self.reporter.pipeline_succeeded(total)
        return DeploymentResult(self.state, tuple(self.results))
