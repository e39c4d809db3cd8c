"""Runner stage: fit each region with an external inference engine."""

import logging
import threading
import time
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, as_completed, wait
from typing import Any, Protocol

import numpy as np

from ..errors import InferenceError
from ..schema.dispatcher import ModelInputData, RegionResult, RegionStatus, RegionTask
from ..schema.sampler import SamplerArguments, SamplerMethodEnum
from ..telemetry import ExecutionTelemetry

logger = logging.getLogger(__name__)


class InferenceEngine(Protocol):
    """
    Capability that fits one chain of the model.

    Implementations return posterior draws per parameter as arrays whose first
    axis indexes draws, and should return early once ``stop_event`` is set.
    """

    def sample_chain(
        self,
        data: ModelInputData,
        inits: dict[str, np.ndarray],
        args: SamplerArguments,
        *,
        chain_id: int,
        seed: int,
        stop_event: threading.Event,
    ) -> dict[str, np.ndarray]: ...


def _chain_seeds(seed: int, n_chains: int) -> list[int]:
    return [int(s) for s in np.random.SeedSequence(seed).generate_state(n_chains)]


def run_chains(
    task: RegionTask,
    engine: InferenceEngine,
    timeout: float | None = None,
) -> tuple[list[dict[str, np.ndarray]], bool]:
    """
    Run the chains of one region concurrently.

    Starting values are drawn up front, one set per chain. On timeout the
    unfinished chains are cancelled and signalled to stop; chains that already
    finished are kept.

    Parameters
    ----------
    task : RegionTask
        Region to fit.
    engine : InferenceEngine
        Inference capability.
    timeout : float | None
        Wall-clock limit in seconds for all chains of the region.

    Returns
    -------
    tuple[list[dict[str, np.ndarray]], bool]
        Draws of each completed chain in chain order, and whether the limit was hit.

    Raises
    ------
    InferenceError
        If any chain raised.
    """
    args = task.sampler
    n_chains = 1 if args.method == SamplerMethodEnum.vb else args.chains
    inits = [task.initial_conditions() for _ in range(n_chains)]
    seeds = _chain_seeds(args.seed, n_chains)
    stop_event = threading.Event()

    executor = ThreadPoolExecutor(max_workers=min(n_chains, args.cores), thread_name_prefix=f"chain-{task.region}")
    try:
        futures: dict[Future, int] = {
            executor.submit(
                engine.sample_chain,
                task.data,
                inits[i],
                args,
                chain_id=i + 1,
                seed=seeds[i],
                stop_event=stop_event,
            ): i
            for i in range(n_chains)
        }
        done, not_done = wait(futures, timeout=timeout, return_when=FIRST_EXCEPTION)
        if not_done:
            stop_event.set()
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    completed: list[tuple[int, dict[str, np.ndarray]]] = []
    for future in done:
        chain = futures[future]
        exc = future.exception()
        if exc is not None:
            stop_event.set()
            msg = f"Chain {chain + 1} of region {task.region} failed: {exc}"
            raise InferenceError(msg) from exc
        completed.append((chain, future.result()))

    completed.sort(key=lambda item: item[0])
    return [draws for _, draws in completed], bool(not_done)


def combine_chains(chains: list[dict[str, Any]]) -> dict[str, np.ndarray]:
    """
    Stack the draws of several chains along the draw axis.

    Raises
    ------
    InferenceError
        If chains report different parameters.
    """
    parameters = list(chains[0])
    for chain in chains[1:]:
        if set(chain) != set(parameters):
            msg = "Chains returned different sets of parameters."
            raise InferenceError(msg)
    return {name: np.concatenate([np.asarray(chain[name]) for chain in chains], axis=0) for name in parameters}


def run_region(task: RegionTask, engine: InferenceEngine, timeout: float | None = None) -> RegionResult:
    """
    Fit one region and record its outcome.

    Never raises: errors are captured in a failed result, and a timeout keeps
    whatever chains completed in a timed-out result.

    Parameters
    ----------
    task : RegionTask
        Region to fit.
    engine : InferenceEngine
        Inference capability.
    timeout : float | None
        Wall-clock limit in seconds.

    Returns
    -------
    RegionResult
        Succeeded, failed or timed-out result with combined draws.
    """
    logger.info("RUNNER: running region %s.", task.region)
    start_time = time.time()
    try:
        chains, timed_out = run_chains(task, engine, timeout=timeout)
        draws = combine_chains(chains) if chains else None
        elapsed = time.time() - start_time
        if timed_out:
            logger.warning(
                "RUNNER: region %s timed out after %.1fs with %d completed chains.", task.region, elapsed, len(chains)
            )
            return RegionResult(
                region=task.region,
                status=RegionStatus.timed_out,
                draws=draws,
                n_chains=len(chains),
                elapsed_time=elapsed,
                error_message=f"Timed out after {timeout}s with {len(chains)} completed chains.",
            )
        logger.info("RUNNER: completed region %s in %.1fs.", task.region, elapsed)
        return RegionResult(
            region=task.region,
            status=RegionStatus.succeeded,
            draws=draws,
            n_chains=len(chains),
            elapsed_time=elapsed,
        )
    except Exception as e:
        logger.warning("RUNNER: region %s failed: %s", task.region, e)
        return RegionResult(
            region=task.region,
            status=RegionStatus.failed,
            elapsed_time=time.time() - start_time,
            error_message=str(e),
        )


def dispatch_runner(
    tasks: list[RegionTask],
    engine: InferenceEngine,
    *,
    max_workers: int = 1,
    timeout: float | None = None,
) -> list[RegionResult]:
    """
    Fit every region, at most ``max_workers`` at a time.

    Parameters
    ----------
    tasks : list[RegionTask]
        Regions to fit, in output order.
    engine : InferenceEngine
        Inference capability shared by all regions.
    max_workers : int
        Maximum number of regions fitted concurrently. 1 runs sequentially.
    timeout : float | None
        Per-region wall-clock limit in seconds, measured from when the region starts.

    Returns
    -------
    list[RegionResult]
        One result per task, in task order regardless of completion order.
    """
    telemetry = ExecutionTelemetry.get_current()
    if telemetry:
        telemetry.enter_runner(max_workers=max_workers, timeout=timeout)
    logger.info("RUNNER: dispatched for %d regions with %d workers.", len(tasks), max_workers)

    if max_workers == 1:
        results = []
        for task in tasks:
            result = run_region(task, engine, timeout=timeout)
            if telemetry:
                telemetry.capture_region(result)
            results.append(result)
    else:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="region") as pool:
            futures = [pool.submit(run_region, task, engine, timeout) for task in tasks]
            for future in as_completed(futures):
                if telemetry:
                    telemetry.capture_region(future.result())
            results = [future.result() for future in futures]

    if telemetry:
        telemetry.exit_runner()
    counts = {status: sum(r.status == status for r in results) for status in RegionStatus}
    logger.info(
        "RUNNER: completed with %d succeeded, %d timed out and %d failed regions.",
        counts[RegionStatus.succeeded],
        counts[RegionStatus.timed_out],
        counts[RegionStatus.failed],
    )
    return results
