"""
Decode Orchestrator

Runs the binarization strategies in priority order (hybrid, then global
histogram) and asks the symbol engine to read each matrix. The first payload
wins. "Not found", engine faults and matrices that could not be produced all
move on to the next strategy; only running out of strategies yields not found.
"""

import logging
from typing import Optional, Protocol, Sequence

from qrdecode.models import BinaryMatrix, LuminancePlane
from qrdecode.schemas import DecodeHints, DecodeOutcome, EngineResult, EngineStatus
from qrdecode.services.binarizers import DEFAULT_STRATEGIES, Binarizer
from qrdecode.services.symbol_engine import SymbolEngine

logger = logging.getLogger(__name__)


class DecodeObserver(Protocol):
    def strategy_started(self, strategy: str, plane: LuminancePlane) -> None:
        ...

    def strategy_finished(self, strategy: str, result: EngineResult) -> None:
        ...

    def decode_finished(self, outcome: DecodeOutcome) -> None:
        ...


class LoggingObserver:
    """Default observer: writes every event to the module logger."""

    def strategy_started(self, strategy: str, plane: LuminancePlane) -> None:
        logger.info(f"Trying {strategy} binarizer on {plane.width}x{plane.height} image...")

    def strategy_finished(self, strategy: str, result: EngineResult) -> None:
        if result.status == EngineStatus.FAULT:
            logger.warning(f"{strategy} binarizer failed: {result.reason}")
        elif result.status == EngineStatus.NOT_FOUND:
            logger.info(f"{strategy} binarizer: no QR code found")
        else:
            logger.info(f"{strategy} binarizer decoded {len(result.text or '')} characters")

    def decode_finished(self, outcome: DecodeOutcome) -> None:
        if outcome.is_found:
            logger.info(f"QR code decoded using {outcome.strategy} binarizer")
        else:
            logger.info(f"QR decode finished: {outcome.status.value}")


class DecodeOrchestrator:
    def __init__(
        self,
        engine: SymbolEngine,
        strategies: Sequence[Binarizer] = DEFAULT_STRATEGIES,
        observer: Optional[DecodeObserver] = None,
    ):
        self.engine = engine
        self.strategies = tuple(strategies)
        self.observer = observer or LoggingObserver()

    def _notify(self, event: str, *args) -> None:
        # A broken observer must not change the decode result
        try:
            getattr(self.observer, event)(*args)
        except Exception as e:
            logger.warning(f"Observer failed on {event}: {type(e).__name__}: {str(e)}")

    def _attempt(self, strategy: Binarizer, plane: LuminancePlane, hints: DecodeHints) -> EngineResult:
        # Anything raised by a binarizer or a third-party engine is a soft failure
        try:
            matrix: Optional[BinaryMatrix] = strategy.binarize(plane)
            if matrix is None:
                return EngineResult.not_found("No usable contrast for threshold")
            return self.engine.decode_symbol(matrix, hints)
        except Exception as e:
            return EngineResult.fault(f"{type(e).__name__}: {str(e)}")

    def decode(self, plane: LuminancePlane, hints: DecodeHints) -> DecodeOutcome:
        """
        Args:
            plane: Luminance of the image to search
            hints: Passed unchanged to every engine call

        Returns:
            found with the first payload, or not_found once every strategy is exhausted
        """
        outcome = DecodeOutcome.not_found()
        for strategy in self.strategies:
            self._notify("strategy_started", strategy.name, plane)
            result = self._attempt(strategy, plane, hints)
            self._notify("strategy_finished", strategy.name, result)
            if result.status == EngineStatus.FOUND:
                outcome = DecodeOutcome.found(result.text, strategy=strategy.name)
                break

        self._notify("decode_finished", outcome)
        return outcome
