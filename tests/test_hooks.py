import pytest

from linear_gp.config import HyperParameters, ProgramParams
from linear_gp.evolution import (
    CallbackObserver,
    EngineState,
    EvolutionEngine,
    GenerationObserver,
    HistoryObserver,
    HookSignal,
    LoggingObserver,
    TargetFitnessObserver,
)
from linear_gp.tasks import Task
from linear_gp.utils.errors import HookError


class _RegisterSumTask(Task):
    input_count = 1
    action_count = 1

    def evaluate(self, program):
        return float(program.execute([1.0]).values.sum())


class _Recorder(GenerationObserver):
    def __init__(self):
        self.events = []

    def _record(self, name, population):
        self.events.append((name, population.generation, len(population)))

    def on_initialized(self, population):
        self._record("initialized", population)

    def on_evaluated(self, population):
        self._record("evaluated", population)

    def on_ranked(self, population):
        self._record("ranked", population)

    def on_selected(self, population):
        self._record("selected", population)

    def on_generation_end(self, population):
        self._record("generation_end", population)


def _hp(**kw):
    base = dict(population_size=6, max_generations=2, gap=0.5, seed=3, quiet=True,
                program=ProgramParams(max_instructions=6))
    base.update(kw)
    return HyperParameters(**base)


def test_observer_event_order():
    """Events fire in phase order with the population of each phase."""
    rec = _Recorder()
    EvolutionEngine(_hp(max_generations=1), _RegisterSumTask(), [rec]).run()
    assert rec.events == [
        ("initialized", 0, 6),
        ("evaluated", 0, 6),
        ("ranked", 0, 6),
        ("selected", 0, 3),
        ("generation_end", 1, 6),
    ]


def test_callback_observer_after_hooks():
    """CallbackObserver forwards the three named hooks."""
    seen = []
    obs = CallbackObserver(
        after_evaluate=lambda pop: seen.append("evaluate"),
        after_rank=lambda pop: seen.append("rank"),
        after_generation=lambda pop: seen.append("generation"),
    )
    EvolutionEngine(_hp(), _RegisterSumTask(), [obs]).run()
    assert seen == ["evaluate", "rank", "generation"] * 2


def test_stop_signal_ends_run():
    """HookSignal.STOP ends the run after the current generation."""
    engine = EvolutionEngine(
        _hp(max_generations=10),
        _RegisterSumTask(),
        [CallbackObserver(after_rank=lambda pop: HookSignal.STOP)],
    )
    result = engine.run()
    assert engine.generation == 1
    assert engine.state is EngineState.TERMINATED
    assert len(result) == 6


def test_false_return_raises_hook_error():
    """An observer returning False aborts with HookError."""
    engine = EvolutionEngine(_hp(), _RegisterSumTask(), [CallbackObserver(after_evaluate=lambda pop: False)])
    with pytest.raises(HookError):
        engine.run()


def test_observer_exception_raises_hook_error():
    """Observer exceptions become HookError after the remaining observers ran."""
    rec = _Recorder()

    def boom(pop):
        raise RuntimeError("boom")

    engine = EvolutionEngine(_hp(), _RegisterSumTask(), [CallbackObserver(after_rank=boom), rec])
    with pytest.raises(HookError) as excinfo:
        engine.run()
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert rec.events[-1][0] == "ranked"


def test_history_observer_frame():
    """History collects one summary per generation and exports a DataFrame."""
    hist = HistoryObserver()
    EvolutionEngine(_hp(max_generations=3), _RegisterSumTask(), [hist, LoggingObserver()]).run()
    frame = hist.to_frame()
    assert list(frame.index) == [0, 1, 2]
    assert {"best", "median", "worst", "mean", "best_length"} <= set(frame.columns)
    assert (frame["best"] >= frame["median"]).all()
    assert (frame["n_scored"] == 6).all()


def test_target_fitness_observer_stops():
    """Reaching the target stops evolution."""
    engine = EvolutionEngine(_hp(max_generations=5), _RegisterSumTask(), [TargetFitnessObserver(-1e12)])
    engine.run()
    assert engine.generation == 1
