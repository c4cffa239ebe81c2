import numpy as np
import pytest

from linear_gp import evolve
from linear_gp.config import HyperParameters, ProgramParams
from linear_gp.evolution import EngineState, EvolutionEngine, HistoryObserver
from linear_gp.tasks import Task
from linear_gp.utils.errors import ConfigurationError, TaskError


class _RegisterSumTask(Task):
    input_count = 1
    action_count = 1

    def __init__(self):
        self.calls = 0

    def evaluate(self, program):
        self.calls += 1
        return float(program.execute([1.0]).values.sum())


class _FailingTask(_RegisterSumTask):
    def evaluate(self, program):
        raise RuntimeError("no simulator")


def _hp(**kw):
    base = dict(population_size=4, max_generations=3, gap=0.5, seed=0, quiet=True,
                program=ProgramParams(max_instructions=8))
    base.update(kw)
    return HyperParameters(**base)


def test_zero_generations_returns_initial_population():
    """max_generations=0 returns the unevaluated initial population."""
    task = _RegisterSumTask()
    engine = EvolutionEngine(_hp(max_generations=0), task)
    pop = engine.run()
    assert len(pop) == 4
    assert all(p.fitness is None for p in pop)
    assert task.calls == 0
    assert engine.state is EngineState.TERMINATED


def test_best_fitness_non_decreasing_without_variation():
    """With elitism and no variation the best fitness never drops."""
    hist = HistoryObserver()
    pop = evolve(_hp(n_mutations=0.0, n_crossovers=0.0), _RegisterSumTask(), [hist])
    assert len(pop) == 4
    best = hist.best_fitness()
    assert len(best) == 3
    assert all(b2 >= b1 for b1, b2 in zip(best, best[1:]))


def test_population_size_constant_with_variation():
    """Every generation keeps population_size programs."""
    sizes = []
    engine = EvolutionEngine(_hp(n_mutations=0.5, n_crossovers=0.5, max_generations=4), _RegisterSumTask())
    for ranked in engine.iter_generations():
        sizes.append(len(ranked))
        assert ranked[0].fitness >= ranked[-1].fitness
    assert sizes == [4, 4, 4, 4]
    assert len(engine.population) == 4


def test_run_is_reproducible():
    """Equal seeds give identical final populations."""
    a = evolve(_hp(seed=5, max_generations=4), _RegisterSumTask())
    b = evolve(_hp(seed=5, max_generations=4), _RegisterSumTask())
    assert [p.fingerprint for p in a] == [p.fingerprint for p in b]
    assert [p.fitness for p in a] == [p.fitness for p in b]


def test_fitness_cached_for_unchanged_programs():
    """Clones keep their fitness, so fewer evaluations than slots are needed."""
    task = _RegisterSumTask()
    evolve(_hp(n_mutations=0.0, n_crossovers=0.0, population_size=10), task)
    assert task.calls == 10


def test_step_returns_ranked_generation():
    """step() ranks the current generation and advances the counter."""
    engine = EvolutionEngine(_hp(), _RegisterSumTask())
    ranked = engine.step()
    fit = [p.fitness for p in ranked]
    assert fit == sorted(fit, reverse=True)
    assert ranked.generation == 0
    assert engine.generation == 1


def test_task_failure_propagates():
    """A failing task aborts the run with TaskError."""
    with pytest.raises(TaskError):
        evolve(_hp(), _FailingTask())


def test_invalid_parameters_fail_before_generation():
    """Bad settings raise ConfigurationError at construction."""
    with pytest.raises(ConfigurationError):
        EvolutionEngine(_hp(gap=0.0), _RegisterSumTask())
    with pytest.raises(ConfigurationError):
        EvolutionEngine(_hp(program=ProgramParams(action_count=3)), _RegisterSumTask())


def test_engine_accepts_external_rng():
    """A caller-supplied generator drives the run."""
    a = EvolutionEngine(_hp(), _RegisterSumTask(), rng=np.random.default_rng(9)).run()
    b = EvolutionEngine(_hp(), _RegisterSumTask(), rng=np.random.default_rng(9)).run()
    assert [p.fingerprint for p in a] == [p.fingerprint for p in b]


def test_second_run_returns_same_ranked_population():
    """Running a finished engine again returns the last ranked generation."""
    engine = EvolutionEngine(_hp(n_mutations=0.5, n_crossovers=0.5), _RegisterSumTask())
    first = engine.run()
    second = engine.run()
    assert second is first
    assert all(p.fitness is not None for p in second)
    assert engine.last_ranked is first
    assert engine.population is not first
