import pytest

from linear_gp.config import (
    HyperParameters,
    ProgramParams,
    layer_dataclass_config,
    load_config_file,
    load_hyper_parameters,
)
from linear_gp.utils.errors import ConfigurationError


class _Task:
    input_count = 4
    action_count = 3


def _clear_env(monkeypatch):
    import os

    for key in list(os.environ):
        if key.startswith("LGP_"):
            monkeypatch.delenv(key, raising=False)


def test_hyper_parameter_precedence(monkeypatch, tmp_path):
    """Precedence is file < env < explicit overrides."""
    _clear_env(monkeypatch)
    cfg_path = tmp_path / "run.toml"
    cfg_path.write_text(
        """
        [evolution]
        population_size = 10
        gap = 0.25
        max_generations = 7

        [program]
        max_instructions = 5
        """
    )
    monkeypatch.setenv("LGP_GAP", "0.4")
    monkeypatch.setenv("LGP_QUIET", "yes")
    monkeypatch.setenv("LGP_PROGRAM_BRANCH_POLICY", "nested")
    monkeypatch.setenv("LGP_PROGRAM_OPCODES", "add, sub,if_lt")

    hp = load_hyper_parameters(cfg_path, overrides={"population_size": 20, "program": {"max_instructions": 9}})

    assert hp.population_size == 20  # override beats file
    assert hp.gap == 0.4  # env beats file
    assert hp.max_generations == 7  # file retained
    assert hp.quiet is True
    assert hp.program.max_instructions == 9
    assert hp.program.branch_policy == "nested"
    assert hp.program.opcodes == ("add", "sub", "if_lt")


def test_yaml_flat_keys(monkeypatch, tmp_path):
    """YAML files with flat keys configure the evolution section."""
    _clear_env(monkeypatch)
    cfg_path = tmp_path / "run.yaml"
    cfg_path.write_text("population_size: 6\nn_mutations: 0.2\ncrossover_kind: one_point\n")
    hp = load_hyper_parameters(cfg_path)
    assert (hp.population_size, hp.n_mutations, hp.crossover_kind) == (6, 0.2, "one_point")
    assert hp.program == ProgramParams()


def test_defaults_without_file(monkeypatch):
    """No file and no env gives the defaults."""
    _clear_env(monkeypatch)
    assert load_hyper_parameters() == HyperParameters()


def test_unsupported_extension(tmp_path):
    """Only TOML and YAML are accepted."""
    path = tmp_path / "run.json"
    path.write_text("{}")
    with pytest.raises(ConfigurationError):
        load_config_file(path)


def test_bad_env_value_raises(monkeypatch):
    """Uncoercible values raise ConfigurationError."""
    _clear_env(monkeypatch)
    monkeypatch.setenv("LGP_POPULATION_SIZE", "lots")
    with pytest.raises(ConfigurationError):
        load_hyper_parameters()


@pytest.mark.parametrize(
    "overrides",
    [
        {"population_size": 1},
        {"gap": 0.0},
        {"gap": 1.5},
        {"n_mutations": -0.1},
        {"crossover_kind": "uniform"},
        {"max_generations": -1},
        {"program": {"max_instructions": 0}},
        {"program": {"branch_policy": "loop"}},
        {"program": {"opcodes": "add,nope"}},
        {"program": {"constant_range": 0.0}},
    ],
)
def test_invalid_settings_rejected(monkeypatch, overrides):
    """Validation rejects out-of-range settings."""
    _clear_env(monkeypatch)
    with pytest.raises(ConfigurationError):
        load_hyper_parameters(overrides=overrides)


def test_layer_optional_none(monkeypatch):
    """Optional fields accept 'none' to mean unset."""
    _clear_env(monkeypatch)
    monkeypatch.setenv("X_REGISTER_COUNT", "none")
    monkeypatch.setenv("X_INPUT_COUNT", "3")
    values = layer_dataclass_config(ProgramParams, file_cfg=None, env_prefix="X_", overrides=None)
    assert values == {"register_count": None, "input_count": 3}


def test_bind_fills_counts_from_task():
    """bind() resolves inputs, actions and the default register count."""
    bound = ProgramParams().bind(_Task())
    assert (bound.input_count, bound.action_count, bound.register_count) == (4, 3, 4)
    assert bound.is_bound and not ProgramParams().is_bound


def test_bind_rejects_mismatch_and_small_register_file():
    """Explicit counts must match the task and leave room for the action registers."""
    with pytest.raises(ConfigurationError):
        ProgramParams(action_count=2).bind(_Task())
    with pytest.raises(ConfigurationError):
        ProgramParams(register_count=2).bind(_Task())
