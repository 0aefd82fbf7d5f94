# tests/test_config.py
import resume_optimizer
from resume_optimizer.config import EngineConfig, LLMConfig, DEFAULT_PARAMETER_BUDGET, get_config

ENGINE_YAML = """
engine:
  max_iterations: 5
  pass_threshold: 85
  parameter_budget:
    4: 30
    '10': 12
  llm:
    model: mistral:7b
    max_attempts: 1
"""


def test_defaults():
    config = EngineConfig()
    assert config.parameter_budget == DEFAULT_PARAMETER_BUDGET
    assert config.budget_for(4) == 15
    assert isinstance(config.llm, LLMConfig)


def test_from_yaml_merges_budget(tmp_path):
    path = tmp_path / 'engine.yaml'
    path.write_text(ENGINE_YAML)
    config = EngineConfig.from_yaml(str(path))

    assert config.max_iterations == 5
    assert config.pass_threshold == 85
    assert config.budget_for(4) == 30
    assert config.budget_for(10) == 12
    assert config.budget_for(1) == 10
    assert len(config.parameter_budget) == 16
    assert config.llm.model == 'mistral:7b'
    assert config.llm.max_attempts == 1
    assert config.llm.base_url == LLMConfig().base_url


def test_empty_yaml(tmp_path):
    path = tmp_path / 'engine.yaml'
    path.write_text('')
    assert EngineConfig.from_yaml(str(path)) == EngineConfig()


def test_get_config_reads_env_path(tmp_path, monkeypatch):
    path = tmp_path / 'custom.yaml'
    path.write_text(ENGINE_YAML)
    monkeypatch.setenv('RESUME_ENGINE_CONFIG', str(path))
    assert get_config().max_iterations == 5


def test_get_config_without_file(tmp_path, monkeypatch):
    monkeypatch.setenv('RESUME_ENGINE_CONFIG', str(tmp_path / 'missing.yaml'))
    assert get_config() == EngineConfig()


def test_public_names_resolve():
    for name in resume_optimizer.__all__:
        assert hasattr(resume_optimizer, name), name
    assert 'SectionType' not in resume_optimizer.__all__
