# resume_optimizer/config.py
import os
from dataclasses import dataclass, field
from typing import Dict

import yaml


DEFAULT_PARAMETER_BUDGET = {
    1: 10,   # Contact & Title
    2: 10,   # Summary / Objective
    3: 10,   # Role Title Match
    4: 15,   # Hard Skills
    5: 8,    # Soft Skills
    6: 12,   # Section Order
    7: 10,   # Word Variety
    8: 10,   # Quantified Results
    9: 8,    # Action Verbs
    10: 10,  # Keyword Density
    11: 10,  # Formatting
    12: 8,   # Section Completeness
    13: 5,   # Chronology
    14: 5,   # Relevance Filtering
    15: 5,   # Tools & Versions
    16: 7,   # Project Technical Depth
}


@dataclass
class LLMConfig:
    """Generative-text provider settings"""
    base_url: str = "http://localhost:11434"
    model: str = "llama3.2:3b"
    timeout: int = 60
    max_attempts: int = 3
    backoff_min: int = 1
    backoff_max: int = 10
    temperature: float = 0.3


@dataclass
class EngineConfig:
    """Scoring, optimization and workflow policy"""

    # Point budget per parameter id (tunable policy)
    parameter_budget: Dict[int, int] = field(
        default_factory=lambda: dict(DEFAULT_PARAMETER_BUDGET)
    )

    # Convergence
    pass_threshold: float = 90.0      # Per-parameter percentage considered passing
    target_score: float = 90.0        # Overall score reported as "target achieved"
    max_iterations: int = 3

    # JD extraction
    importance_cutoffs: Dict[str, int] = field(default_factory=lambda: {
        'critical': 5,
        'high': 3,
        'medium': 2,
    })
    context_window: int = 150

    # Scoring
    parallel_scoring: bool = False
    max_workers: int = 4

    # Workflow
    error_log_limit: int = 50
    max_retry_attempts: int = 3

    llm: LLMConfig = field(default_factory=LLMConfig)

    def __post_init__(self):
        # YAML keys arrive as strings or ints
        self.parameter_budget = {int(k): int(v) for k, v in self.parameter_budget.items()}
        if isinstance(self.llm, dict):
            self.llm = LLMConfig(**self.llm)

    def budget_for(self, parameter_id: int) -> int:
        return self.parameter_budget.get(parameter_id, DEFAULT_PARAMETER_BUDGET[parameter_id])

    @classmethod
    def from_yaml(cls, path: str):
        """Load configuration from YAML file"""
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        engine = dict(data.get('engine', {}))
        budget = dict(DEFAULT_PARAMETER_BUDGET)
        budget.update(engine.pop('parameter_budget', {}) or {})
        return cls(parameter_budget=budget, **engine)


def get_config() -> EngineConfig:
    """Get engine configuration"""
    config_path = os.getenv('RESUME_ENGINE_CONFIG', 'config/engine.yaml')

    if os.path.exists(config_path):
        return EngineConfig.from_yaml(config_path)
    return EngineConfig()
