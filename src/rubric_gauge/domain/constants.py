"""
Domain Constants

Centrally manages constants shared across the evaluation harness.
"""

# System preamble sent ahead of both the evaluated conversation and the grader prompt
SYSTEM_PROMPT = "You are a helpful assistant."

# Default models (OpenRouter model ids)
DEFAULT_GRADER_MODEL = "openai/gpt-4.1"
DEFAULT_CONCURRENCY = 5
DEFAULT_MODEL_TEMPERATURE = 1.0

# HealthBench dataset variants
DATASET_URLS = {
    "main": "https://openaipublic.blob.core.windows.net/simple-evals/healthbench/2025-05-07-06-14-12_oss_eval.jsonl",
    "hard": "https://openaipublic.blob.core.windows.net/simple-evals/healthbench/hard_2025-05-08-21-00-10.jsonl",
    "consensus": "https://openaipublic.blob.core.windows.net/simple-evals/healthbench/consensus_2025-05-09-20-00-46.jsonl",
}

THEME_TAG_PREFIX = "theme:"

# Human-readable theme names
THEME_NAMES = {
    "communication": "Expertise-tailored Comms",
    "complex_responses": "Response Depth",
    "context_seeking": "Context Seeking",
    "emergency_referrals": "Emergency Referrals",
    "global_health": "Global Health",
    "health_data_tasks": "Health Data Tasks",
    "hedging": "Responding Under Uncertainty",
}

REASONING_EFFORTS = ["none", "minimal", "low", "medium", "high"]

# Thinking budget (tokens) for providers that take a budget instead of an effort level
REASONING_BUDGETS = {
    "none": 0,
    "minimal": 1024,
    "low": 2048,
    "medium": 8192,
    "high": 16384,
}

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
OPENROUTER_MODELS_URL = "https://openrouter.ai/api/v1/models"

# Fallback pricing (USD / 1M tokens) used when the OpenRouter price list is unavailable
MODEL_PRICING = {
    "openai/gpt-4.1": {"input": 2.0, "output": 8.0},
    "openai/gpt-4.1-mini": {"input": 0.40, "output": 1.60},
    "openai/gpt-4o": {"input": 2.50, "output": 10.0},
    "openai/gpt-3.5-turbo": {"input": 0.50, "output": 1.50},
    "anthropic/claude-sonnet-4.5": {"input": 3.0, "output": 15.0},
    "anthropic/claude-haiku-4.5": {"input": 1.0, "output": 5.0},
    "google/gemini-2.5-flash": {"input": 0.30, "output": 2.50},
    "google/gemini-2.5-pro": {"input": 1.25, "output": 10.0},
}
