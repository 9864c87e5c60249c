"""
Prometheus counters. Exposed by the ASGI app mounted at /metrics.
"""
from __future__ import annotations

from prometheus_client import Counter

LLM_CALLS = Counter(
    "commentlens_llm_calls_total",
    "Text-generation calls by purpose, provider and outcome",
    ["purpose", "provider", "outcome"],
)

CHAT_QUESTIONS = Counter(
    "commentlens_chat_questions_total",
    "Analytics chat questions by resolved template and outcome",
    ["template_id", "outcome"],
)

REWRITE_FALLBACKS = Counter(
    "commentlens_rewrite_fallbacks_total",
    "Comment rewrites that fell back to the original text",
    ["reason"],
)
