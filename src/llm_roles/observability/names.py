# src/llm_roles/observability/names.py

"""Standard metric names for llm-roles observability.

Use these constants instead of hardcoded strings for consistency
across the codebase.

Note: All duration metrics are in milliseconds by convention.
Units are handled by the metrics backend (e.g., converted to seconds in Prometheus).
"""

# ============================================================================
# LLM Metrics
# ============================================================================

# Duration
LLM_COMPLETION_DURATION = "llm_completion_duration"

# Counters
LLM_REQUESTS_TOTAL = "llm_requests_total"
LLM_ERRORS_TOTAL = "llm_errors_total"
LLM_RETRIES_TOTAL = "llm_retries_total"

# Counters (token usage - monotonic over time for cost/rate tracking)
LLM_TOKENS_PROMPT = "llm_tokens_prompt"
LLM_TOKENS_COMPLETION = "llm_tokens_completion"
LLM_TOKENS_TOTAL = "llm_tokens_total"

# Gauges (cost is fractional, so it is reported per call rather than counted)
LLM_COST = "llm_cost"


# ============================================================================
# Streaming Metrics
# ============================================================================

# Counters
LLM_STREAMS_TOTAL = "llm_streams_total"
LLM_STREAM_CHUNKS_SKIPPED = "llm_stream_chunks_skipped"


# ============================================================================
# Role Manager Metrics
# ============================================================================

# Counters
ROLE_USAGE_UPDATES_TOTAL = "role_usage_updates_total"
