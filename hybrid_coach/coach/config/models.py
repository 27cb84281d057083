"""LLM model configuration for HybridOne Coach.

Centralized model definitions:
- Conversational coach: GPT-4o
- Plan synthesis (structured JSON output): GPT-4o
"""

# Conversational coach (tool-enabled)
COACH_CHAT_MODEL = "gpt-4o"

# Schema-constrained plan generation
PLAN_SYNTHESIS_MODEL = "gpt-4o"
