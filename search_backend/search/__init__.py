"""
Natural-language restaurant search.

Responsibilities:
- Turn free-text queries into a structured, normalized intent via the LLM.
- Remember intents per normalized query text so repeated queries skip the LLM.
- Match intents against the persisted search index with conjunctive filters.
- Return a capped result set ready for API serialisation.
"""
