"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Send a single prompt to the Groq chat completion endpoint.
- Return the raw response text; interpreting it is the caller's job.
- Surface provider failures as retryable upstream errors.
"""
