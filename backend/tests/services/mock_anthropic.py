"""Mock Anthropic Client: simulates the Messages API for provider tests.

Invariants:
    - MockAnthropicClient sequences responses (one per create_message call)
    - Exceptions in the response list are raised instead of returned
    - Every call's kwargs are recorded in `calls`

Design Decisions:
    - Flat mock classes (no inheritance): simple, explicit, easy to debug
    - Mocks the ResilientAnthropicClient boundary, not the raw SDK
"""


class _Block:
    """Mock content block (text)."""

    def __init__(self, **kwargs):
        for k, v in kwargs.items():
            setattr(self, k, v)


class _Usage:
    def __init__(self, input_tokens=100, output_tokens=50):
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens


class _Message:
    """Mock Message returned by create_message()."""

    def __init__(self, content, stop_reason="end_turn", tokens=(100, 50)):
        self.content = content
        self.stop_reason = stop_reason
        self.usage = _Usage(*tokens)


class MockAnthropicClient:
    """Replaces ResilientAnthropicClient. Sequences pre-configured responses."""

    def __init__(self, responses):
        self._responses = responses
        self._idx = 0
        self.calls = []

    async def create_message(self, **kwargs):
        self.calls.append(kwargs)
        if self._idx >= len(self._responses):
            raise RuntimeError(
                f"MockAnthropicClient: no response at index {self._idx} "
                f"(configured {len(self._responses)})",
            )
        resp = self._responses[self._idx]
        self._idx += 1
        if isinstance(resp, Exception):
            raise resp
        return resp


# -- Builder helpers -----------------------------------------------------------


def text_response(text, tokens=(100, 50)):
    """Build a text-only message."""
    return _Message([_Block(type="text", text=text)], tokens=tokens)


def empty_response():
    """Build a message with no text blocks."""
    return _Message([])
