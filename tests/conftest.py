import pytest

from core.state import ensure_session_defaults


class FakeSessionState(dict):
    """Dict with attribute access, like st.session_state."""

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name)

    def __setattr__(self, name, value):
        self[name] = value


class FakeLLM:
    def __init__(self, reply="30", error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    def generate(self, prompt, **kwargs):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.reply


@pytest.fixture
def session():
    state = FakeSessionState()
    ensure_session_defaults(state)
    return state


@pytest.fixture
def make_llm():
    return FakeLLM
