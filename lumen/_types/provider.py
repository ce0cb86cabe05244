from enum import Enum


class ProviderType(str, Enum):
    """Supported completion backends."""

    OPENAI = "openai"
    PHIND = "phind"
    GROQ = "groq"
    CLAUDE = "claude"
    OLLAMA = "ollama"
