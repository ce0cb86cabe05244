from typing import Dict, FrozenSet

from lumen._types.provider import ProviderType

ENDPOINTS: Dict[ProviderType, str] = {
    ProviderType.OPENAI: "https://api.openai.com/v1/chat/completions",
    ProviderType.PHIND: "https://https.extension.phind.com/agent/",
    ProviderType.GROQ: "https://api.groq.com/openai/v1/chat/completions",
    ProviderType.CLAUDE: "https://api.anthropic.com/v1/messages",
    ProviderType.OLLAMA: "http://localhost:11434/api/chat",
}

DEFAULT_MODELS: Dict[ProviderType, str] = {
    ProviderType.OPENAI: "gpt-4o-mini",
    ProviderType.PHIND: "Phind-70B",
    ProviderType.GROQ: "mixtral-8x7b-32768",
    ProviderType.CLAUDE: "claude-3-5-sonnet-20241022",
    ProviderType.OLLAMA: "llama3.2",
}

# Local or keyless backends are absent from this set.
REQUIRES_API_KEY: FrozenSet[ProviderType] = frozenset(
    {ProviderType.OPENAI, ProviderType.GROQ, ProviderType.CLAUDE}
)

ANTHROPIC_VERSION: str = "2023-06-01"
CLAUDE_MAX_TOKENS: int = 4096

SSE_DATA_PREFIX: str = "data:"
SSE_DONE: str = "[DONE]"
