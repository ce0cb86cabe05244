from typing import Any, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, model_validator

from lumen._data.providers import DEFAULT_MODELS, ENDPOINTS, REQUIRES_API_KEY
from lumen._types.errors import ProviderConfigError
from lumen._types.git import GitEntity
from lumen._types.provider import ProviderType


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    text: str


class Conversation(BaseModel):
    model_config = ConfigDict(frozen=True)

    messages: Tuple[Message, ...]

    @property
    def system_text(self) -> str:
        return "\n\n".join(m.text for m in self.messages if m.role == "system")

    @property
    def last_user_text(self) -> str:
        for message in reversed(self.messages):
            if message.role == "user":
                return message.text
        return ""


class ProviderConfig(BaseModel):
    """
    Backend selection for a single run.

    Built once at startup. A variant that needs an API key refuses to
    construct without one, so a bad setup fails before any command runs.
    """

    model_config = ConfigDict(frozen=True)

    variant: ProviderType
    api_key: Optional[str] = None
    model: Optional[str] = None

    @model_validator(mode="after")
    def _check_credentials(self) -> "ProviderConfig":
        if self.variant in REQUIRES_API_KEY and not self.api_key:
            raise ProviderConfigError(
                f"provider '{self.variant.value}' requires an API key "
                "(use --api-key or LUMEN_API_KEY)"
            )
        if self.model is not None and not self.model.strip():
            raise ProviderConfigError("model override must not be blank")
        return self

    @property
    def endpoint(self) -> str:
        return ENDPOINTS[self.variant]

    @property
    def effective_model(self) -> str:
        return self.model or DEFAULT_MODELS[self.variant]


class RequestSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    headers: Dict[str, str]
    body: Dict[str, Any]


class StreamFragment(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    done: bool = False


class ExplainIntent(BaseModel):
    model_config = ConfigDict(frozen=True)

    entity: GitEntity
    question: Optional[str] = None


class ListIntent(BaseModel):
    model_config = ConfigDict(frozen=True)


class DraftIntent(BaseModel):
    model_config = ConfigDict(frozen=True)

    context: Optional[str] = None


CommandIntent = Union[ExplainIntent, ListIntent, DraftIntent]
