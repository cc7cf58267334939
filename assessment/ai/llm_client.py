import os
import json
import logging
from typing import Any, Dict, List, Optional
import openai
from dotenv import load_dotenv

from ..logic.errors import ExternalServiceError, MalformedResponseError

# Load env vars (if not already loaded)
load_dotenv()

logger = logging.getLogger(__name__)

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")
OPENAI_EMBEDDING_MODEL = os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small")
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "20"))


class LLMClient:
    """
    Thin wrapper around the OpenAI client used for chat completions and embeddings.

    Every call is bounded by LLM_TIMEOUT_SECONDS and is never retried here;
    retries are the caller's decision. All failures surface as
    ExternalServiceError (or MalformedResponseError for unparseable JSON).
    """

    def __init__(self, api_key: Optional[str] = None, model: str = OPENAI_MODEL,
                 embedding_model: str = OPENAI_EMBEDDING_MODEL, timeout: float = LLM_TIMEOUT_SECONDS):
        self.api_key = api_key if api_key is not None else os.getenv("OPENAI_API_KEY")
        self.model = model
        self.embedding_model = embedding_model
        self.client = None
        if self.api_key:
            self.client = openai.OpenAI(api_key=self.api_key, timeout=timeout, max_retries=0)
        else:
            logger.warning("OPENAI_API_KEY not set. Generation and embedding calls will fail.")

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def _require_client(self):
        if not self.client:
            raise ExternalServiceError("OpenAI API key not configured")
        return self.client

    def _chat(self, messages: List[Dict[str, str]], temperature: float,
              max_tokens: Optional[int], json_mode: bool) -> str:
        client = self._require_client()
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens:
            kwargs["max_tokens"] = max_tokens
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = client.chat.completions.create(**kwargs)
        except openai.OpenAIError as e:
            raise ExternalServiceError(f"Chat completion failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        return content or ""

    @staticmethod
    def _messages(system: Optional[str], user: str) -> List[Dict[str, str]]:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": user})
        return messages

    def complete_json(self, user: str, system: Optional[str] = None,
                      temperature: float = 0.3, max_tokens: Optional[int] = None) -> Dict[str, Any]:
        """JSON-mode completion parsed into a dict."""
        content = self._chat(self._messages(system, user), temperature, max_tokens, json_mode=True)
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"Response is not valid JSON: {e}") from e
        if not isinstance(parsed, dict):
            raise MalformedResponseError("Response JSON is not an object")
        return parsed

    def complete_text(self, user: str, system: Optional[str] = None,
                      temperature: float = 0.7, max_tokens: Optional[int] = None) -> str:
        return self._chat(self._messages(system, user), temperature, max_tokens, json_mode=False)

    def embed(self, text: str) -> List[float]:
        client = self._require_client()
        try:
            response = client.embeddings.create(model=self.embedding_model, input=text)
        except openai.OpenAIError as e:
            raise ExternalServiceError(f"Embedding request failed: {e}") from e
        return list(response.data[0].embedding)


# Singleton instance
llm_client = LLMClient()
