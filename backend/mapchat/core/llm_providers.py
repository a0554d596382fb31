"""
LLM Provider Implementations
Supports a local Ollama server and any OpenAI-compatible endpoint with a unified interface.
"""
import httpx
import json
import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from mapchat.core.exceptions import LLMError
from mapchat.core.logger import logs

class BaseLLMProvider(ABC):
    """Base class for all LLM providers"""

    def __init__(self, model: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.model = model
        self.transport = transport

    @abstractmethod
    async def generate(
        self,
        messages: list,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
        timeout: float = 10.0,
    ) -> str:
        """Generate a complete response from the LLM"""
        pass

    @abstractmethod
    def stream(
        self,
        messages: list,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: float = 10.0,
    ) -> AsyncIterator[str]:
        """Yield content deltas as the LLM produces them"""
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the name of the provider"""
        pass


class OllamaProvider(BaseLLMProvider):
    """Ollama native chat API (/api/chat)"""

    def __init__(self, base_url: str, model: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(model, transport)
        self.base_url = f"{base_url.rstrip('/')}/api/chat"

    def _payload(self, messages: list, stream: bool, temperature: Optional[float], max_tokens: Optional[int]) -> dict:
        options = {}
        if max_tokens is not None:
            options["num_predict"] = max_tokens
        if temperature is not None:
            options["temperature"] = temperature

        payload = {
            "model": self.model,
            "messages": messages,
            "stream": stream,
        }
        if options:
            payload["options"] = options
        return payload

    async def generate(self, messages: list, temperature: Optional[float] = None, max_tokens: Optional[int] = None,
                       json_mode: bool = False, timeout: float = 10.0) -> str:
        payload = self._payload(messages, False, temperature, max_tokens)
        if json_mode:
            payload["format"] = "json"

        async with httpx.AsyncClient(transport=self.transport) as client:
            try:
                response = await client.post(self.base_url, json=payload, timeout=timeout)
                response.raise_for_status()
                data = response.json()
            except (httpx.HTTPError, ValueError) as e:
                logs.log(logging.ERROR, f"Ollama API error: {str(e)}")
                raise LLMError(f"Ollama API error: {str(e)}") from e

        content = (data.get("message") or {}).get("content")
        if not content:
            raise LLMError("Empty response from LLM")
        return content.strip()

    async def stream(self, messages: list, temperature: Optional[float] = None, max_tokens: Optional[int] = None,
                     timeout: float = 10.0) -> AsyncIterator[str]:
        payload = self._payload(messages, True, temperature, max_tokens)

        async with httpx.AsyncClient(transport=self.transport) as client:
            try:
                async with client.stream("POST", self.base_url, json=payload, timeout=timeout) as response:
                    response.raise_for_status()
                    # One JSON object per line, the stream simply ends when generation is done
                    async for line in response.aiter_lines():
                        if not line.strip():
                            continue
                        try:
                            frame = json.loads(line)
                        except ValueError:
                            logs.log(logging.DEBUG, f"Skipping malformed Ollama frame: {line[:80]}")
                            continue
                        if not isinstance(frame, dict):
                            logs.log(logging.DEBUG, f"Skipping malformed Ollama frame: {line[:80]}")
                            continue
                        if frame.get("error"):
                            logs.log(logging.WARNING, f"Ollama reported a stream error: {frame['error']}")
                            continue
                        message = frame.get("message")
                        if not isinstance(message, dict):
                            if message is not None:
                                logs.log(logging.DEBUG, f"Skipping malformed Ollama frame: {line[:80]}")
                            continue
                        content = message.get("content")
                        if isinstance(content, str) and content:
                            yield content
            except httpx.HTTPError as e:
                logs.log(logging.ERROR, f"Ollama stream error: {str(e)}")
                raise LLMError(f"Ollama stream error: {str(e)}") from e

    def get_provider_name(self) -> str:
        return "Ollama"


class OpenAIProvider(BaseLLMProvider):
    """OpenAI-compatible chat completions API (OpenAI, Groq, vLLM, Ollama /v1, ...)"""

    def __init__(self, base_url: str, api_key: str, model: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(model, transport)
        self.base_url = f"{base_url.rstrip('/')}/chat/completions"
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json"
        }

    def _payload(self, messages: list, stream: bool, temperature: Optional[float], max_tokens: Optional[int]) -> dict:
        payload = {
            "model": self.model,
            "messages": messages,
            "stream": stream,
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        return payload

    async def generate(self, messages: list, temperature: Optional[float] = None, max_tokens: Optional[int] = None,
                       json_mode: bool = False, timeout: float = 10.0) -> str:
        payload = self._payload(messages, False, temperature, max_tokens)
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        async with httpx.AsyncClient(transport=self.transport) as client:
            try:
                response = await client.post(self.base_url, json=payload, headers=self.headers, timeout=timeout)
                response.raise_for_status()
                data = response.json()
                content = data["choices"][0]["message"]["content"]
            except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as e:
                logs.log(logging.ERROR, f"OpenAI API error: {str(e)}")
                raise LLMError(f"OpenAI API error: {str(e)}") from e

        if not content:
            raise LLMError("Empty response from LLM")
        return content.strip()

    async def stream(self, messages: list, temperature: Optional[float] = None, max_tokens: Optional[int] = None,
                     timeout: float = 10.0) -> AsyncIterator[str]:
        payload = self._payload(messages, True, temperature, max_tokens)

        async with httpx.AsyncClient(transport=self.transport) as client:
            try:
                async with client.stream("POST", self.base_url, json=payload, headers=self.headers,
                                         timeout=timeout) as response:
                    response.raise_for_status()
                    async for line in response.aiter_lines():
                        if not line.startswith("data:"):
                            continue
                        data = line[len("data:"):].strip()
                        if data == "[DONE]":
                            break
                        try:
                            frame = json.loads(data)
                            content = frame["choices"][0]["delta"].get("content")
                        except (ValueError, KeyError, IndexError, TypeError, AttributeError):
                            logs.log(logging.DEBUG, f"Skipping malformed OpenAI frame: {data[:80]}")
                            continue
                        if content:
                            yield content
            except httpx.HTTPError as e:
                logs.log(logging.ERROR, f"OpenAI stream error: {str(e)}")
                raise LLMError(f"OpenAI stream error: {str(e)}") from e

    def get_provider_name(self) -> str:
        return "OpenAI-compatible"
