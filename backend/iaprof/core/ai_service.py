"""
Cliente fino sobre o LangChain para o Gemini.

Três formas de chamada: prompt com schema de saída, conteúdo multimodal
(imagem + texto) com schema de saída, e texto livre. Toda chamada é
cronometrada e logada; exceções do provedor sobem sem tratamento para que
a camada de domínio decida o que fazer com elas.
"""

import time
from contextlib import contextmanager
from typing import Dict, List, Optional, Type

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_core.prompts import ChatPromptTemplate
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import BaseModel

from .logging import get_logger

SUPPORTED_PROVIDERS = ("google",)


class LangChainService:
    def __init__(self, provider: str, api_key: str, model_name: str, temperature: float = 0.2):
        """
        Args:
            provider: só 'google' (Gemini) é aceito.
            api_key: chave do Google AI Studio.
            model_name: ex. 'gemini-3-flash-preview'.
            temperature: 0.0 determinístico, 1.0 criativo.
        """
        self.logger = get_logger("ai_service").bind(model=model_name, temperature=temperature)
        if provider not in SUPPORTED_PROVIDERS:
            self.logger.error("Unsupported AI provider", provider=provider)
            raise ValueError(f"Provedor '{provider}' não suportado.")

        self.provider = provider
        self.model_name = model_name
        self.temperature = temperature
        self.llm = ChatGoogleGenerativeAI(model=model_name, google_api_key=api_key, temperature=temperature)
        self.logger.debug("AI client ready", provider=provider)

    @contextmanager
    def _timed(self, kind: str, **fields):
        self.logger.info("Gemini call started", kind=kind, **fields)
        started = time.time()
        try:
            yield
        except Exception as e:
            self.logger.error(
                "Gemini call failed",
                kind=kind,
                elapsed_ms=round((time.time() - started) * 1000, 2),
                error=str(e),
                error_type=type(e).__name__,
                **fields,
            )
            raise
        self.logger.info("Gemini call finished", kind=kind, elapsed_ms=round((time.time() - started) * 1000, 2), **fields)

    def _build_messages(self, template: str, values: Dict, system_instruction: Optional[str]) -> List[BaseMessage]:
        roles = [("system", system_instruction)] if system_instruction else []
        roles.append(("human", template))
        return ChatPromptTemplate.from_messages(roles).format_messages(**values)

    def _invoke_structured(self, messages: List[BaseMessage], response_schema: Type[BaseModel]) -> BaseModel:
        parsed = self.llm.with_structured_output(response_schema).invoke(messages)
        if parsed is None:
            raise ValueError(f"O modelo não retornou um {response_schema.__name__} válido")
        return parsed

    def generate_structured_output(
        self,
        prompt_template: str,
        prompt_input: Dict,
        response_schema: Type[BaseModel],
        system_instruction: Optional[str] = None,
    ) -> BaseModel:
        """Preenche o template com prompt_input e devolve uma instância de response_schema."""
        values = prompt_input or {}
        with self._timed("structured", schema=response_schema.__name__, inputs=sorted(values)):
            messages = self._build_messages(prompt_template, values, system_instruction)
            return self._invoke_structured(messages, response_schema)

    def generate_structured_output_from_content(
        self,
        content_parts: List[Dict],
        response_schema: Type[BaseModel],
        system_instruction: Optional[str] = None,
    ) -> BaseModel:
        """Mesma ideia, mas com blocos de conteúdo prontos (imagem em base64 + instrução)."""
        part_types = [part.get("type", "unknown") for part in content_parts]
        with self._timed("multimodal", schema=response_schema.__name__, parts=part_types):
            messages: List[BaseMessage] = [SystemMessage(content=system_instruction)] if system_instruction else []
            messages.append(HumanMessage(content=content_parts))
            return self._invoke_structured(messages, response_schema)

    def generate_text(self, prompt_template: str, prompt_input: Dict, system_instruction: Optional[str] = None) -> str:
        values = prompt_input or {}
        with self._timed("text", inputs=sorted(values)):
            reply = self.llm.invoke(self._build_messages(prompt_template, values, system_instruction))
            return message_text(reply)


def message_text(message) -> str:
    """Texto de uma AIMessage; o Gemini às vezes devolve o conteúdo em blocos."""
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content.strip()
    if not isinstance(content, list):
        return ""
    chunks = [
        block if isinstance(block, str) else block.get("text", "")
        for block in content
        if isinstance(block, str) or (isinstance(block, dict) and block.get("type") == "text")
    ]
    return "".join(chunks).strip()
