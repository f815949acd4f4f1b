"""OpenAI 兼容 Provider 适配器。

OpenAI / Kimi / GLM 均使用同一套 chat/completions 端点：
- URL: {base_url}/chat/completions
- 认证: Authorization: Bearer <api_key>

本实现只依赖公共字段：model/messages/temperature/max_tokens/stream，
不做流式输出，也不做重试。
"""

from typing import Any, Dict, Optional

import httpx

from chatdesk_core.domain.exceptions import ApiError, NetworkError, RateLimitError, ValidationError
from chatdesk_core.domain.models import (
    ChatChoice,
    ChatMessage,
    ChatRequest,
    ChatResult,
    ChatUsage,
)
from chatdesk_core.infrastructure.logging.logger import logger
from chatdesk_core.providers.registry import ProviderConfig


class ChatCompletionsClient:
    """chat/completions 客户端。

    - name: Provider 名称（供日志使用）。
    - chat: 统一调用入口，返回 ChatResult。
    - send_message: 单条提示词 -> 回复文本。
    """

    def __init__(self, settings, provider_cfg: ProviderConfig):
        # settings 里包含 api_key、base_url/model 覆盖、超时等配置
        self._settings = settings
        self._provider_cfg = provider_cfg
        self.name = provider_cfg.name

    @property
    def base_url(self) -> str:
        base = getattr(self._settings, "base_url", None) or self._provider_cfg.base_url
        return base.rstrip("/")

    @property
    def model(self) -> str:
        return getattr(self._settings, "model", None) or self._provider_cfg.default_model

    def chat(self, req: ChatRequest) -> ChatResult:
        if not getattr(self._settings, "api_key", None):
            raise ValidationError(code="MISSING_API_KEY", message=f"API key for {self.name} not set")
        payload = self._build_payload(req)
        logger.debug(
            "chat request",
            extra={"extra": {"provider": self.name, "model": payload["model"], "messages": len(payload["messages"])}},
        )
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self._settings.api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.RequestError as e:
            # DNS 失败、连接超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e) or type(e).__name__, provider=self.name)
        if resp.status_code == 429:
            raise RateLimitError(code="RATE_LIMIT", message=f"{self.name} rate limit", provider=self.name)
        if resp.status_code >= 400:
            raise ApiError(code="API_ERROR", message=resp.text, http_status=resp.status_code, provider=self.name)
        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError(code="API_ERROR", message=f"Invalid JSON response: {e}", provider=self.name)
        return self._parse_response(data, payload["model"])

    def send_message(self, prompt: str) -> str:
        req = ChatRequest(
            messages=[ChatMessage(role="user", content=prompt)],
            temperature=self._settings.temperature,
            max_tokens=self._settings.max_tokens,
        )
        return self.chat(req).text

    # ---- 辅助方法 ----

    def _build_payload(self, req: ChatRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": req.model or self.model,
            "messages": [m.to_dict() for m in req.messages],
            "temperature": req.temperature,
            "stream": False,
        }
        if req.max_tokens:
            payload["max_tokens"] = req.max_tokens
        return payload

    def _parse_response(self, data: Any, model: str) -> ChatResult:
        if not isinstance(data, dict):
            raise ApiError(code="API_ERROR", message="Unexpected response: body is not a JSON object", provider=self.name)
        raw_choices = data.get("choices")
        if not isinstance(raw_choices, list) or not raw_choices:
            raise ApiError(
                code="API_ERROR",
                message=f"Unexpected response: no choices ({str(data)[:200]})",
                provider=self.name,
            )
        choices: list[ChatChoice] = []
        for i, ch in enumerate(raw_choices):
            if not isinstance(ch, dict) or not isinstance(ch.get("message") or {}, dict):
                raise ApiError(code="API_ERROR", message=f"Unexpected response: malformed choice {i}", provider=self.name)
            msg = ChatMessage.from_dict(ch.get("message") or {})
            choices.append(ChatChoice(index=ch.get("index", i), message=msg, finish_reason=ch.get("finish_reason")))
        return ChatResult(
            provider=self.name,
            model=data.get("model") or model,
            choices=choices,
            usage=self._parse_usage(data.get("usage")),
            raw=data,
        )

    @staticmethod
    def _parse_usage(raw: Optional[Dict[str, Any]]) -> Optional[ChatUsage]:
        if not raw or not isinstance(raw, dict):
            return None
        return ChatUsage(
            prompt_tokens=raw.get("prompt_tokens", 0),
            completion_tokens=raw.get("completion_tokens", 0),
            total_tokens=raw.get("total_tokens", 0),
        )
