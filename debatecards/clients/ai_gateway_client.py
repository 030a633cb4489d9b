from typing import Any, Dict, List, Optional

from debatecards.config.settings import settings
from debatecards.clients.base_http_client import BaseHTTPClient


class AIGatewayClient(BaseHTTPClient):
    """OpenAI-compatible chat completions client for the LLM gateway."""

    SERVICE_NAME = "ai_gateway"

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 model: Optional[str] = None, timeout: Optional[float] = None):
        super().__init__(
            base_url=base_url or settings.AI_GATEWAY_URL,
            timeout=timeout or settings.AI_TIMEOUT,
            max_retries=1,
            retry_delay=1.0,
            api_key=api_key,
        )
        self.model = model or settings.AI_MODEL

    def _setup_authentication(self):
        self.session.headers.update({"Authorization": f"Bearer {self.api_key}"})

    def chat_completion(self, messages: List[Dict[str, str]],
                        tools: Optional[List[Dict[str, Any]]] = None,
                        tool_choice: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"model": self.model, "messages": messages}
        if tools:
            body["tools"] = tools
        if tool_choice:
            body["tool_choice"] = tool_choice
        return self.post(endpoint="/chat/completions", data=body)
