import json
import re
from typing import Any, Dict, List, Optional

from debatecards.clients.ai_gateway_client import AIGatewayClient
from debatecards.config.settings import settings
from debatecards.core.exceptions.exceptions import GatewayNotConfiguredError, InvalidGatewayResponseError
from debatecards.middleware.security import Security
from debatecards.schemas.cards import DebateCard
from debatecards.services.prompts import CARD_COUNT, CARD_TOOL, CARD_TOOL_CHOICE, build_messages
from debatecards.utils.log import app_logger

_FENCE_START = re.compile(r'^```(?:json)?\s*\n')
_FENCE_END = re.compile(r'\n?```\s*$')


class CardGeneratorService:
    """Asks the LLM gateway for debate cards on a topic and normalizes the answer.

    The model is forced to call the `return_debate_cards` tool; plain message content
    (optionally wrapped in a ```json fence) is accepted as a fallback.
    """

    def __init__(self, client: Optional[AIGatewayClient] = None):
        self.security = Security()
        self.client = client
        self._owns_client = False

    def _get_client(self) -> AIGatewayClient:
        if self.client is None:
            if not settings.AI_GATEWAY_API_KEY:
                app_logger.error("cards.gateway_not_configured")
                raise GatewayNotConfiguredError()
            self.client = AIGatewayClient(api_key=settings.AI_GATEWAY_API_KEY)
            self._owns_client = True
        return self.client

    def close(self):
        """Release the gateway session if this service opened it."""
        if self._owns_client and self.client is not None:
            self.client.close()
            self.client = None
            self._owns_client = False

    def generate(self, topic: str) -> List[DebateCard]:
        topic = self.security.validate_topic(topic)
        client = self._get_client()

        app_logger.info("cards.generate", topic=topic, model=client.model)
        data = client.chat_completion(build_messages(topic), tools=[CARD_TOOL], tool_choice=CARD_TOOL_CHOICE)

        parsed = self.parse_response(data)
        raw_cards = parsed.get("cards") if isinstance(parsed, dict) else None
        if not isinstance(raw_cards, list):
            app_logger.error("cards.invalid_response", response=str(data)[:1000])
            raise InvalidGatewayResponseError()

        cards = [self.normalize(c) for c in raw_cards]
        cards = [c for c in cards if c.tagline or c.evidence][:CARD_COUNT]
        if not cards:
            raise InvalidGatewayResponseError("AI returned no cards")

        app_logger.info("cards.generated", topic=topic, count=len(cards))
        return cards

    @staticmethod
    def parse_response(data: Dict[str, Any]) -> Optional[Any]:
        """Extract the cards object from a chat completion; None when nothing parses."""
        try:
            message = data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError):
            return None

        try:
            tool_calls = message.get("tool_calls") or []
            if tool_calls:
                return json.loads(tool_calls[0]["function"]["arguments"])

            content = message.get("content")
            if isinstance(content, str):
                content = _FENCE_END.sub('', _FENCE_START.sub('', content.strip()))
                return json.loads(content)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            app_logger.warning("cards.parse_failed", error=str(e))
        return None

    @staticmethod
    def normalize(raw: Any) -> DebateCard:
        raw = raw if isinstance(raw, dict) else {}

        def field(name: str) -> str:
            value = raw.get(name)
            return "" if value is None else str(value)

        return DebateCard(
            tagline=field("tagline"),
            evidence=field("evidence"),
            citation=field("citation"),
            link=field("link"),
        )
