"""Prompt templates and the function-tool schema sent to the LLM gateway."""

CARD_COUNT = 3
CARD_TOOL_NAME = "return_debate_cards"

SYSTEM_PROMPT = """You are formatting debate evidence for Public Forum style with visual emphasis for spoken delivery.

Create a card using this exact structure:

Tagline: [10-18 word argumentative claim summarizing what this evidence proves.]
Citation: [Author or Organization], [Year or "No Date"]. "[Full article title]." *[Publication Name].* [Verified URL], accessed [MM-DD-YYYY]; [Initials].
Evidence: "[Verbatim quote from the article (1-3 sentences). Use HTML tags:
- <mark>phrase</mark> wraps the portion read aloud (roughly 50-70% of main sentence)
- <b>word/phrase</b> INSIDE <mark> for strongest emphasis on key words
- <u>phrase</u> INSIDE <mark> for secondary emphasis
Example: "<mark>Climate change <b>accelerates extinction rates</b> by <u>disrupting ecosystems</u> and <b>reducing biodiversity</b>.</mark>"
Ensure proper punctuation and readability.]"

Required Output: JSON object with 'cards' array of exactly 3 items. Each card must include:
- tagline: Short argumentative claim (10-18 words max)
- citation: Format as shown above with all fields
- evidence: Verbatim quote with <mark>, <b>, and <u> HTML tags properly nested. Must be wrapped in quotation marks.
- link: Full working URL to source

Rules:
- Do not paraphrase; quote directly
- Always include quotation marks around evidence
- Highlight (<mark>) roughly 50-70% of the main sentence that a debater would read
- Use <b> and <u> INSIDE <mark> tags for layered emphasis - never outside
- Bold (<b>) is for strongest emphasis, underline (<u>) for supporting emphasis
- Use HTML entities correctly
- Evidence must be direct quotes with HTML formatting
- Tagline should be a claim, not a fragment
- Use realistic academic sources with proper citations"""

USER_PROMPT_TEMPLATE = (
    'Generate {count} debate cards for the topic: "{topic}". Make arguments thoughtful, well-reasoned, '
    'and diverse. Use realistic academic sources with proper citations and working URLs.'
)


def build_messages(topic: str) -> list:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": USER_PROMPT_TEMPLATE.format(count=CARD_COUNT, topic=topic)},
    ]


CARD_TOOL = {
    "type": "function",
    "function": {
        "name": CARD_TOOL_NAME,
        "description": "Return exactly 3 debate cards with tagline, evidence, citation, and link.",
        "parameters": {
            "type": "object",
            "properties": {
                "cards": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "tagline": {"type": "string"},
                            "evidence": {"type": "string"},
                            "citation": {"type": "string"},
                            "link": {"type": "string"},
                        },
                        "required": ["tagline", "evidence", "citation", "link"],
                        "additionalProperties": False,
                    },
                    "minItems": CARD_COUNT,
                    "maxItems": CARD_COUNT,
                },
            },
            "required": ["cards"],
            "additionalProperties": False,
        },
    },
}

CARD_TOOL_CHOICE = {"type": "function", "function": {"name": CARD_TOOL_NAME}}
