"""
NutriPlan AI — Coach Agent (Conversational Assistant)
=====================================================
Chat session seeded with the generated plan. Never hard-fails: any error
during a round trip becomes one apology message in the transcript.
"""

from typing import Any, List, Optional

from google.genai import types

from agents.planner_agent import DEFAULT_MODEL, get_api_key, get_gemini_client
from agents.schemas import ChatMessage, GeneratedPlan

# =============================================================================
# CONFIGURATION
# =============================================================================
GREETING = (
    "Hi! I'm your virtual nutritionist. How can I help you with your "
    "meal plan and habits today?"
)
FALLBACK_REPLY = "Sorry, I had a problem processing your answer. Please try again."


def build_system_instruction(plan: GeneratedPlan) -> str:
    return f"""
You are a Nutritionist and Lifestyle Coach specialised in healthy weight loss.

BEHAVIOUR RULES:
1. Be objective, concise and direct.
2. When the user asks something specific, give the direct answer followed by a brief explanation.
3. DO NOT mention, recommend or discuss any specific pharmaceutical or medication.
4. USE FORMATTING: line breaks between paragraphs, hyphens or asterisks for lists, **bold** for keywords.

USER CONTEXT (GENERATED PLAN):
{plan.summary}

STRATEGY:
{plan.nutritional_strategy}

GENERAL TIPS:
{plan.side_effect_management}

Always answer in the same language the user writes in.
"""


# =============================================================================
# CHAT ASSISTANT
# =============================================================================
class ChatAssistant:
    """Session-scoped chat bound to one plan."""

    def __init__(
        self,
        plan: Optional[GeneratedPlan],
        client: Optional[Any] = None,
        model: str = DEFAULT_MODEL,
    ):
        self.plan = plan
        self.model = model
        self.messages: List[ChatMessage] = [ChatMessage(role="assistant", text=GREETING)]
        self.is_loading = False
        self._client = client
        self._session = None

    @property
    def is_available(self) -> bool:
        return self._client is not None or bool(get_api_key())

    def _ensure_session(self):
        """Create the Gemini chat on first use; reuse it afterwards."""
        if self._session is None:
            client = self._client or get_gemini_client()
            self._session = client.chats.create(
                model=self.model,
                config=types.GenerateContentConfig(
                    system_instruction=build_system_instruction(self.plan)
                ),
            )
            print("💬 Coach Agent: chat session created")
        return self._session

    def send(self, text: str) -> Optional[ChatMessage]:
        """
        Append the user's message, then the assistant's reply.

        Returns the appended reply, or None when the message was ignored
        (blank input, no plan, or a reply still pending).
        """
        if not text or not text.strip() or self.plan is None or self.is_loading:
            return None

        self.messages.append(ChatMessage(role="user", text=text))
        self.is_loading = True
        try:
            session = self._ensure_session()
            result = session.send_message(text)
            reply_text = getattr(result, "text", None)
            if not reply_text:
                raise ValueError("empty reply")
            reply = ChatMessage(role="assistant", text=reply_text)
        except Exception as e:
            print(f"⚠️ Chat error: {e}")
            reply = ChatMessage(role="assistant", text=FALLBACK_REPLY)
        finally:
            self.is_loading = False

        self.messages.append(reply)
        return reply


__all__ = [
    "ChatAssistant",
    "build_system_instruction",
    "GREETING",
    "FALLBACK_REPLY",
]
