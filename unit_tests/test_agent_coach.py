# unit_tests/test_agent_coach.py
"""
Unit Tests for Coach Agent (Conversational Assistant)
=====================================================
Run with: python -m pytest unit_tests/test_agent_coach.py -v
"""

from agents.coach_agent import (
    FALLBACK_REPLY,
    GREETING,
    ChatAssistant,
    build_system_instruction,
)


def test_system_instruction_embeds_plan(plan):
    instruction = build_system_instruction(plan)

    assert plan.summary in instruction
    assert plan.nutritional_strategy in instruction
    assert plan.side_effect_management in instruction
    assert "pharmaceutical" in instruction
    assert "**bold**" in instruction


def test_transcript_starts_with_greeting(plan, mock_client_factory):
    assistant = ChatAssistant(plan, client=mock_client_factory())
    assert [m.role for m in assistant.messages] == ["assistant"]
    assert assistant.messages[0].text == GREETING


def test_send_appends_user_then_reply(plan, mock_client_factory, mock_chat_factory):
    print("\n" + "="*60)
    print("TEST 1: Send Message")
    print("="*60)

    chat = mock_chat_factory(replies=["Drink **2L** of water.", "Sure."])
    client = mock_client_factory(chat=chat)
    assistant = ChatAssistant(plan, client=client, model="test-model")

    reply = assistant.send("How much water?")
    assistant.send("Thanks")

    roles = [m.role for m in assistant.messages]
    assert roles == ["assistant", "user", "assistant", "user", "assistant"]
    assert assistant.messages[1].text == "How much water?"
    assert reply.text == "Drink **2L** of water."
    assert chat.sent == ["How much water?", "Thanks"]
    assert len(client.chats.created) == 1
    created = client.chats.created[0]
    assert created["model"] == "test-model"
    assert plan.summary in created["config"].system_instruction
    print("✅ Lazy session reused across messages")


def test_session_created_lazily(plan, mock_client_factory):
    client = mock_client_factory()
    ChatAssistant(plan, client=client)
    assert client.chats.created == []


def test_failure_appends_single_apology(plan, mock_client_factory, mock_chat_factory):
    print("\n" + "="*60)
    print("TEST 2: Chat Failure Fallback")
    print("="*60)

    client = mock_client_factory(chat=mock_chat_factory(error=TimeoutError("slow")))
    assistant = ChatAssistant(plan, client=client)

    reply = assistant.send("Can I eat rice?")

    assert reply.text == FALLBACK_REPLY
    assert [m.text for m in assistant.messages[1:]] == ["Can I eat rice?", FALLBACK_REPLY]
    assert assistant.is_loading is False
    print("✅ Apology appended, no exception")


def test_missing_credential_degrades(plan, monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    assistant = ChatAssistant(plan)

    assert assistant.is_available is False
    reply = assistant.send("Hello?")
    assert reply.text == FALLBACK_REPLY


def test_ignored_sends(plan, mock_client_factory):
    client = mock_client_factory()
    assistant = ChatAssistant(plan, client=client)

    assert assistant.send("   ") is None
    assistant.is_loading = True
    assert assistant.send("while busy") is None
    assert len(assistant.messages) == 1

    no_plan = ChatAssistant(None, client=client)
    assert no_plan.send("hi") is None
    assert client.chats.created == []
