"""End-to-end turns through the wired TurnEngine with a mock model."""

from datetime import timedelta

import pytest

from atelier.bootstrap import Components
from atelier.context.models import InboundMessage
from atelier.conversation.models import MessageRole, PendingState
from atelier.engine import GENERIC_FAILURE_REPLY
from atelier.errors import ValidationError
from atelier.generators.replies import QuickReply, TextReply
from atelier.intents import Intent
from atelier.jobs.workflows.memory_extraction import ExtractMemoriesInput
from atelier.profile.enums import Gender
from atelier.providers.llm import MockModelProvider
from atelier.providers.llm.base import ProviderError

USER = "15551230000"

VIBE_PAYLOAD = {
    "vibe_score": 7,
    "vibe_reply": "Solid",
    "categories": [{"heading": "Fit & Silhouette", "score": 7}],
    "reply_text": "Try a slimmer trouser.",
    "followup_text": None,
}


def _message(text: str = "", **fields) -> InboundMessage:
    return InboundMessage(external_user_id=USER, text=text, **fields)


class TestFirstContact:
    """A new user's first turn."""

    @pytest.mark.asyncio
    async def test_general_reply(
        self, components: Components, provider: MockModelProvider
    ) -> None:
        """Should open a conversation, reply and record both sides."""
        provider.set_response("intent_classification", {"intent": "general"})
        provider.set_response("general", {"reply_text": "Hi! How can I help?", "followup_text": None})

        result = await components.engine.handle_message(_message("hello", display_name="Ana"))

        assert result.error is None
        assert result.new_conversation is True
        assert result.intent == Intent.GENERAL
        assert result.pending == PendingState.NONE
        assert result.replies == [TextReply(text="Hi! How can I help?")]

        user = await components.user_store.get_by_external_id(USER)
        assert user.display_name == "Ana"
        messages = await components.conversation_store.list_messages(result.conversation_id)
        assert [(m.role, m.text) for m in messages] == [
            (MessageRole.USER, "hello"),
            (MessageRole.ASSISTANT, "Hi! How can I help?"),
        ]
        assert messages[0].intent == "general"

    @pytest.mark.asyncio
    async def test_blank_identity_raises(self, components: Components) -> None:
        """Should raise instead of replying when the sender id is blank."""
        with pytest.raises(ValidationError):
            await components.engine.handle_message(
                InboundMessage(external_user_id="   ", text="hello")
            )


class TestGenderGate:
    """Text advice waits for the user's gender."""

    @pytest.mark.asyncio
    async def test_ask_then_resume(
        self, components: Components, provider: MockModelProvider
    ) -> None:
        """Should ask for gender, then answer the original question."""
        provider.set_response("intent_classification", {"intent": "pairing"})
        provider.set_response("ask_user_info", {"text": "Should I style you as a man or a woman?"})
        provider.set_response(
            "pairing", {"reply_text": "Pair it with camel trousers.", "followup_text": None}
        )

        first = await components.engine.handle_message(
            _message("What goes with my navy blazer?")
        )

        assert first.generator == "ask_user_info"
        assert first.intent == Intent.PAIRING
        assert first.pending == PendingState.ASK_USER_INFO
        assert isinstance(first.replies[0], QuickReply)
        assert provider.calls_for("pairing") == []

        second = await components.engine.handle_message(_message("I'm a woman"))

        assert second.generator == "pairing"
        assert second.pending == PendingState.NONE
        assert second.replies == [TextReply(text="Pair it with camel trousers.")]
        assert len(provider.calls_for("intent_classification")) == 1
        user = await components.user_store.get_by_external_id(USER)
        assert user.confirmed_gender == Gender.FEMALE
        conversation = await components.conversation_store.get(second.conversation_id)
        assert conversation.pending_intent is None

    @pytest.mark.asyncio
    async def test_gender_button_resumes(
        self, components: Components, provider: MockModelProvider
    ) -> None:
        """Should accept the quick-reply payload as a stated gender."""
        provider.set_response("intent_classification", {"intent": "occasion"})
        provider.set_response("ask_user_info", {"text": "Man or woman?"})
        provider.set_response("occasion", {"reply_text": "A linen suit.", "followup_text": None})

        await components.engine.handle_message(_message("Outfit for a summer wedding?"))
        result = await components.engine.handle_message(_message(button_payload="gender:male"))

        assert result.generator == "occasion"
        user = await components.user_store.get_by_external_id(USER)
        assert user.confirmed_gender == Gender.MALE


class TestVibeCheckFlow:
    """Photo requests, failures and the recorded result."""

    @pytest.mark.asyncio
    async def test_request_fail_then_record(
        self, components: Components, provider: MockModelProvider
    ) -> None:
        """Should ask for a photo, survive a bad payload and record a good one."""
        provider.set_response("intent_classification", {"intent": "vibe_check"})

        asked = await components.engine.handle_message(_message("rate my outfit"))
        conversation = await components.conversation_store.get(asked.conversation_id)
        assert conversation.awaiting_image_for == "vibe_check"
        assert provider.calls_for("vibe_check") == []

        provider.queue_response("vibe_check", {k: v for k, v in VIBE_PAYLOAD.items() if k != "categories"})
        failed = await components.engine.handle_message(_message(file_id="file-1"))

        assert failed.error == "OutputValidationError"
        assert failed.replies == [TextReply(text=GENERIC_FAILURE_REPLY)]
        user = await components.user_store.get_by_external_id(USER)
        assert await components.styling_store.list_vibe_checks(user.id) == []

        provider.queue_response("vibe_check", VIBE_PAYLOAD)
        rated = await components.engine.handle_message(_message(file_id="file-2"))

        assert rated.error is None
        assert rated.intent == Intent.VIBE_CHECK
        assert rated.replies[0].text.startswith("Vibe Check\n- Fit & Silhouette: 7")
        [record] = await components.styling_store.list_vibe_checks(user.id)
        assert record.overall_score == 7
        conversation = await components.conversation_store.get(rated.conversation_id)
        assert conversation.awaiting_image_for is None
        assert len(provider.calls_for("intent_classification")) == 1

    @pytest.mark.asyncio
    async def test_rated_outfit_fills_wardrobe(
        self, components: Components, provider: MockModelProvider
    ) -> None:
        """Should index the rated photo and feed the wardrobe to later advice."""
        provider.set_response("intent_classification", {"intent": "vibe_check"})
        provider.set_response("vibe_check", VIBE_PAYLOAD)
        provider.set_response(
            "wardrobe_index",
            {
                "status": "ok",
                "items": [
                    {
                        "category": "outerwear",
                        "type": "trench coat",
                        "subtype": None,
                        "attributes": {
                            "style": "classic",
                            "pattern": None,
                            "color_primary": "beige",
                            "color_secondary": None,
                            "material": None,
                            "fit": None,
                            "length": "midi",
                            "details": None,
                        },
                    }
                ],
            },
        )

        rated = await components.engine.handle_message(_message(file_id="file-9"))

        assert rated.error is None
        [item] = await components.styling_store.list_wardrobe(rated.user_id)
        assert (item.name, item.category, item.colors) == ("trench coat", "outerwear", ["beige"])

        provider.set_response("intent_classification", {"intent": "pairing"})
        provider.set_response("pairing", {"reply_text": "Dark jeans.", "followup_text": None})
        await components.engine.handle_message(_message("I'm a woman. What goes with my coat?"))

        [request] = provider.calls_for("pairing")
        rendered = "\n".join(m.content for m in request.messages if isinstance(m.content, str))
        assert "trench coat (trench coat, beige)" in rendered

    @pytest.mark.asyncio
    async def test_indexing_failure_keeps_rating(
        self, components: Components, provider: MockModelProvider
    ) -> None:
        """Should still send the rating when wardrobe indexing fails."""
        provider.set_response("intent_classification", {"intent": "vibe_check"})
        provider.set_response("vibe_check", VIBE_PAYLOAD)
        provider.set_response("wardrobe_index", ProviderError("connection reset"))

        rated = await components.engine.handle_message(_message(file_id="file-3"))

        assert rated.error is None
        assert rated.replies[0].text.startswith("Vibe Check")
        assert await components.styling_store.list_wardrobe(rated.user_id) == []
        [record] = await components.styling_store.list_vibe_checks(rated.user_id)
        assert record.overall_score == 7


class TestFailures:
    """Turn-level failure handling."""

    @pytest.mark.asyncio
    async def test_provider_error_gives_apology(
        self, components: Components, provider: MockModelProvider
    ) -> None:
        """Should reply with the generic apology and record nothing."""
        provider.set_response("intent_classification", ProviderError("connection reset"))

        result = await components.engine.handle_message(_message("hello"))

        assert result.error == "ProviderError"
        assert result.replies == [TextReply(text=GENERIC_FAILURE_REPLY)]
        assert result.conversation_id is not None
        assert await components.conversation_store.list_messages(result.conversation_id) == []

    @pytest.mark.asyncio
    async def test_blank_advice_text_gives_apology(
        self, components: Components, provider: MockModelProvider
    ) -> None:
        """Should treat a blank reply_text as invalid output, not crash the turn."""
        provider.set_response("intent_classification", {"intent": "general"})
        provider.set_response("general", {"reply_text": "", "followup_text": None})

        result = await components.engine.handle_message(_message("hello"))

        assert result.error == "OutputValidationError"
        assert result.replies == [TextReply(text=GENERIC_FAILURE_REPLY)]

    @pytest.mark.asyncio
    async def test_blank_question_gives_apology(
        self, components: Components, provider: MockModelProvider
    ) -> None:
        """Should treat a blank profile question as invalid output."""
        provider.set_response("intent_classification", {"intent": "pairing"})
        provider.set_response("ask_user_info", {"text": "  "})

        result = await components.engine.handle_message(_message("What goes with my navy blazer?"))

        assert result.error == "OutputValidationError"
        assert result.replies == [TextReply(text=GENERIC_FAILURE_REPLY)]
        assert provider.calls_for("pairing") == []


class TestConversationRotation:
    """Idle conversations are closed and mined for memories."""

    @pytest.mark.asyncio
    async def test_stale_conversation_rotates(
        self, components: Components, provider: MockModelProvider, clock
    ) -> None:
        """Should open a new conversation and queue extraction for the old one."""
        provider.set_response("intent_classification", {"intent": "general"})
        provider.set_response("general", {"reply_text": "Noted!", "followup_text": None})
        provider.set_response(
            "memory_extraction",
            {"memories": [{"key": "shoe_size", "value": "42", "category": "size", "confidence": 0.9}]},
        )

        first = await components.engine.handle_message(_message("I wear a size 42 shoe"))
        clock.advance(timedelta(minutes=31))
        second = await components.engine.handle_message(_message("hi again"))
        await components.session_manager.drain()

        assert second.new_conversation is True
        assert second.conversation_id != first.conversation_id
        assert components.job_queue.memory_extractions == [
            ExtractMemoriesInput(user_id=str(first.user_id), conversation_id=str(first.conversation_id))
        ]

        output = await components.memory_workflow.run(components.job_queue.memory_extractions[0])

        assert output.success is True
        assert output.memories_created == 1
        [memory] = await components.memory_store.list_for_user(first.user_id)
        assert memory.key == "shoe_size"
