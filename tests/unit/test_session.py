"""Unit tests for ChatSession state and the stream timeout helper."""

import asyncio
import json

import pytest
import pytest_check as check

from palette_chat.models.schemas import AnalysisMode
from palette_chat.ui.client import StreamTimeoutError, iter_with_timeout
from palette_chat.ui.session import COLORS_MESSAGE, ChatSession

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 2048

PALETTE_TEXT = (
    "A beach.\n\nMain Colors:\n"
    "1. Name: Sand, Hex: #C2B280, RGB: (194, 178, 128)\n"
    "2. Name: Sea, Hex: #006994, RGB: (0, 105, 148)\n"
)


@pytest.fixture
def session() -> ChatSession:
    return ChatSession()


class TestBeginTurn:
    def test_nothing_to_send(self, session: ChatSession) -> None:
        check.is_none(session.begin_turn("   "))
        check.equal(session.messages, [])

    def test_rejects_non_image(self, session: ChatSession) -> None:
        with pytest.raises(ValueError, match="not an image"):
            session.select_image("notes.txt", b"hello", "text/plain")
        check.is_none(session.pending_image)

    def test_new_image_is_full_analysis(self, session: ChatSession) -> None:
        session.select_image("beach.png", PNG_BYTES, "image/png")

        turn = session.begin_turn("What beach is this?")

        check.equal(turn.mode, AnalysisMode.FULL)
        check.equal(turn.image.name, "beach.png")
        message = session.messages[0]
        check.equal(message.role, "user")
        expected = "What beach is this?\n\nSelected image: beach.png"
        check.is_true(message.content.startswith(expected))
        check.is_in("(2.0 KB)", message.content)
        check.is_true(message.image_preview.startswith("data:image/png;base64,"))
        check.is_none(session.pending_image)
        check.equal(session.last_image, turn.image)

    def test_text_after_upload_is_followup(self, session: ChatSession) -> None:
        session.select_image("beach.png", PNG_BYTES, "image/png")
        session.begin_turn("")
        session.apply_chunk(PALETTE_TEXT)
        session.complete_turn()

        turn = session.begin_turn("Is the sea calm?")

        check.equal(turn.mode, AnalysisMode.FOLLOWUP)
        check.equal(turn.image.name, "beach.png")
        fields = turn.form_fields()
        check.equal(fields["mode"], "followup")
        check.equal(fields["question"], "Is the sea calm?")
        palette = json.loads(fields["current_palette"])
        check.equal(palette[1], {"name": "Sea", "hex": "#006994", "rgb": "(0, 105, 148)"})

    def test_text_without_image_is_text_only(self, session: ChatSession) -> None:
        turn = session.begin_turn("Hello")

        check.equal(turn.mode, AnalysisMode.TEXT_ONLY)
        check.is_none(turn.image)

    def test_no_second_turn_while_streaming(self, session: ChatSession) -> None:
        session.begin_turn("Hello")

        check.is_none(session.begin_turn("Again"))


class TestStreaming:
    def test_partial_message_updates_in_place(self, session: ChatSession) -> None:
        session.select_image("beach.png", PNG_BYTES, "image/png")
        session.begin_turn("")

        check.is_false(session.apply_chunk("A bea"))
        check.is_false(session.apply_chunk("ch.\n\nMain Colors:\n"))

        check.equal(len(session.messages), 2)
        check.equal(session.response_message.content, "A beach.")

    def test_palette_changes_reported(self, session: ChatSession) -> None:
        session.select_image("beach.png", PNG_BYTES, "image/png")
        session.begin_turn("")

        check.is_true(session.apply_chunk(PALETTE_TEXT))
        check.equal([c.name for c in session.palette], ["Sand", "Sea"])
        check.is_false(session.apply_chunk(" "))

    def test_complete_full_turn_adds_colors_message(self, session: ChatSession) -> None:
        session.select_image("beach.png", PNG_BYTES, "image/png")
        session.begin_turn("")
        session.apply_chunk(PALETTE_TEXT)

        session.complete_turn()

        check.equal(session.messages[-1].content, COLORS_MESSAGE)
        check.is_false(session.is_streaming)

    def test_new_image_clears_old_palette(self, session: ChatSession) -> None:
        session.select_image("beach.png", PNG_BYTES, "image/png")
        session.begin_turn("")
        session.apply_chunk(PALETTE_TEXT)
        session.complete_turn()

        session.select_image("forest.png", PNG_BYTES, "image/png")
        session.begin_turn("")

        check.equal(session.palette, [])

    def test_text_only_ignores_color_lines(self, session: ChatSession) -> None:
        session.begin_turn("List some colors")

        check.is_false(session.apply_chunk(PALETTE_TEXT))
        check.equal(session.palette, [])
        check.is_in("Main Colors:", session.response_message.content)

    def test_failed_full_turn_clears_palette(self, session: ChatSession) -> None:
        session.select_image("beach.png", PNG_BYTES, "image/png")
        session.begin_turn("")
        session.apply_chunk(PALETTE_TEXT)

        session.fail_turn("Stream timeout")

        check.equal(session.messages[-1].content, "Error: Stream timeout")
        check.equal(session.palette, [])
        check.is_false(session.is_streaming)

    def test_failed_followup_keeps_palette(self, session: ChatSession) -> None:
        session.select_image("beach.png", PNG_BYTES, "image/png")
        session.begin_turn("")
        session.apply_chunk(PALETTE_TEXT)
        session.complete_turn()
        session.begin_turn("Why?")

        session.fail_turn("HTTP 500")

        check.equal(len(session.palette), 2)

    def test_palette_listener_sees_new_image_clear(self) -> None:
        """Starting a new image analysis announces the emptied palette."""
        changes: list[list[str]] = []
        session = ChatSession(
            on_palette_change=lambda: changes.append([c.name for c in session.palette])
        )
        session.select_image("beach.png", PNG_BYTES, "image/png")
        session.begin_turn("")
        session.apply_chunk(PALETTE_TEXT)
        session.complete_turn()

        session.select_image("forest.png", PNG_BYTES, "image/png")
        session.begin_turn("")

        check.equal(changes, [["Sand", "Sea"], []])

    def test_palette_listener_quiet_for_followup(self) -> None:
        changes: list[int] = []
        session = ChatSession(on_palette_change=lambda: changes.append(len(session.palette)))
        session.select_image("beach.png", PNG_BYTES, "image/png")
        session.begin_turn("")
        session.apply_chunk(PALETTE_TEXT)
        session.complete_turn()

        session.begin_turn("Is the sea calm?")
        session.fail_turn("HTTP 500")

        check.equal(changes, [2])

    def test_reset(self, session: ChatSession) -> None:
        session.select_image("beach.png", PNG_BYTES, "image/png")
        session.begin_turn("")

        session.reset()

        check.equal(session.messages, [])
        check.is_none(session.last_image)
        check.is_false(session.is_streaming)


class TestIterWithTimeout:
    async def test_passes_items_through(self) -> None:
        async def lines():
            yield "a"
            yield "b"

        items = [item async for item in iter_with_timeout(lines(), timeout=1.0)]

        assert items == ["a", "b"]

    async def test_raises_on_silence(self) -> None:
        async def stalled():
            yield "data: first"
            await asyncio.sleep(5)
            yield "data: never"

        received = []
        with pytest.raises(StreamTimeoutError, match="No data received for 0.05 seconds"):
            async for item in iter_with_timeout(stalled(), timeout=0.05):
                received.append(item)

        assert received == ["data: first"]
