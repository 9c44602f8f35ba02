"""NiceGUI chat interface with SSE streaming and a live color palette."""

import logging
import os

from nicegui import events, ui

from palette_chat.models.schemas import ChatMessage, ColorEntry
from palette_chat.parsing.palette_export import (
    JSON_FILENAME,
    PNG_FILENAME,
    export_palette_json,
    export_palette_png,
)
from palette_chat.parsing.palette_parser import contrast_text_color
from palette_chat.ui.client import stream_chat_response
from palette_chat.ui.session import ChatSession

logger = logging.getLogger(__name__)

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: #f5f5f5; min-height: 100vh; }

    .app-container {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .header { border-bottom: 1px solid #e5e7eb; }

    .message-user {
        background: #1f2937;
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .swatch {
        border-radius: 12px;
        min-width: 140px;
        cursor: pointer;
        transition: transform 0.15s;
    }
    .swatch:hover { transform: translateY(-2px); }

    .typing-dot {
        width: 8px; height: 8px;
        background: #6b7280;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .input-box {
        background: #f9fafb;
        border: 1px solid #e5e7eb;
        border-radius: 12px;
    }
</style>
"""

# Plain Enter sends; Shift+Enter inserts a newline
SEND_ON_ENTER = "keydown.enter.exact.prevent"

STATUS_MESSAGES = {
    "received": "Request received...",
    "generating": "Generating response...",
}


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    session = ChatSession(on_palette_change=lambda: refresh_palette())

    messages_container: ui.column
    palette_row: ui.row
    preview_row: ui.row
    input_field: ui.textarea
    send_btn: ui.button
    json_btn: ui.button
    png_btn: ui.button
    upload: ui.upload

    def render_swatch(color: ColorEntry) -> None:
        text_color = contrast_text_color(color.hex)

        def copy_hex() -> None:
            ui.clipboard.write(color.hex)
            ui.notify(f"Copied {color.hex}", type="positive", timeout=1200)

        with (
            ui.column()
            .classes("swatch p-4 gap-1")
            .style(f"background: {color.hex}; color: {text_color}")
            .on("click", copy_hex)
        ):
            ui.label(color.name).classes("text-sm font-semibold")
            ui.label(color.hex).classes("text-xs font-mono")
            ui.label(f"RGB {color.rgb_string}").classes("text-xs font-mono")

    def refresh_palette() -> None:
        palette_row.clear()
        with palette_row:
            for color in session.palette:
                render_swatch(color)
        json_btn.set_enabled(bool(session.palette))
        png_btn.set_enabled(bool(session.palette))

    def render_message(msg: ChatMessage) -> None:
        is_user = msg.role == "user"
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"

        with ui.row().classes(f"w-full {align}"):
            with ui.column().classes("max-w-[75%] gap-1"):
                if msg.image_preview:
                    ui.image(msg.image_preview).classes("w-72 rounded-xl")
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    if is_user:
                        ui.label(msg.content).classes("text-sm whitespace-pre-line")
                    else:
                        ui.markdown(msg.content).classes("text-sm")
                ui.label(msg.time).classes(
                    f"text-[10px] text-gray-400 {'self-end' if is_user else 'self-start'}"
                )

    def refresh_messages() -> None:
        messages_container.clear()
        with messages_container:
            if not session.messages:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("palette").classes("text-5xl text-gray-300")
                    ui.label("Upload an image to get started").classes(
                        "text-lg text-gray-400"
                    )
            else:
                for msg in session.messages:
                    render_message(msg)

    def refresh_preview() -> None:
        preview_row.clear()
        image = session.pending_image
        if image is None:
            return
        with preview_row:
            ui.image(image.data_url).classes("w-16 h-16 rounded-lg")
            ui.label(f"{image.name} ({image.size_kb:.1f} KB)").classes("text-xs text-gray-500")
            ui.button(icon="close", on_click=remove_image).props("flat round dense")

    def remove_image() -> None:
        session.clear_pending_image()
        refresh_preview()

    async def handle_upload(e: events.UploadEventArguments) -> None:
        data = await e.file.read()
        try:
            session.select_image(e.file.name, data, e.file.content_type)
        except ValueError as err:
            ui.notify(str(err), type="warning")
        upload.reset()
        refresh_preview()

    async def send_message() -> None:
        turn = session.begin_turn(input_field.value or "")
        if turn is None:
            return

        input_field.value = ""
        send_btn.disable()
        refresh_preview()
        refresh_messages()

        with messages_container, ui.row().classes("w-full justify-start") as status_row:
            with ui.element("div").classes("message-assistant px-4 py-3"):
                with ui.row().classes("items-center gap-2"):
                    with ui.row().classes("gap-1"):
                        for _ in range(3):
                            ui.element("div").classes("typing-dot")
                    status_label = ui.label(
                        "Analyzing your image" if turn.image else "Processing your message"
                    ).classes("text-sm text-gray-500 italic")

        response_view: ui.markdown | None = None

        def on_status(status: str) -> None:
            if status in STATUS_MESSAGES and response_view is None:
                status_label.set_text(STATUS_MESSAGES[status])

        def on_chunk(content: str) -> None:
            nonlocal response_view
            session.apply_chunk(content)
            message = session.response_message
            if message is None:
                return
            if response_view is None:
                status_row.delete()
                with (
                    messages_container,
                    ui.row().classes("w-full justify-start"),
                    ui.column().classes("max-w-[75%] gap-1"),
                    ui.element("div").classes("message-assistant px-4 py-3"),
                ):
                    response_view = ui.markdown(message.content).classes("text-sm")
            else:
                response_view.set_content(message.content)

        def finish() -> None:
            send_btn.enable()
            refresh_messages()

        def on_complete() -> None:
            session.complete_turn()
            finish()

        def on_error(error: str) -> None:
            logger.warning(f"Chat stream failed: {error}")
            session.fail_turn(error)
            finish()
            ui.notify(error, type="negative")

        await stream_chat_response(turn, on_chunk, on_status, on_complete, on_error)

    def download_json() -> None:
        if session.palette:
            ui.download.content(export_palette_json(session.palette), JSON_FILENAME)

    def download_png() -> None:
        if session.palette:
            ui.download.content(export_palette_png(session.palette), PNG_FILENAME)

    def new_chat() -> None:
        session.reset()
        refresh_messages()
        refresh_preview()

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-5xl mx-auto app-container").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        # Header
        with ui.row().classes("w-full header px-5 py-3 items-center justify-between"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("palette").classes("text-2xl text-gray-700")
                ui.label("Palette Chat").classes("text-lg font-semibold")
            with ui.row().classes("items-center gap-2"):
                json_btn = ui.button("JSON", icon="download", on_click=download_json).props(
                    "outline dense"
                )
                png_btn = ui.button("PNG", icon="download", on_click=download_png).props(
                    "outline dense"
                )
                ui.button(icon="add", on_click=new_chat).props("flat round")

        # Palette
        palette_row = ui.row().classes("w-full px-5 gap-3")

        # Messages
        with (
            ui.scroll_area().classes("flex-grow w-full bg-gray-50"),
            ui.column().classes("w-full p-5"),
        ):
            messages_container = ui.column().classes("w-full gap-4")
            refresh_messages()

        # Input
        with ui.column().classes("w-full p-4 gap-2 bg-white border-t"):
            preview_row = ui.row().classes("items-center gap-3")
            with ui.row().classes("w-full gap-3 items-end"):
                upload = (
                    ui.upload(on_upload=handle_upload, auto_upload=True, max_files=1)
                    .props('accept="image/*" flat dense')
                    .classes("w-48")
                )
                with ui.element("div").classes("flex-grow input-box px-3 py-2"):
                    input_field = (
                        ui.textarea(placeholder="Ask about your image...")
                        .props("autogrow borderless dense rows=1")
                        .classes("w-full")
                        .on(SEND_ON_ENTER, send_message)
                    )
                send_btn = ui.button(icon="send", on_click=send_message).props(
                    "round unelevated color=dark"
                )

    refresh_palette()


def main() -> None:
    ui.run(title="Palette Chat", port=int(os.getenv("UI_PORT", "8080")), reload=False)


if __name__ == "__main__":
    main()
