"""NiceGUI chat interface with streaming and saved chat history."""

from datetime import datetime

from nicegui import app, ui

from uccai import __version__
from uccai.config import get_server_config
from uccai.conversation import (
    ChatController,
    ChatStore,
    ClientConfig,
    RemoteChat,
    SessionRegistry,
    get_client_config,
)
from uccai.models.chat import Message

CURSOR = " ▍"

SUGGESTIONS = [
    (
        "Python Scripting",
        "Scrape website data securely",
        "Write a Python script to scrape a website",
    ),
    (
        "Physics Concepts",
        "Simplify complex topics",
        "Explain Quantum Entanglement like I'm 5",
    ),
]

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    .brand-badge { background: linear-gradient(135deg, #6366f1 0%, #9333ea 100%); }
    .brand-title {
        background: linear-gradient(90deg, #6366f1 0%, #a855f7 100%);
        -webkit-background-clip: text;
        background-clip: text;
        color: transparent;
    }

    .avatar-user { background: #e4e4e7; color: #52525b; }
    .avatar-model { background: #6366f1; color: white; }
    .avatar-error { background: #fee2e2; color: #ef4444; }
    .body--dark .avatar-user { background: #3f3f46; color: #d4d4d8; }
    .body--dark .avatar-error { background: rgba(127, 29, 29, 0.5); }

    .message-error { color: #ef4444; }

    .chat-item-active { background: #e4e4e7; font-weight: 500; }
    .body--dark .chat-item-active { background: #18181b; }

    .input-box {
        border: 1px solid #e4e4e7;
        border-radius: 16px;
        transition: border-color 0.2s;
    }
    .body--dark .input-box { border-color: #27272a; }
    .input-box:focus-within { border-color: #6366f1; }

    .suggestion {
        border: 1px solid #e4e4e7;
        border-radius: 12px;
        text-align: left;
    }
    .body--dark .suggestion { border-color: #27272a; }

    /* Markdown styling */
    .message-body pre {
        background: #18181b;
        color: #f4f4f5;
        border-radius: 8px;
        padding: 0.75rem 1rem;
        overflow-x: auto;
    }
    .message-body code { font-family: 'Menlo', 'Monaco', monospace; font-size: 0.85em; }
    .message-body a { color: #6366f1; }
</style>
"""


def format_time(timestamp: float) -> str:
    """Format an epoch timestamp as a short clock time."""
    return datetime.fromtimestamp(timestamp).strftime("%I:%M %p")


def build_controller(config: ClientConfig, store: ChatStore) -> ChatController:
    """Wire a controller for one browser from its storage and the chat API."""
    registry = SessionRegistry.from_store(store)
    remote = RemoteChat(config.api_base_url, timeout=config.request_timeout)
    return ChatController(
        registry,
        remote,
        model=config.model_name,
        system_instruction=config.system_instruction,
    )


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    config = get_client_config()
    store = ChatStore(app.storage.user, key=config.storage_key)
    controller = build_controller(config, store)
    dark = ui.dark_mode(store.get_theme() == "dark")

    # Markdown elements of streaming messages, updated in place per fragment
    bubbles: dict[str, ui.markdown] = {}

    scroll_area: ui.scroll_area
    input_field: ui.textarea
    send_btn: ui.button
    drawer: ui.left_drawer

    def render_avatar(message: Message) -> None:
        if message.role == "user":
            css, icon = "avatar-user", "person"
        elif message.errored:
            css, icon = "avatar-error", "smart_toy"
        else:
            css, icon = "avatar-model", "smart_toy"
        with ui.element("div").classes(
            f"w-8 h-8 shrink-0 rounded-full flex items-center justify-center {css}"
        ):
            ui.icon(icon).classes("text-base")

    def render_message(message: Message) -> None:
        is_user = message.role == "user"
        with ui.row().classes("w-full max-w-4xl mx-auto px-4 py-4 gap-4 no-wrap items-start"):
            render_avatar(message)
            with ui.column().classes("flex-1 min-w-0 gap-1"):
                with ui.row().classes("items-center gap-2"):
                    ui.label("You" if is_user else "UCCAI").classes("font-semibold text-sm")
                    ui.label(format_time(message.created_at)).classes("text-xs text-gray-500")
                with ui.element("div").classes("message-body w-full text-sm md:text-base"):
                    if message.errored:
                        ui.label(message.content).classes("message-error")
                    elif message.streaming:
                        bubbles[message.id] = ui.markdown(message.content + CURSOR)
                    else:
                        ui.markdown(message.content)
                if message.role == "model" and not message.streaming and not message.errored:
                    ui.button(
                        icon="content_copy",
                        on_click=lambda m=message: copy_message(m),
                    ).props("flat dense round size=sm color=grey").tooltip("Copy")

    def copy_message(message: Message) -> None:
        ui.clipboard.write(message.content)
        ui.notify("Copied", type="positive", timeout=1500)

    @ui.refreshable
    def transcript_view() -> None:
        bubbles.clear()
        if not controller.messages:
            render_empty_state()
            return
        with ui.column().classes("w-full gap-0 pb-4 pt-2"):
            for message in controller.messages:
                render_message(message)

    def render_empty_state() -> None:
        with ui.column().classes("w-full items-center justify-center text-center gap-4 py-16 px-4"):
            with ui.element("div").classes(
                "w-16 h-16 rounded-2xl flex items-center justify-center shadow-xl"
            ):
                ui.icon("auto_awesome").classes("text-3xl text-indigo-500")
            ui.label("How can I help you?").classes("text-2xl md:text-4xl font-bold brand-title")
            ui.label(
                "I'm UCCAI. Ask me anything about coding, analysis, or creative writing."
            ).classes("text-sm md:text-base text-gray-500 max-w-md")
            with ui.element("div").classes(
                "grid grid-cols-1 md:grid-cols-2 gap-3 w-full max-w-2xl mt-8"
            ):
                for title, subtitle, prompt in SUGGESTIONS:
                    with ui.element("div").classes(
                        "suggestion p-4 cursor-pointer hover:bg-gray-100 dark:hover:bg-zinc-800"
                    ).on("click", lambda p=prompt: send_message(p)):
                        ui.label(title).classes("font-semibold text-sm md:text-base")
                        ui.label(subtitle).classes("text-xs text-gray-500")

    @ui.refreshable
    def history_list() -> None:
        sessions = controller.sessions
        if not sessions:
            with ui.column().classes("w-full items-center justify-center h-40 gap-3"):
                ui.icon("chat_bubble_outline").classes("text-2xl text-gray-400")
                ui.label("No chat history yet.").classes("text-xs text-gray-500")
            return

        ui.label("Recent").classes(
            "px-4 py-2 text-xs font-semibold text-gray-500 uppercase tracking-wider"
        )
        for session in sessions:
            active = session.id == controller.current_session_id
            with ui.row().classes(
                f"w-full items-center no-wrap rounded-lg px-1 {'chat-item-active' if active else ''}"
            ):
                with ui.row().classes(
                    "flex-1 min-w-0 items-center gap-3 px-2 py-3 cursor-pointer no-wrap"
                ).on("click", lambda s=session.id: load_chat(s)):
                    ui.icon("chat").classes(
                        f"text-base {'text-indigo-500' if active else 'text-gray-400'}"
                    )
                    ui.label(session.title or "New Chat").classes("truncate text-sm")
                ui.button(
                    icon="delete_outline",
                    on_click=lambda s=session.id: delete_chat(s),
                ).props("flat dense round size=sm color=grey").tooltip("Delete chat")

    def on_change(message: Message | None) -> None:
        if message is not None and message.id in bubbles:
            bubbles[message.id].set_content(message.content + CURSOR)
        else:
            transcript_view.refresh()
            history_list.refresh()
            if controller.busy:
                send_btn.disable()
            else:
                send_btn.enable()
        scroll_area.scroll_to(percent=1.0)

    async def send_message(text: str | None = None) -> None:
        value = input_field.value if text is None else text
        if not value or not value.strip() or controller.busy:
            return

        input_field.value = ""
        result = await controller.send_message(value)
        if result is not None and result.errored:
            ui.notify(result.content, type="negative")

    def new_chat() -> None:
        controller.start_new_chat()

    def load_chat(session_id: str) -> None:
        controller.load_chat(session_id)

    def delete_chat(session_id: str) -> None:
        controller.delete_chat(session_id)

    def toggle_theme() -> None:
        dark.value = not dark.value
        store.set_theme("dark" if dark.value else "light")
        theme_btn.set_text("Light Mode" if dark.value else "Dark Mode")
        theme_btn.props(f"icon={'light_mode' if dark.value else 'dark_mode'}")

    # === Dialogs ===
    with ui.dialog() as confirm_dialog, ui.card().classes("w-full max-w-sm"):
        ui.label(
            "Are you sure you want to delete all chat history? This action cannot be undone."
        ).classes("text-sm")
        with ui.row().classes("w-full justify-end gap-2"):
            ui.button("Cancel", on_click=confirm_dialog.close).props("flat")
            ui.button(
                "Delete all",
                on_click=lambda: confirm_dialog.submit(True),
            ).props("unelevated color=negative")

    async def clear_history() -> None:
        if await confirm_dialog:
            controller.clear_all_history()
            settings_dialog.close()

    with ui.dialog() as settings_dialog, ui.card().classes("w-full max-w-md gap-6"):
        with ui.row().classes("w-full items-center justify-between"):
            ui.label("Settings").classes("text-lg font-semibold")
            ui.button(icon="close", on_click=settings_dialog.close).props("flat round dense")

        ui.label("General").classes("text-xs font-semibold text-gray-500 uppercase")
        with ui.row().classes("w-full items-center justify-between p-3 rounded-xl border"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("monitor").classes("text-gray-500")
                ui.label("Model").classes("text-sm font-medium")
            ui.label(config.model_name).classes("text-[10px] font-mono px-2 py-1 rounded-md border")

        ui.label("Data & Storage").classes("text-xs font-semibold text-gray-500 uppercase")
        ui.button(
            "Clear All History",
            icon="delete",
            on_click=clear_history,
        ).props("outline color=negative").classes("w-full")
        ui.label("Permanently remove all chats from this device.").classes(
            "text-xs text-gray-500"
        )

        ui.label("About").classes("text-xs font-semibold text-gray-500 uppercase")
        with ui.column().classes("w-full p-3 rounded-xl border gap-1"):
            with ui.row().classes("w-full items-center justify-between"):
                ui.label("UCCAI").classes("font-medium")
                ui.badge(f"v{__version__}").props("color=indigo-2 text-color=indigo-8")
            ui.label(
                f"An AI assistant powered by {config.model_name}. Built for speed and precision."
            ).classes("text-xs text-gray-500")

    # === UI Layout ===
    with ui.header(elevated=False).classes(
        "items-center justify-between px-4 h-16 bg-white dark:bg-black text-black dark:text-white border-b"
    ):
        with ui.row().classes("items-center gap-3"):
            ui.button(icon="menu", on_click=lambda: drawer.toggle()).props(
                "flat round dense color=grey"
            ).classes("md:hidden")
            with ui.element("div").classes(
                "w-8 h-8 brand-badge rounded-lg flex items-center justify-center"
            ):
                ui.icon("auto_awesome").classes("text-white text-lg")
            ui.label("UCCAI").classes("font-bold text-xl tracking-tight")
            ui.badge("BETA").props("outline color=grey")
        with ui.row().classes("items-center gap-2 px-3 py-1 rounded-full border"):
            ui.element("div").classes("w-2 h-2 rounded-full bg-green-500 animate-pulse")
            ui.label(config.model_name).classes("text-xs font-medium")

    with ui.left_drawer(value=True, bordered=True).classes("flex flex-col p-0") as drawer:
        with ui.column().classes("w-full p-4"):
            ui.button("New Chat", icon="add", on_click=new_chat).props(
                "outline no-caps"
            ).classes("w-full")
        with ui.scroll_area().classes("flex-grow w-full px-2"):
            history_list()
        with ui.column().classes("w-full p-4 gap-1 border-t"):
            theme_btn = ui.button(
                "Light Mode" if dark.value else "Dark Mode",
                icon="light_mode" if dark.value else "dark_mode",
                on_click=toggle_theme,
            ).props("flat no-caps align=left color=grey").classes("w-full")
            ui.button("Settings", icon="settings", on_click=settings_dialog.open).props(
                "flat no-caps align=left color=grey"
            ).classes("w-full")

    with ui.scroll_area().classes("w-full").style("height: calc(100vh - 12rem)") as scroll_area:
        transcript_view()

    with ui.footer(elevated=False).classes("bg-transparent text-black dark:text-white"):
        with ui.column().classes("w-full max-w-4xl mx-auto gap-2 px-3 pb-3"):
            with ui.row().classes("w-full items-end gap-2 input-box p-2 no-wrap"):
                input_field = (
                    ui.textarea(placeholder="Message UCCAI...")
                    .props("autogrow borderless dense rows=1")
                    .classes("flex-grow")
                    .on("keydown.enter.prevent", lambda: send_message())
                )
                send_btn = ui.button(icon="send", on_click=lambda: send_message()).props(
                    "round unelevated color=indigo"
                )
            ui.label("UCCAI can make mistakes. Please check important information.").classes(
                "hidden md:block w-full text-center text-xs text-gray-500"
            )

    controller.set_listener(on_change)
    controller.start()


def main() -> None:
    """Serve the chat page on its own port, apart from the API."""
    config = get_server_config()
    ui.run(
        title="UCCAI",
        host=config.host,
        port=config.ui_port,
        reload=False,
        storage_secret=config.storage_secret,
    )


if __name__ == "__main__":
    main()
