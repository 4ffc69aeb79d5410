"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Chat transcript display with streaming updates
    - Sidebar with saved chats (select, delete, new chat)
    - Settings dialog with bulk history clearing
    - Dark/light theme support

Contains no reconciliation logic. Delegates every action to ChatController.
"""
