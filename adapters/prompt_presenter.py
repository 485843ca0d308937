"""Prompt presenter adapters decoupling the version check from Tk dialogs."""

from __future__ import annotations

import logging
import threading
from contextlib import suppress
from typing import Any, Protocol, Sequence

from services.version_check.models import PromptAction

logger = logging.getLogger(__name__)


class PromptPresenter(Protocol):
    """Interface for showing a modal prompt and reporting the chosen action."""

    def show_prompt(
        self,
        title: str,
        message: str,
        actions: Sequence[PromptAction],
    ) -> PromptAction | None:
        """Block until the user picks an action; ``None`` if the prompt was dismissed."""


def default_action(actions: Sequence[PromptAction]) -> PromptAction | None:
    for action in actions:
        if action.is_default:
            return action
    return actions[-1] if actions else None


def cancel_action(actions: Sequence[PromptAction]) -> PromptAction | None:
    for action in actions:
        if action.is_cancel:
            return action
    return None


class TkPromptPresenter:
    """Show prompts in a Tk ``Toplevel`` owned by ``master``.

    Worker threads hand the dialog to the Tk main loop via ``after`` and wait
    for the user's choice, giving up with ``None`` once ``master`` is destroyed;
    calls made on the main thread run the dialog inline.
    """

    def __init__(self, master: Any, *, wrap_length: int = 360, poll_interval: float = 0.1) -> None:
        self._master = master
        self._wrap_length = wrap_length
        self._poll_interval = poll_interval

    def show_prompt(
        self,
        title: str,
        message: str,
        actions: Sequence[PromptAction],
    ) -> PromptAction | None:
        if threading.current_thread() is threading.main_thread():
            return self._run_dialog(title, message, actions)

        done = threading.Event()
        chosen: dict[str, PromptAction | None] = {"action": None}

        def _show() -> None:
            try:
                chosen["action"] = self._run_dialog(title, message, actions)
            finally:
                done.set()

        try:
            self._master.after(0, _show)
        except Exception:
            logger.debug("Unable to schedule prompt on the Tk main loop", exc_info=True)
            return None
        while not done.wait(self._poll_interval):
            if not self._master_alive():
                logger.debug("Tk main loop went away before the prompt was shown")
                return None
        return chosen["action"]

    def _master_alive(self) -> bool:
        try:
            return bool(self._master.winfo_exists())
        except Exception:
            # Tk raises TclError once the interpreter is destroyed.
            return False

    def _run_dialog(
        self,
        title: str,
        message: str,
        actions: Sequence[PromptAction],
    ) -> PromptAction | None:
        import tkinter as tk
        from tkinter import ttk

        try:
            dialog = tk.Toplevel(self._master)
        except tk.TclError:
            logger.debug("Unable to create prompt window", exc_info=True)
            return None

        chosen: dict[str, PromptAction | None] = {"action": None}

        def _choose(action: PromptAction | None) -> None:
            chosen["action"] = action
            with suppress(tk.TclError):
                dialog.grab_release()
            dialog.destroy()

        dialog.title(title)
        dialog.resizable(False, False)
        with suppress(tk.TclError):
            dialog.transient(self._master)
        dialog.protocol("WM_DELETE_WINDOW", lambda: _choose(cancel_action(actions)))

        body = ttk.Label(dialog, text=message, wraplength=self._wrap_length, justify="left")
        body.pack(fill="x", padx=20, pady=(20, 10))

        buttons = ttk.Frame(dialog)
        buttons.pack(fill="x", padx=20, pady=(0, 20))
        for action in actions:
            button = ttk.Button(buttons, text=action.label, command=lambda a=action: _choose(a))
            button.pack(side="right", padx=(8, 0))
            if action.is_default:
                with suppress(tk.TclError):
                    button.focus_set()
                dialog.bind("<Return>", lambda _event, a=action: _choose(a))
            if action.is_cancel:
                dialog.bind("<Escape>", lambda _event, a=action: _choose(a))

        with suppress(tk.TclError):
            dialog.grab_set()
        self._master.wait_window(dialog)
        return chosen["action"]


__all__ = ["PromptPresenter", "TkPromptPresenter", "cancel_action", "default_action"]
