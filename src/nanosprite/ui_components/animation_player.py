# ui_components/animation_player.py

import time

from PIL import ImageTk

from nanosprite.core.config import TICK_INTERVAL_MS


class TkTickSource:
    """Repaint-driven tick source backed by a tkinter widget's after() loop."""

    def __init__(self, widget, interval_ms=TICK_INTERVAL_MS, clock=time.monotonic):
        self.widget = widget
        self.interval_ms = interval_ms
        self.clock = clock

    def request_tick(self, callback):
        return self.widget.after(self.interval_ms, lambda: callback(self.clock() * 1000))

    def cancel_tick(self, handle):
        self.widget.after_cancel(handle)


class AnimationPlayer:
    """Shows a session's preview in a Label and repaints it whenever the session changes."""

    def __init__(self, session, image_label, text_label=None):
        self.session = session
        self.image_label = image_label
        self.text_label = text_label
        self.session.add_listener(self._on_session_changed)

    @property
    def is_playing(self):
        return self.session.scheduler is not None and self.session.scheduler.running

    def play(self):
        if self.session.sheet is None or self.is_playing:
            return
        self.session.start()
        self._render_current_frame()

    def pause(self):
        self.session.stop()

    def toggle(self):
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def go_to_frame(self, frame_index):
        if self.session.sheet is None:
            return
        self.session.seek(frame_index)

    def close(self):
        self.session.close()
        if self._on_session_changed in self.session.listeners:
            self.session.listeners.remove(self._on_session_changed)

    def _on_session_changed(self, session):
        self._render_current_frame()

    def _render_current_frame(self):
        if not self.image_label.winfo_exists():
            self.close()
            return
        if self.session.sheet is None:
            self.image_label.config(image='', text="[No Sheet]")
            return

        img = ImageTk.PhotoImage(self.session.render_preview())
        self.image_label.config(image=img)
        # Keep a reference so tkinter does not drop the image
        self.image_label.image = img

        if self.text_label:
            rect = self.session.sheet.frame_sequence[self.session.current_index]
            self.text_label.config(
                text=f"Frame {self.session.current_index + 1} / {self.session.frame_count}  "
                     f"x={rect.x} y={rect.y} w={rect.w} h={rect.h}{'  flipped' if rect.flipped else ''}"
            )
