import pytest

pytest.importorskip("tkinter")

from nanosprite.core.session import SpriteSheetSession
from nanosprite.ui_components.animation_player import AnimationPlayer, TkTickSource


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class FakeLabel:
    def __init__(self):
        self.options = {}
        self.exists = True

    def config(self, **options):
        self.options.update(options)

    def winfo_exists(self):
        return self.exists


def test_tick_source_uses_after(fake_widget):
    clock = FakeClock()
    clock.now = 1.5
    source = TkTickSource(fake_widget, interval_ms=16, clock=clock)
    seen = []
    source.request_tick(seen.append)
    assert fake_widget.delays == [16]
    fake_widget.fire()
    assert seen == [1500.0]

    source.request_tick(seen.append)
    handle = source.request_tick(seen.append)
    source.cancel_tick(handle)
    assert handle not in fake_widget.scheduled


def test_session_plays_through_widget_loop(fake_widget, sheet_image):
    clock = FakeClock()
    session = SpriteSheetSession(TkTickSource(fake_widget, clock=clock))
    session.load_sheet(sheet_image)
    session.start()

    for step in range(1, 11):
        fake_widget.fire()
        clock.now = step * 0.05
    # Ticks every 50ms at 12 fps advance every other tick after the baseline
    assert session.current_index == 4

    session.stop()
    assert fake_widget.scheduled == {}


def test_player_without_sheet_does_nothing(fake_widget):
    label = FakeLabel()
    session = SpriteSheetSession(TkTickSource(fake_widget))
    player = AnimationPlayer(session, label)
    player.play()
    assert not player.is_playing
    player.go_to_frame(3)
    assert session.current_index == 0


def test_player_renders_on_change(fake_widget, sheet_image, monkeypatch):
    rendered = []
    monkeypatch.setattr(
        "nanosprite.ui_components.animation_player.ImageTk.PhotoImage",
        lambda image: rendered.append(image.size) or object(),
    )
    image_label, text_label = FakeLabel(), FakeLabel()
    session = SpriteSheetSession(TkTickSource(fake_widget))
    session.load_sheet(sheet_image)
    player = AnimationPlayer(session, image_label, text_label)

    player.toggle()
    assert player.is_playing
    side = session.settings.canvas_height
    assert rendered[-1] == (side, side)

    player.toggle()
    assert not player.is_playing
    player.go_to_frame(10)
    assert text_label.options["text"].startswith("Frame 3 / 8")

    session.toggle_flip(2)
    assert text_label.options["text"].endswith("flipped")


def test_player_closes_when_label_is_gone(fake_widget, sheet_image, monkeypatch):
    monkeypatch.setattr(
        "nanosprite.ui_components.animation_player.ImageTk.PhotoImage", lambda image: object()
    )
    label = FakeLabel()
    session = SpriteSheetSession(TkTickSource(fake_widget))
    session.load_sheet(sheet_image)
    player = AnimationPlayer(session, label)
    player.play()

    label.exists = False
    session.seek(1)
    assert not player.is_playing
    assert player._on_session_changed not in session.listeners
