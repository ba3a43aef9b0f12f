# main.py

import argparse
import sys
from tkinter import Tk, Frame, Label, Button, Checkbutton, BooleanVar, messagebox

from nanosprite.core.config import EditBounds, PreviewSettings
from nanosprite.core.errors import DecodeFailure
from nanosprite.core.grid_anchor import generate_anchor
from nanosprite.core.session import SpriteSheetSession
from nanosprite.ui_components.animation_player import AnimationPlayer, TkTickSource

OVERLAY_LABELS = (
    ("onion_skin", "Ghosting"),
    ("guides", "Grid"),
    ("anchor_line", "Horizon"),
    ("outline", "Outline"),
    ("hitbox", "Hitbox"),
)


class MainApplication:
    def __init__(self, root, sheet_path, settings=None):
        self.root = root
        self.root.title("NanoSprite Preview")
        self.session = SpriteSheetSession(TkTickSource(root), settings, EditBounds.slider_defaults())
        self.session.import_sheet(sheet_path)

        self.current_frame = Frame(self.root)
        self.current_frame.pack(fill='both', expand=True)

        image_label = Label(self.current_frame)
        image_label.pack(pady=10)
        text_label = Label(self.current_frame, text="", font=('Arial', 9))
        text_label.pack()
        self.player = AnimationPlayer(self.session, image_label, text_label)

        control_frame = Frame(self.current_frame)
        control_frame.pack(fill='x', padx=10, pady=5)
        Button(control_frame, text="<", command=self.prev_frame).pack(side='left')
        Button(control_frame, text="Play / Pause", command=self.player.toggle).pack(side='left', padx=5)
        Button(control_frame, text=">", command=self.next_frame).pack(side='left')
        Button(control_frame, text="Flip", command=self.flip_current).pack(side='left', padx=5)

        toggle_frame = Frame(self.current_frame)
        toggle_frame.pack(fill='x', padx=10, pady=5)
        self.overlay_vars = {}
        for name, text in OVERLAY_LABELS:
            var = BooleanVar(value=getattr(self.session.settings.overlays, name))
            Checkbutton(toggle_frame, text=text, variable=var,
                        command=lambda n=name, v=var: self.session.set_overlay(n, v.get())).pack(side='left')
            self.overlay_vars[name] = var

        self.root.protocol("WM_DELETE_WINDOW", self.close)
        self.player.play()

    def prev_frame(self):
        self.player.pause()
        self.player.go_to_frame(self.session.current_index - 1)

    def next_frame(self):
        self.player.pause()
        self.player.go_to_frame(self.session.current_index + 1)

    def flip_current(self):
        self.session.toggle_flip(self.session.current_index)

    def close(self):
        self.player.close()
        self.root.destroy()


def build_parser():
    parser = argparse.ArgumentParser(description="Preview an 8-frame 4x2 sprite sheet as a looping animation.")
    parser.add_argument("sheet", nargs="?", help="Path to the sprite sheet image")
    parser.add_argument("--fps", type=float, default=None, help="Playback rate (1-60)")
    parser.add_argument("--zoom", type=float, default=None, help="Preview zoom (0.5-3.0)")
    for name, text in OVERLAY_LABELS:
        flag = name.replace("_", "-")
        parser.add_argument(f"--{flag}", dest=name, action=argparse.BooleanOptionalAction, default=None,
                            help=f"Toggle the {text.lower()} overlay")
    parser.add_argument("--write-anchor", metavar="PATH", help="Save the 4x2 reference grid image and exit")
    return parser


def settings_from_args(args):
    settings = PreviewSettings()
    if args.fps is not None:
        settings.set_fps(args.fps)
    if args.zoom is not None:
        settings.set_zoom(args.zoom)
    for name, _ in OVERLAY_LABELS:
        value = getattr(args, name)
        if value is not None:
            settings.set_overlay(name, value)
    return settings


def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.write_anchor:
        generate_anchor().save(args.write_anchor)
        print(f"✅ Reference grid saved to: {args.write_anchor}")
        return 0

    if not args.sheet:
        print("❌ ERROR: A sprite sheet path is required unless --write-anchor is given.")
        return 2

    root = Tk()
    try:
        MainApplication(root, args.sheet, settings_from_args(args))
    except DecodeFailure as e:
        messagebox.showerror("Error", f"Failed to load sprite sheet: {e}")
        root.destroy()
        return 1
    root.mainloop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
