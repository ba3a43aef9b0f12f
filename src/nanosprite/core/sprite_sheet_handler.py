# core/sprite_sheet_handler.py

import math

from PIL import Image, ImageOps

from .config import GRID_COLUMNS
from .frame_rects import FrameSequence


class SpriteSheetHandler:
    def __init__(self, image, frame_sequence=None):
        """
        Initialize the SpriteSheetHandler with a sprite sheet and its frame rects.
        :param image: PIL image of the sprite sheet, or a path to one.
        :param frame_sequence: FrameSequence; defaults to the even 4x2 tiling.
        """
        if not isinstance(image, Image.Image):
            image = Image.open(image)
        self.image = image.convert("RGBA")
        self.frame_sequence = frame_sequence or FrameSequence.default()

    def pixel_box(self, rect):
        """
        Convert a percentage rect into a pixel crop box on this sheet.
        :param rect: FrameRect.
        :return: (left, top, right, bottom) in pixels.
        """
        image_width, image_height = self.image.size
        rect.validate()
        left = math.floor(rect.x * image_width / 100 + 1e-6)
        top = math.floor(rect.y * image_height / 100 + 1e-6)
        right = math.ceil((rect.x + rect.w) * image_width / 100 - 1e-6)
        bottom = math.ceil((rect.y + rect.h) * image_height / 100 - 1e-6)
        # A rect thinner than a pixel still covers the pixel it falls in
        return left, top, max(right, left + 1), max(bottom, top + 1)

    def slice_frames(self):
        """
        Crop every frame out of the sheet at its native resolution.
        :return: List of cropped frames, mirrored where the rect is flipped.
        """
        frames = []
        for rect in self.frame_sequence:
            frame = self.image.crop(self.pixel_box(rect))
            frames.append(ImageOps.mirror(frame) if rect.flipped else frame)
        return frames

    def contact_sheet(self, cell_size=(128, 128), columns=GRID_COLUMNS, gap=4, background=(0, 0, 0, 0)):
        """
        Lay the sliced frames out in a grid, each scaled to fit its cell.
        :param cell_size: (width, height) of each cell.
        :param columns: Cells per row.
        :param gap: Pixels between cells.
        :return: RGBA image with every frame centred in its cell.
        """
        frames = self.slice_frames()
        rows = -(-len(frames) // columns)
        cell_w, cell_h = cell_size
        sheet = Image.new("RGBA", (columns * cell_w + (columns + 1) * gap, rows * cell_h + (rows + 1) * gap), background)

        for idx, frame in enumerate(frames):
            row, col = divmod(idx, columns)
            thumb = frame.copy()
            thumb.thumbnail(cell_size, Image.NEAREST)
            x = gap + col * (cell_w + gap) + (cell_w - thumb.width) // 2
            y = gap + row * (cell_h + gap) + (cell_h - thumb.height) // 2
            sheet.alpha_composite(thumb, (x, y))
        return sheet

    def display_frames(self, columns=GRID_COLUMNS, show=True):
        """
        Display the sliced frames in a grid using matplotlib.
        :param columns: Number of frames per row.
        :param show: Call plt.show() when True.
        :return: The matplotlib figure.
        """
        import matplotlib.pyplot as plt

        frames = self.slice_frames()
        rows = -(-len(frames) // columns)
        fig, axes = plt.subplots(rows, columns, figsize=(10, 5), squeeze=False)
        fig.suptitle("Frames with Light Gray Background", fontsize=16)

        for idx, ax in enumerate(axes.flat):
            ax.axis('off')
            if idx >= len(frames):
                continue
            frame = frames[idx]
            width, height = frame.size

            # Draw a light gray background
            gray_background = Image.new('RGBA', frame.size, 'lightgray')
            ax.imshow(gray_background, extent=[0, width, 0, height])

            # Draw the frame on top of the background
            ax.imshow(frame, extent=[0, width, 0, height])

            ax.set_aspect('equal')
            rect = self.frame_sequence[idx]
            title = f"Frame {idx + 1}"
            if rect.flipped:
                title += " (flipped)"
            ax.set_title(title)

        plt.tight_layout()
        if show:
            plt.show()
        return fig
