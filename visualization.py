# visualization.py
"""
Handles the window, the parameter panel and mouse input using Pygame.
"""
import logging
from typing import List, Optional, Tuple

import pygame

from camera import OrbitCamera, Viewport
from constants import (
    BACKGROUND_COLOR, DEFAULT_WINDOW_SIZE, FPS, FULLSCREEN,
    UI_BACKGROUND_ALPHA, UI_PANEL_WIDTH, WINDOW_TITLE
)
from controls import ColorControl, ParameterPanel, SliderControl
from renderer import render_points, to_rgb8
from scene import GalaxyScene


# --- Data Contracts ---
#
# class Visualizer:
#   - __init__(self, panel: ParameterPanel, vis_params: Optional[dict] = None):
#     - Inputs:
#       - panel: the parameter panel whose controls are drawn and driven.
#       - vis_params: the "visualization" config section ("fullscreen",
#         "window_size", "device_pixel_ratio").
#     - Side Effects: Initializes Pygame, opens the window and creates the
#       camera and viewport for the scene area.
#
#   - draw(self, scene: GalaxyScene) -> bool:
#     - Outputs: False if the user has quit, True otherwise.
#     - Side Effects: Handles Pygame events (orbit, zoom, panel edits, resize),
#       renders the scene and the panel, flips the display. A finished panel
#       edit regenerates the scene through the panel's callback.
#
#   - tick(self) -> None: waits for the next frame at FPS.

# Panel layout, in pixels
PANEL_MARGIN = 20
TITLE_HEIGHT = 40
SLIDER_BOX_HEIGHT = 52
CHANNEL_ROW_HEIGHT = 20
COLOR_BOX_HEADER = 28
BOX_SPACING = 6
BOX_PADDING = 8
TRACK_HEIGHT = 6
KNOB_RADIUS = 7


class Visualizer:
    """
    Renders the galaxy and the parameter panel, and routes mouse input.
    """
    def __init__(self, panel: ParameterPanel, vis_params: Optional[dict] = None):
        """
        Initializes Pygame and the display window.
        """
        pygame.init()
        pygame.font.init()

        vis_params = vis_params if vis_params is not None else {}
        fullscreen = vis_params.get('fullscreen', FULLSCREEN)

        if fullscreen:
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            width, height = vis_params.get('window_size', DEFAULT_WINDOW_SIZE)
            self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)

        pygame.display.set_caption(WINDOW_TITLE)
        self.clock = pygame.time.Clock()
        self.panel = panel

        # The scene area is the window minus the panel on the right.
        self.scene_width = max(1, width - UI_PANEL_WIDTH)
        self.scene_height = height
        self.camera = OrbitCamera(aspect=self.scene_width / max(1, self.scene_height))
        self.viewport = Viewport(
            self.scene_width, self.scene_height, self.camera,
            device_pixel_ratio=vis_params.get('device_pixel_ratio', 1.0),
        )

        try:
            self.font_title = pygame.font.SysFont("Segoe UI", 16, bold=True)
            self.font_main = pygame.font.SysFont("Segoe UI", 14)
            self.font_main_bold = pygame.font.SysFont("Segoe UI", 14, bold=True)
        except pygame.error:
            logging.warning("Segoe UI font not found, falling back to default sans-serif.")
            self.font_title = pygame.font.SysFont(None, 20, bold=True)
            self.font_main = pygame.font.SysFont(None, 18)
            self.font_main_bold = pygame.font.SysFont(None, 18, bold=True)

        # --- UI Color Palette ---
        self.text_color_title = (255, 255, 255)
        self.text_color_key = (200, 200, 200)
        self.text_color_value = (255, 255, 255)
        self.param_box_color = (60, 60, 60, 160)
        self.track_color = (90, 90, 90)
        self.track_fill_color = (47, 161, 214)
        self.knob_color = (230, 230, 230)
        self.knob_active_color = (255, 204, 0)

        # Track rectangles for hit testing, rebuilt on every layout
        self._tracks: List[Tuple[pygame.Rect, SliderControl]] = []
        self._active_slider: Optional[SliderControl] = None
        self._orbiting = False

        self._build_panel_surface()
        self._layout_panel()

        logging.info(
            f"Visualizer initialized with Pygame display ({width}x{height}), "
            f"scene area {self.scene_width}x{self.scene_height}."
        )

    # --- Layout -------------------------------------------------------------

    def _build_panel_surface(self):
        self.ui_panel_surface = pygame.Surface((UI_PANEL_WIDTH, self.scene_height), pygame.SRCALPHA)
        self.ui_panel_surface.fill((40, 40, 40, UI_BACKGROUND_ALPHA))

    def _layout_panel(self):
        """Computes the box and track rectangles for every control."""
        self._layout = []
        self._tracks = []
        x = self.scene_width + PANEL_MARGIN
        width = UI_PANEL_WIDTH - 2 * PANEL_MARGIN
        y = PANEL_MARGIN + TITLE_HEIGHT

        for control in self.panel.controls:
            if isinstance(control, ColorControl):
                height = COLOR_BOX_HEADER + CHANNEL_ROW_HEIGHT * len(control.channels) + BOX_PADDING
                box = pygame.Rect(x, y, width, height)
                track_y = y + COLOR_BOX_HEADER
                for channel in control.channels:
                    track = pygame.Rect(x + 30, track_y + CHANNEL_ROW_HEIGHT // 2 - TRACK_HEIGHT // 2,
                                        width - 80, TRACK_HEIGHT)
                    self._tracks.append((track, channel))
                    track_y += CHANNEL_ROW_HEIGHT
            else:
                height = SLIDER_BOX_HEIGHT
                box = pygame.Rect(x, y, width, height)
                track = pygame.Rect(x + BOX_PADDING + KNOB_RADIUS, y + 34,
                                    width - 2 * (BOX_PADDING + KNOB_RADIUS), TRACK_HEIGHT)
                self._tracks.append((track, control))
            self._layout.append((box, control))
            y += height + BOX_SPACING

    def resize(self, width: int, height: int):
        """Adapts the scene area, panel and viewport to a new window size."""
        self.screen = pygame.display.get_surface()
        self.scene_width = max(1, width - UI_PANEL_WIDTH)
        self.scene_height = max(1, height)
        self.viewport.resize(self.scene_width, self.scene_height)
        self._build_panel_surface()
        self._layout_panel()
        logging.info(f"Window resized to {width}x{height}.")

    # --- Input --------------------------------------------------------------

    def _track_at(self, pos: Tuple[int, int]) -> Optional[Tuple[pygame.Rect, SliderControl]]:
        for track, slider in self._tracks:
            if track.inflate(0, 2 * KNOB_RADIUS).collidepoint(pos):
                return track, slider
        return None

    def _track_for(self, slider: SliderControl) -> pygame.Rect:
        for track, candidate in self._tracks:
            if candidate is slider:
                return track
        raise KeyError(slider.key)

    def _drag_slider(self, slider: SliderControl, mouse_x: int):
        track = self._track_for(slider)
        slider.drag_to_fraction((mouse_x - track.left) / max(1, track.width))

    def _handle_events(self) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False

            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                logging.info("ESC key pressed. Shutting down visualizer.")
                return False

            if event.type == pygame.VIDEORESIZE:
                self.resize(event.w, event.h)

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                hit = self._track_at(event.pos)
                if hit is not None:
                    _, slider = hit
                    self._active_slider = slider
                    slider.begin_edit()
                    self._drag_slider(slider, event.pos[0])
                elif event.pos[0] < self.scene_width:
                    self._orbiting = True

            elif event.type == pygame.MOUSEMOTION:
                if self._active_slider is not None:
                    self._drag_slider(self._active_slider, event.pos[0])
                elif self._orbiting:
                    self.camera.rotate(event.rel[0], event.rel[1], self.viewport.height)

            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                if self._active_slider is not None:
                    # Change completion: the only point where a regeneration can start.
                    self._active_slider.finish_edit()
                    self._active_slider = None
                self._orbiting = False

            elif event.type == pygame.MOUSEWHEEL:
                if pygame.mouse.get_pos()[0] < self.scene_width:
                    self.camera.zoom(event.y)
        return True

    # --- Drawing ------------------------------------------------------------

    def _draw_scene(self, scene: GalaxyScene):
        framebuffer = render_points(
            scene.point_set, scene.rotation_y, self.camera, self.viewport, BACKGROUND_COLOR
        )
        surface = pygame.surfarray.make_surface(to_rgb8(framebuffer))
        if surface.get_size() != (self.scene_width, self.scene_height):
            surface = pygame.transform.smoothscale(surface, (self.scene_width, self.scene_height))
        self.screen.blit(surface, (0, 0))

    def _draw_track(self, track: pygame.Rect, slider: SliderControl):
        pygame.draw.rect(self.screen, self.track_color, track, border_radius=3)
        filled = track.copy()
        filled.width = int(track.width * slider.fraction)
        pygame.draw.rect(self.screen, self.track_fill_color, filled, border_radius=3)
        knob_color = self.knob_active_color if slider.editing else self.knob_color
        pygame.draw.circle(self.screen, knob_color, (filled.right, track.centery), KNOB_RADIUS)

    def _draw_slider_box(self, box: pygame.Rect, slider: SliderControl):
        label = self.font_main_bold.render(slider.label, True, self.text_color_key)
        self.screen.blit(label, (box.x + BOX_PADDING, box.y + BOX_PADDING))
        value = self.font_main.render(slider.format_value(), True, self.text_color_value)
        self.screen.blit(value, value.get_rect(topright=(box.right - BOX_PADDING, box.y + BOX_PADDING)))
        self._draw_track(self._track_for(slider), slider)

    def _draw_color_box(self, box: pygame.Rect, control: ColorControl):
        label = self.font_main_bold.render(control.label, True, self.text_color_key)
        self.screen.blit(label, (box.x + BOX_PADDING, box.y + BOX_PADDING))

        swatch = pygame.Rect(0, 0, 60, 16)
        swatch.topright = (box.right - BOX_PADDING, box.y + BOX_PADDING)
        pygame.draw.rect(self.screen, pygame.Color(control.value), swatch, border_radius=3)
        hex_text = self.font_main.render(control.value, True, self.text_color_value)
        self.screen.blit(hex_text, hex_text.get_rect(midright=(swatch.left - 8, swatch.centery)))

        for channel in control.channels:
            track = self._track_for(channel)
            name = self.font_main.render(channel.label, True, self.text_color_key)
            self.screen.blit(name, name.get_rect(midleft=(box.x + BOX_PADDING, track.centery)))
            amount = self.font_main.render(channel.format_value(), True, self.text_color_value)
            self.screen.blit(amount, amount.get_rect(midright=(box.right - BOX_PADDING, track.centery)))
            self._draw_track(track, channel)

    def _draw_panel(self, scene: GalaxyScene):
        self.screen.blit(self.ui_panel_surface, (self.scene_width, 0))

        title = self.font_title.render("Galaxy Parameters", True, self.text_color_title)
        self.screen.blit(title, (self.scene_width + PANEL_MARGIN, PANEL_MARGIN))

        for box, control in self._layout:
            pygame.draw.rect(self.screen, self.param_box_color, box, border_radius=6)
            if isinstance(control, ColorControl):
                self._draw_color_box(box, control)
            else:
                self._draw_slider_box(box, control)

        footer = self.font_main.render(
            f"{scene.point_set.count} stars | {self.clock.get_fps():.0f} FPS",
            True, self.text_color_key,
        )
        self.screen.blit(footer, (self.scene_width + PANEL_MARGIN, self.scene_height - PANEL_MARGIN - footer.get_height()))

    def draw(self, scene: GalaxyScene) -> bool:
        """
        Handles events, then draws the galaxy and the panel.

        Returns:
            bool: False if the program should exit, True otherwise.
        """
        if not self._handle_events():
            return False

        self.screen.fill(BACKGROUND_COLOR)
        self._draw_scene(scene)
        self._draw_panel(scene)

        pygame.display.flip()
        return True

    def tick(self):
        """Waits for the next frame."""
        self.clock.tick(FPS)

    @property
    def fps(self) -> float:
        return self.clock.get_fps()

    def close(self):
        """Shuts down Pygame."""
        pygame.font.quit()
        pygame.quit()
