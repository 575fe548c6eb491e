import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pygame
import pytest

from controls import ParameterPanel
from galaxy import GalaxyParameters
from scene import GalaxyScene
from visualization import Visualizer


@pytest.fixture
def window():
    params = GalaxyParameters(count=200)
    panel = ParameterPanel(params, on_regenerate=lambda: scene.regenerate())
    scene = GalaxyScene(params, seed=5)
    visualizer = Visualizer(panel, {"window_size": [800, 600]})
    pygame.event.clear()
    yield visualizer, scene, params
    visualizer.close()


def post(event_type, **attributes):
    pygame.event.post(pygame.event.Event(event_type, **attributes))


def test_scene_area_leaves_room_for_panel(window):
    visualizer, _, _ = window
    assert (visualizer.scene_width, visualizer.scene_height) == (400, 600)


def test_slider_drag_and_release_regenerates_once(window):
    visualizer, scene, params = window
    track = visualizer._track_for(visualizer.panel.control("radius"))

    post(pygame.MOUSEBUTTONDOWN, pos=(track.centerx, track.centery), button=1)
    post(pygame.MOUSEMOTION, pos=(track.right - 10, track.centery), rel=(1, 0), buttons=(1, 0, 0))
    post(pygame.MOUSEMOTION, pos=(track.right, track.centery), rel=(10, 0), buttons=(1, 0, 0))
    post(pygame.MOUSEBUTTONUP, pos=(track.right, track.centery), button=1)

    assert visualizer.draw(scene)
    assert params.radius == 20
    assert scene.generation == 2


def test_drag_without_release_does_not_regenerate(window):
    visualizer, scene, params = window
    spin_speed = visualizer.panel.control("rotate")
    track = visualizer._track_for(spin_speed)

    post(pygame.MOUSEBUTTONDOWN, pos=(track.centerx, track.centery), button=1)
    post(pygame.MOUSEMOTION, pos=(track.right, track.centery), rel=(20, 0), buttons=(1, 0, 0))

    assert visualizer.draw(scene)
    assert params.rotate == 5.0
    assert spin_speed.editing
    assert scene.generation == 1


def test_color_channel_release_regenerates(window):
    visualizer, scene, params = window
    green = visualizer.panel.control("outside_color").channels[1]
    track = visualizer._track_for(green)

    post(pygame.MOUSEBUTTONDOWN, pos=(track.right, track.centery), button=1)
    post(pygame.MOUSEBUTTONUP, pos=(track.right, track.centery), button=1)

    assert visualizer.draw(scene)
    assert params.outside_color == "#00ffff"
    assert scene.generation == 2


def test_drag_in_scene_area_orbits_camera(window):
    visualizer, scene, params = window
    start = visualizer.camera.position.copy()

    post(pygame.MOUSEBUTTONDOWN, pos=(200, 300), button=1)
    post(pygame.MOUSEMOTION, pos=(260, 300), rel=(60, 0), buttons=(1, 0, 0))
    post(pygame.MOUSEBUTTONUP, pos=(260, 300), button=1)

    assert visualizer.draw(scene)
    assert visualizer.camera.update()
    assert not np.allclose(visualizer.camera.position, start)
    assert scene.generation == 1
    assert params.as_dict() == GalaxyParameters(count=200).as_dict()


def test_quit_event_stops_drawing(window):
    visualizer, scene, _ = window
    post(pygame.QUIT)
    assert not visualizer.draw(scene)


def test_escape_stops_drawing(window):
    visualizer, scene, _ = window
    post(pygame.KEYDOWN, key=pygame.K_ESCAPE, mod=0, unicode="\x1b", scancode=41)
    assert not visualizer.draw(scene)
