# controls.py
"""
Models for the parameter panel controls.

These classes hold control state (range, step, current value, whether an
edit is in progress) with no drawing code, so the panel's behaviour can be
exercised without a display. The Visualizer maps mouse events onto them.

Edits follow a begin/drag/finish cycle. Every drag value is written through
to the GalaxyParameters at once, but the regeneration callback only runs
when the edit finishes, and only if the value actually changed.
"""
import logging
import math
from typing import Any, Callable, Dict, List, Optional, Union

from constants import COLOR_CONTROLS, CONTROL_ORDER, ROTATE_CONTROL, SLIDER_CONTROLS
from galaxy import GalaxyParameters
from utils import hex_to_rgb, rgb_to_hex

ValueCallback = Callable[[str, Any], None]


def _step_decimals(step: float) -> int:
    """Number of decimals needed to represent multiples of `step`."""
    text = f"{step:.10f}".rstrip('0')
    return len(text.split('.')[1])


class SliderControl:
    """
    A numeric control with a fixed range and step.
    """
    def __init__(
        self,
        key: str,
        label: str,
        minimum: float,
        maximum: float,
        step: float,
        value: float,
        on_input: Optional[ValueCallback] = None,
        on_finish_change: Optional[ValueCallback] = None,
    ):
        if maximum <= minimum or step <= 0:
            raise ValueError(f"Invalid range for control '{key}': [{minimum}, {maximum}] step {step}")
        self.key = key
        self.label = label
        self.minimum = minimum
        self.maximum = maximum
        self.step = step
        self.on_input = on_input
        self.on_finish_change = on_finish_change
        self._decimals = _step_decimals(step)
        self._integral = self._decimals == 0 and float(minimum).is_integer()
        self.value = self.snap(value)
        self.editing = False
        self._value_at_start = self.value

    def snap(self, value: float) -> Union[int, float]:
        """Clamps to the range and rounds to the nearest step."""
        value = min(self.maximum, max(self.minimum, float(value)))
        steps = round((value - self.minimum) / self.step)
        value = min(self.maximum, self.minimum + steps * self.step)
        if self._integral:
            return int(round(value))
        return round(value, self._decimals)

    @property
    def fraction(self) -> float:
        """Position of the value along the track, 0 to 1."""
        return (self.value - self.minimum) / (self.maximum - self.minimum)

    def format_value(self) -> str:
        if self._integral:
            return str(self.value)
        return f"{self.value:.{self._decimals}f}"

    def set_value(self, value: float) -> None:
        """Sets the value without firing callbacks."""
        self.value = self.snap(value)

    def begin_edit(self) -> None:
        self.editing = True
        self._value_at_start = self.value

    def drag_to_fraction(self, fraction: float) -> None:
        """Moves the value to a position along the track during an edit."""
        fraction = min(1.0, max(0.0, fraction))
        new_value = self.snap(self.minimum + fraction * (self.maximum - self.minimum))
        if new_value == self.value:
            return
        self.value = new_value
        if self.on_input is not None:
            self.on_input(self.key, self.value)

    def finish_edit(self) -> bool:
        """
        Ends the edit. Fires on_finish_change if the value moved since
        begin_edit() and returns whether it did.
        """
        if not self.editing:
            return False
        self.editing = False
        changed = not math.isclose(self.value, self._value_at_start, rel_tol=0.0, abs_tol=1e-12)
        if changed and self.on_finish_change is not None:
            self.on_finish_change(self.key, self.value)
        return changed


class ColorControl:
    """
    A color picker made of three 0-255 channel sliders.
    """
    CHANNELS = ('R', 'G', 'B')

    def __init__(
        self,
        key: str,
        label: str,
        value: str,
        on_input: Optional[ValueCallback] = None,
        on_finish_change: Optional[ValueCallback] = None,
    ):
        self.key = key
        self.label = label
        self.on_input = on_input
        self.on_finish_change = on_finish_change
        self.channels: List[SliderControl] = [
            SliderControl(
                f"{key}.{name.lower()}", name, 0, 255, 1, 0,
                on_input=self._channel_input,
                on_finish_change=self._channel_finished,
            )
            for name in self.CHANNELS
        ]
        self.set_value(value)

    @property
    def value(self) -> str:
        return rgb_to_hex([channel.value / 255.0 for channel in self.channels])

    @property
    def editing(self) -> bool:
        return any(channel.editing for channel in self.channels)

    def set_value(self, value: str) -> None:
        for channel, component in zip(self.channels, hex_to_rgb(value)):
            channel.set_value(component * 255.0)

    def _channel_input(self, _key: str, _value: Any) -> None:
        if self.on_input is not None:
            self.on_input(self.key, self.value)

    def _channel_finished(self, _key: str, _value: Any) -> None:
        if self.on_finish_change is not None:
            self.on_finish_change(self.key, self.value)


Control = Union[SliderControl, ColorControl]


class ParameterPanel:
    """
    Binds one control per galaxy parameter.

    The panel is the only writer of `params`. Drag values go straight into
    the parameters; `on_regenerate` is called once per finished edit.
    """
    def __init__(self, params: GalaxyParameters, on_regenerate: Callable[[], Any]):
        self.params = params
        self.on_regenerate = on_regenerate

        sliders = {row[0]: row for row in SLIDER_CONTROLS + [ROTATE_CONTROL]}
        colors = dict(COLOR_CONTROLS)

        self.controls: List[Control] = []
        for key in CONTROL_ORDER:
            value = getattr(params, key)
            if key in sliders:
                _, label, minimum, maximum, step = sliders[key]
                control = SliderControl(
                    key, label, minimum, maximum, step, value,
                    on_input=self._on_input, on_finish_change=self._on_finish_change,
                )
            else:
                control = ColorControl(
                    key, colors[key], value,
                    on_input=self._on_input, on_finish_change=self._on_finish_change,
                )
            self.controls.append(control)
            # Off-grid config values are committed as the panel shows them,
            # so the first generation matches the controls.
            if control.value != value:
                logging.info(f"'{control.label}' adjusted from {value} to {control.value} to match the panel.")
                params.update(key, control.value)
        self._by_key: Dict[str, Control] = {c.key: c for c in self.controls}
        logging.info(f"Parameter panel created with {len(self.controls)} controls.")

    def control(self, key: str) -> Control:
        return self._by_key[key]

    def _on_input(self, key: str, value: Any) -> None:
        self.params.update(key, value)

    def _on_finish_change(self, key: str, value: Any) -> None:
        self.params.update(key, value)
        logging.info(f"'{self._by_key[key].label}' set to {value}. Regenerating galaxy.")
        self.on_regenerate()
