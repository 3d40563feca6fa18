# meshmerge/editor/inspect_field.py

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from meshmerge import log


@dataclass
class InspectField:
    """
    Описание одного поля для инспектора.

    path      – путь к полю ("enabled", "settings.yield_interval" и т.п.)
    label     – подпись в UI
    kind      – тип виджета: 'float', 'int', 'bool', 'string', 'enum', 'button', ...
    min, max  – ограничения
    step      – шаг (для спинбоксов)
    choices   – для enum: список (value, label)
    getter, setter – если нужно обращаться к полю вручную.
    non_serializable – при True поле не попадает в сохранённые данные
    action    – для kind='button': callable, вызывается при нажатии (принимает объект)
    read_only – виджет будет только для чтения
    """
    path: str | None = None
    label: str | None = None
    kind: str = "float"
    min: float | None = None
    max: float | None = None
    step: float | None = None
    choices: list[tuple[Any, str]] | None = None
    getter: Optional[Callable[[Any], Any]] = None
    setter: Optional[Callable[[Any, Any], None]] = None
    non_serializable: bool = False
    action: Optional[Callable[[Any], None]] = None
    read_only: bool = False

    def get_value(self, obj):
        if self.getter:
            return self.getter(obj)
        if self.path is None:
            raise ValueError("InspectField: path or getter must be set")
        return _resolve_path_get(obj, self.path)

    def set_value(self, obj, value):
        if self.read_only:
            log.warn(f"[InspectField] '{self.path}' is read only")
            return
        if self.setter:
            self.setter(obj, value)
            return
        if self.path is None:
            raise ValueError("InspectField: path or setter must be set")
        _resolve_path_set(obj, self.path, self._coerce(obj, value))

    def press(self, obj) -> None:
        """Button press."""
        if self.kind != "button" or self.action is None:
            raise ValueError(f"InspectField '{self.label}' is not a button")
        self.action(obj)

    def to_data(self, value):
        """Value as stored in serialized data."""
        if isinstance(value, Enum):
            return value.value
        return value

    def _coerce(self, obj, value):
        # enum поля принимают сырое значение из сохранённых данных
        if self.kind == "enum" and self.path is not None:
            current = _resolve_path_get(obj, self.path)
            if isinstance(current, Enum) and not isinstance(value, Enum):
                try:
                    return type(current)(value)
                except ValueError:
                    log.warn(f"[InspectField] Invalid value {value!r} for '{self.path}', keeping {current!r}")
                    return current
        if self.kind == "int" and value is not None:
            value = int(value)
        if self.kind == "float" and value is not None:
            value = float(value)
        if self.min is not None and value is not None and self.kind in ("int", "float"):
            value = max(value, type(value)(self.min))
        if self.max is not None and value is not None and self.kind in ("int", "float"):
            value = min(value, type(value)(self.max))
        return value


def _resolve_path_get(obj, path: str):
    cur = obj
    for part in path.split("."):
        cur = getattr(cur, part)
    return cur


def _resolve_path_set(obj, path: str, value):
    parts = path.split(".")
    cur = obj
    for part in parts[:-1]:
        cur = getattr(cur, part)
    setattr(cur, parts[-1], value)
