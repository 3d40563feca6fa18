"""
Pure Python Component base class.

Components are attached to an Entity and receive lifecycle callbacks from
the Scene: start() in play mode, on_editor_start() in editor mode,
update(dt) every frame.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from meshmerge import log
from meshmerge.editor.inspect_field import InspectField

if TYPE_CHECKING:
    from meshmerge.scene.entity import Entity
    from meshmerge.scene.scene import Scene


class Component:
    """
    Base class for components.

    inspect_fields      – поля для инспектора (наследуются)
    serializable_fields – имена полей, сохраняемых в данных сцены
    """

    inspect_fields: Dict[str, InspectField] = {
        "enabled": InspectField(path="enabled", label="Enabled", kind="bool"),
    }

    serializable_fields: List[str] = ["enabled"]

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._entity: Optional[Entity] = None
        self._scene: Optional[Scene] = None
        self._started = False

    @classmethod
    def all_inspect_fields(cls) -> Dict[str, InspectField]:
        """Own fields merged over inherited ones (base first)."""
        fields: Dict[str, InspectField] = {}
        for klass in reversed(cls.__mro__):
            fields.update(klass.__dict__.get("inspect_fields", {}))
        return fields

    @property
    def entity(self) -> Optional[Entity]:
        return self._entity

    @entity.setter
    def entity(self, value: Optional[Entity]) -> None:
        self._entity = value

    @property
    def scene(self) -> Optional[Scene]:
        return self._scene

    def type_name(self) -> str:
        return type(self).__name__

    # =========================================================================
    # Lifecycle methods (override in subclasses)
    # =========================================================================

    def start(self) -> None:
        """Called once when component starts (after being added to scene)."""
        pass

    def update(self, dt: float) -> None:
        """Called every frame."""
        pass

    def on_destroy(self) -> None:
        """Called when component is destroyed."""
        pass

    def on_editor_start(self) -> None:
        """Called when editor mode starts."""
        pass

    def on_added_to_entity(self) -> None:
        pass

    def on_removed_from_entity(self) -> None:
        pass

    def on_added(self, scene: Scene) -> None:
        """Called when entity is added to scene."""
        self._scene = scene

    def on_removed(self) -> None:
        """Called when entity is removed from scene."""
        self._scene = None

    # =========================================================================
    # Serialization
    # =========================================================================

    def serialize_data(self) -> Dict[str, Any]:
        fields = self.all_inspect_fields()
        data: Dict[str, Any] = {}
        for name in self.serializable_fields:
            field = fields.get(name)
            if field is None or field.non_serializable:
                continue
            data[name] = field.to_data(field.get_value(self))
        return data

    def deserialize_data(self, data: Dict[str, Any], context: Any = None) -> None:
        if not data:
            return
        fields = self.all_inspect_fields()
        for name, value in data.items():
            field = fields.get(name)
            if field is None or field.non_serializable:
                log.warn(f"[{self.type_name()}] Unknown field '{name}' in serialized data")
                continue
            field.set_value(self, value)

    def serialize(self) -> Dict[str, Any]:
        """Serialize component with type info."""
        return {
            "type": self.type_name(),
            "data": self.serialize_data()
        }


__all__ = ["Component"]
