"""Editor-facing helpers."""

from meshmerge.editor.inspect_field import InspectField

__all__ = ["InspectField"]
