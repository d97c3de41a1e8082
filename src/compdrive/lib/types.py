"""Stable domain identifier newtypes."""

from typing import NewType

DiagnosticCode = NewType("DiagnosticCode", int)
EngineName = NewType("EngineName", str)
LocaleName = NewType("LocaleName", str)
