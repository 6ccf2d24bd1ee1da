"""Component base class: anything that contributes to a project."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from projgen.project import Project


class Component:
    """A building block of a project.

    Creating a component registers it with its project; registration order
    is the order in which the synthesis phases visit components.
    """

    def __init__(self, project: Project) -> None:
        self.project = project
        project.add_component(self)

    def pre_synthesize(self) -> None:
        """Called before any file is rendered. Settle state here."""

    def synthesize(self) -> None:
        """Called after every file has been written."""

    def post_synthesize(self) -> None:
        """Called last, e.g. to install dependencies."""
