"""projgen: define a project as components, synthesize its files, run its tasks."""

from projgen.config import VERSION

__version__ = VERSION

from projgen.component import Component  # noqa: E402
from projgen.config import FileOptions, ProjectOptions, StepOptions, TaskOptions  # noqa: E402
from projgen.project import Project  # noqa: E402

__all__ = [
    "Component",
    "FileOptions",
    "Project",
    "ProjectOptions",
    "StepOptions",
    "TaskOptions",
    "__version__",
]
