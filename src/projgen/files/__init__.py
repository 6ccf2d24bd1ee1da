"""Synthesized-file engine and the generic file types."""

from projgen.files.base import FileBase
from projgen.files.engine import FileRegistry, SynthOutcome, SynthReport
from projgen.files.ignore import IgnoreFile
from projgen.files.objects import JsonFile, ObjectFile, YamlFile
from projgen.files.sample import SampleDir, SampleFile
from projgen.files.text import TextFile

__all__ = [
    "FileBase",
    "FileRegistry",
    "IgnoreFile",
    "JsonFile",
    "ObjectFile",
    "SampleDir",
    "SampleFile",
    "SynthOutcome",
    "SynthReport",
    "TextFile",
    "YamlFile",
]
