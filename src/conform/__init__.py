"""conform - check a directory tree against a declarative specification.

Provides schema-by-example inference, a structural value matcher, a
filesystem tree checker and a concurrent include resolver.
"""

from __future__ import annotations

__version__ = "0.1.0"

from conform.checker import (
    FileNotPresent,
    FilePresent,
    FilesAndFolders,
    FileSpec,
    FolderNotPresent,
    FolderPresent,
    HasLength,
    MatchesRegex,
    MatchesSchema,
    check_folder,
)
from conform.document import ConformDocument, load_document
from conform.errors import (
    CheckIOError,
    ConformError,
    FetchError,
    IncludeCycleError,
    SpecificationError,
)
from conform.problems import Problem
from conform.resolver import HttpFetcher, load_source, resolve
from conform.schema import infer
from conform.validators import MatchProblem, Validator, evaluate, parse_validator
from conform.values import FileFormat, JsonType, parse_document

__all__ = [
    "__version__",
    # Values
    "FileFormat",
    "JsonType",
    "parse_document",
    # Validators
    "MatchProblem",
    "Validator",
    "evaluate",
    "infer",
    "parse_validator",
    # Tree checking
    "FileNotPresent",
    "FilePresent",
    "FilesAndFolders",
    "FileSpec",
    "FolderNotPresent",
    "FolderPresent",
    "HasLength",
    "MatchesRegex",
    "MatchesSchema",
    "Problem",
    "check_folder",
    # Documents and includes
    "ConformDocument",
    "HttpFetcher",
    "load_document",
    "load_source",
    "resolve",
    # Errors
    "CheckIOError",
    "ConformError",
    "FetchError",
    "IncludeCycleError",
    "SpecificationError",
]
