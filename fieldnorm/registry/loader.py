"""
Annotation overrides loader - attaches directives from YAML to record fields.

For record classes whose source cannot carry annotations (generated code,
third-party models), directives can be declared in a YAML file:

    version: 1
    records:
      myapp.forms.SignupForm:
        email: trim,email
        display_name: trim,name

Loading parses and validates the file; install() resolves each dotted class
path, checks the listed fields exist and hands the directives to the schema
reflector, where they take precedence over in-source annotations.
"""
import importlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from fieldnorm.core.config import settings
from fieldnorm.core.errors import AnnotationConfigError
from fieldnorm.schemas.reflector import describe, is_record_type, register_overrides

logger = logging.getLogger(__name__)

SUPPORTED_VERSIONS = (1,)


@dataclass
class RecordOverrides:
    """Directive overrides for one record class."""

    class_path: str  # dotted import path, e.g. "myapp.forms.SignupForm"
    fields: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, class_path: str, data: Any) -> "RecordOverrides":
        """Parse one record entry from YAML."""
        if not isinstance(data, dict):
            raise AnnotationConfigError(
                f"Record '{class_path}': expected a mapping of field -> directives"
            )

        fields = {}
        for field_name, directives in data.items():
            if not isinstance(directives, str):
                raise AnnotationConfigError(
                    f"Record '{class_path}'.{field_name}: directives must be a string, "
                    f"got {type(directives).__name__}"
                )
            fields[str(field_name)] = directives

        return cls(class_path=class_path, fields=fields)

    def resolve(self) -> type:
        """
        Import the record class named by class_path.

        Raises:
            AnnotationConfigError: If the path cannot be imported or is not a record class
        """
        module_name, _, class_name = self.class_path.rpartition(".")
        if not module_name:
            raise AnnotationConfigError(
                f"Record '{self.class_path}': expected a dotted path 'package.module.Class'"
            )

        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise AnnotationConfigError(f"Record '{self.class_path}': {e}") from e

        record_type = getattr(module, class_name, None)
        if record_type is None:
            raise AnnotationConfigError(
                f"Record '{self.class_path}': module '{module_name}' has no attribute '{class_name}'"
            )
        if not is_record_type(record_type):
            raise AnnotationConfigError(
                f"Record '{self.class_path}' is not a dataclass or pydantic model"
            )
        return record_type


@dataclass
class AnnotationOverrides:
    """Parsed overrides file."""

    version: int
    records: List[RecordOverrides] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "AnnotationOverrides":
        """Parse the full document from YAML."""
        if not isinstance(data, dict):
            raise AnnotationConfigError("Overrides file must be a mapping")

        version = data.get("version")
        if version not in SUPPORTED_VERSIONS:
            raise AnnotationConfigError(
                f"Unsupported overrides version: {version!r} (supported: {SUPPORTED_VERSIONS})"
            )

        records_data = data.get("records") or {}
        if not isinstance(records_data, dict):
            raise AnnotationConfigError("'records' must be a mapping of class path -> fields")

        return cls(
            version=version,
            records=[
                RecordOverrides.from_dict(class_path, record_data)
                for class_path, record_data in records_data.items()
            ],
        )

    def install(self) -> int:
        """
        Register every override with the schema reflector.

        All records are resolved and checked before anything is installed,
        so an invalid file installs nothing.

        Returns:
            Number of field overrides installed

        Raises:
            AnnotationConfigError: If a class cannot be resolved or a field does not exist
        """
        resolved = []
        for record in self.records:
            record_type = record.resolve()
            known = {spec.name for spec in describe(record_type).fields}
            missing = sorted(set(record.fields) - known)
            if missing:
                raise AnnotationConfigError(
                    f"Record '{record.class_path}': unknown field(s) {missing}"
                )
            resolved.append((record_type, record.fields))

        installed = 0
        for record_type, fields in resolved:
            register_overrides(record_type, fields)
            installed += len(fields)

        return installed


class AnnotationLoader:
    """
    Loader for annotation overrides files.

    Parses YAML once and caches the result in memory.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize loader.

        Args:
            path: Path to the overrides YAML file
        """
        self.path = Path(path)
        self._cache: Optional[AnnotationOverrides] = None

    def load(self, force_reload: bool = False) -> AnnotationOverrides:
        """
        Load and validate the overrides file.

        Args:
            force_reload: If True, bypass cache and reload from disk

        Returns:
            Parsed AnnotationOverrides

        Raises:
            AnnotationConfigError: If the file is missing, not YAML, or invalid
        """
        if self._cache and not force_reload:
            return self._cache

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise AnnotationConfigError(f"Cannot read overrides file {self.path}: {e}") from e
        except yaml.YAMLError as e:
            raise AnnotationConfigError(f"Invalid YAML in {self.path}: {e}") from e

        self._cache = AnnotationOverrides.from_dict(data)
        return self._cache

    def install(self) -> int:
        """Load (if needed) and install the overrides. Returns the number installed."""
        installed = self.load().install()
        logger.info("Installed %s field override(s) from %s", installed, self.path)
        return installed


def install_from_settings() -> int:
    """
    Install the overrides file named by FIELDNORM_ANNOTATIONS_FILE, if any.

    Returns:
        Number of field overrides installed (0 when no file is configured)
    """
    if not settings.ANNOTATIONS_FILE:
        return 0
    return AnnotationLoader(settings.ANNOTATIONS_FILE).install()
