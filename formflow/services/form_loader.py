"""Form document codec and loader.

This module converts form documents between JSON text and ``FormSchema``
models, and loads form documents (JSON or YAML) from a directory with
caching. Serialized documents use camelCase keys and preserve array order.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from formflow.config import get_settings
from formflow.schemas.form import FormSchema
from formflow.logging_config import get_logger

logger = get_logger(__name__)

FORM_EXTENSIONS = (".json", ".yaml", ".yml")


class FormNotFoundError(Exception):
    """Raised when a form document is not found."""
    pass


class FormDocumentError(Exception):
    """Raised when a form document cannot be parsed or has the wrong shape."""
    pass


def form_from_dict(data: Any) -> FormSchema:
    """Build a FormSchema from already-parsed document data.

    Raises:
        FormDocumentError: If the data does not have the form shape
    """
    if not isinstance(data, dict):
        raise FormDocumentError(f"Form document must be an object, got {type(data).__name__}")
    try:
        return FormSchema.model_validate(data)
    except ValidationError as e:
        logger.error(f"Form document validation error: {e}")
        raise FormDocumentError(f"Invalid form document: {e}")


def form_to_dict(form: FormSchema) -> dict:
    """Convert a form to a JSON-compatible dict with document keys."""
    return form.model_dump(mode="json", by_alias=True, exclude_none=True)


def deserialize_form(text: Union[str, bytes]) -> FormSchema:
    """Parse a JSON form document.

    Args:
        text: UTF-8 JSON text

    Returns:
        Validated FormSchema

    Raises:
        FormDocumentError: If the text is not valid JSON or not a form

    Example:
        >>> form = deserialize_form('{"id": "f1", "title": "T", "steps": []}')
        >>> form.id
        'f1'
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON form document: {e}")
        raise FormDocumentError(f"Invalid JSON format: {e}")
    return form_from_dict(data)


def serialize_form(form: FormSchema, indent: Optional[int] = 2) -> str:
    """Serialize a form to JSON text.

    Absent optional properties are omitted rather than written as null.
    """
    return json.dumps(form_to_dict(form), indent=indent, ensure_ascii=False)


class FormLoader:
    """Service for loading and caching form documents.

    Forms are loaded from ``<forms_dir>/<form_id>.json`` (or ``.yaml`` /
    ``.yml``) and validated against the Pydantic schemas. Results are cached.
    """

    def __init__(self, forms_dir: Optional[Union[str, Path]] = None):
        """Initialize form loader.

        Args:
            forms_dir: Path to forms directory (defaults to settings.forms_dir)
        """
        if forms_dir is None:
            forms_dir = get_settings().forms_dir

        self.forms_dir = Path(forms_dir)

        if not self.forms_dir.exists():
            logger.warning(f"Forms directory not found: {self.forms_dir}")

    def _find_path(self, form_id: str) -> Optional[Path]:
        for extension in FORM_EXTENSIONS:
            candidate = self.forms_dir / f"{form_id}{extension}"
            if candidate.exists():
                return candidate
        return None

    @lru_cache(maxsize=128)
    def load_form(self, form_id: str) -> FormSchema:
        """Load and validate a form document.

        Results are cached. Clear cache with ``clear_cache()`` if needed.

        Args:
            form_id: Form identifier (file name without extension)

        Returns:
            Validated FormSchema

        Raises:
            FormNotFoundError: If no document exists for the id
            FormDocumentError: If the document fails parsing or validation
        """
        path = self._find_path(form_id)
        if path is None:
            logger.error(f"Form file not found: {form_id} in {self.forms_dir}")
            raise FormNotFoundError(f"Form '{form_id}' not found in {self.forms_dir}")

        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Error reading form file {path}: {e}")
            raise FormDocumentError(f"Error reading form '{form_id}': {e}")

        if path.suffix == ".json":
            form = deserialize_form(text)
        else:
            try:
                data = yaml.safe_load(text)
            except yaml.YAMLError as e:
                logger.error(f"YAML parsing error for {form_id}: {e}")
                raise FormDocumentError(f"Invalid YAML in form '{form_id}': {e}")
            form = form_from_dict(data)

        logger.info(f"Successfully loaded form: {form_id}", extra={"form_id": form.id})
        return form

    def list_forms(self) -> list[str]:
        """List all available form IDs.

        Returns:
            Sorted form IDs (file names without extension)
        """
        if not self.forms_dir.exists():
            return []

        form_ids = {
            path.stem for path in self.forms_dir.iterdir()
            if path.suffix in FORM_EXTENSIONS
        }

        logger.debug(f"Found {len(form_ids)} forms: {sorted(form_ids)}")
        return sorted(form_ids)

    def clear_cache(self):
        """Clear the form cache."""
        self.load_form.cache_clear()
        logger.info("Form cache cleared")


# Global singleton instance
_loader_instance: Optional[FormLoader] = None


def get_form_loader() -> FormLoader:
    """Get global FormLoader instance.

    Creates singleton instance on first call.
    """
    global _loader_instance
    if _loader_instance is None:
        _loader_instance = FormLoader()
    return _loader_instance
