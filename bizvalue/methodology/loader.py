"""Locate and validate methodology JSON files."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from bizvalue.methodology.schema import MethodologyConfig

PACKAGED_METHODOLOGY = Path(__file__).parent / "configs" / "business_value_v2.json"


def load_methodology(file_path: Union[Path, str, None] = None) -> MethodologyConfig:
    """Validate the methodology tables at ``file_path``.

    ``None`` or an empty string selects the packaged tables, which is what
    an unset ``BIZVALUE_METHODOLOGY_PATH`` resolves to.
    """
    path = Path(file_path) if file_path else PACKAGED_METHODOLOGY
    if not path.is_file():
        raise FileNotFoundError(f"Methodology config not found: {path}")
    return MethodologyConfig.model_validate_json(path.read_text())


def get_default_methodology() -> MethodologyConfig:
    return load_methodology()
