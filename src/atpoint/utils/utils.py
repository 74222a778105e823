# atpoint/utils/utils.py
"""
atpoint.utils.utils
===================

Configuration loading and small file helpers.

Key functionalities:
- Layered configuration: a hardcoded `DEFAULT_CONFIG` is recursively merged
  with the user's `~/.config/atpoint/config.toml` (or an explicit path), so
  atpoint always starts even if the user file is missing or corrupted.
- Encoding-aware text loading with chardet, used by the command-line
  inspector.
- `deep_merge` for nested dictionaries.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import chardet
import toml

logger = logging.getLogger("atpoint")

CHARDET_SAMPLE_SIZE = 1024 * 20
CHARDET_MIN_CONFIDENCE = 0.75

# Built-in defaults. Per-kind trigger tables live in atpoint.core.DefaultMaps;
# the [keybindings.<kind>] tables here only hold user overrides.
DEFAULT_CONFIG: Dict[str, Any] = {
    "logging": {
        "file_level": "DEBUG",
        "console_level": "WARNING",
        "log_to_console": True,
        "separate_error_log": False,
    },
    "editor": {"use_system_clipboard": True},
    "atpoint": {
        "detectors": [
            "region", "url", "email", "file", "timestamp", "table_cell",
            "heading", "diagnostic", "xref", "function", "variable", "identifier",
        ],
        "default_trigger": "enter",
        "sticky": [],
        "table_modes": ["org", "markdown", "md", "rst", "text"],
        "outline_modes": ["org", "markdown", "md"],
    },
    "keybindings": {},
}


def get_config_dir() -> Path:
    """Returns ``~/.config/atpoint``."""
    return Path.home() / ".config" / "atpoint"


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Loads the defaults and merges the user configuration over them.

    Args:
        path: Configuration file to read. Defaults to
            ``~/.config/atpoint/config.toml``.

    Returns:
        The merged configuration. A missing or unparsable file yields the
        defaults.
    """
    final_config = copy.deepcopy(DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    user_config_path = Path(path).expanduser() if path else get_config_dir() / "config.toml"
    if user_config_path.is_file():
        try:
            user_config = toml.load(user_config_path)
            final_config = deep_merge(final_config, user_config)
            logger.info(f"Successfully loaded and merged user config from {user_config_path}")
        except Exception as e:
            logger.error(f"Could not parse user config '{user_config_path}': {e}. Using defaults.")
    elif path:
        logger.warning(f"Config file '{user_config_path}' not found. Using defaults.")

    return final_config


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into a copy of `base`.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _encodings_to_try(encoding_guess: Optional[str], confidence: float) -> List[Tuple[str, str]]:
    """Orders (encoding, errors) attempts: a confident guess, then utf-8, then latin-1."""
    attempts: List[Tuple[str, str]] = []
    if encoding_guess and confidence >= CHARDET_MIN_CONFIDENCE:
        attempts.append((encoding_guess, "strict"))
    for fallback in (("utf-8", "strict"), ("latin-1", "strict")):
        if fallback not in attempts:
            attempts.append(fallback)
    return attempts


def read_text_file(path: Union[str, Path]) -> Tuple[List[str], str]:
    """
    Reads a text file, guessing its encoding with chardet.

    Args:
        path: File to read.

    Returns:
        The file's lines (without line endings) and the encoding used.

    Raises:
        OSError: If the file cannot be opened or read.
    """
    raw = Path(path).read_bytes()
    if not raw:
        logging.info(f"File '{path}' is empty.")
        return [""], "utf-8"

    result = chardet.detect(raw[:CHARDET_SAMPLE_SIZE])
    encoding_guess = result.get("encoding")
    confidence = result.get("confidence") or 0.0
    logging.debug(
        f"Chardet detected encoding '{encoding_guess}' with confidence {confidence:.2f} for '{path}'."
    )

    for encoding, errors in _encodings_to_try(encoding_guess, confidence):
        try:
            text = raw.decode(encoding, errors=errors)
        except (UnicodeDecodeError, LookupError) as e:
            logging.warning(f"Failed to decode '{path}' with encoding '{encoding}': {e}")
            continue
        logging.info(f"Read '{path}' using encoding '{encoding}'.")
        return text.splitlines() or [""], encoding

    # latin-1 decodes any byte sequence, so this is only reached on a bad guess list.
    return raw.decode("utf-8", errors="replace").splitlines() or [""], "utf-8"
