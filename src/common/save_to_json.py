import json
from pathlib import Path

from pydantic import BaseModel

from common.logger import logger


def _default(value):
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, Path):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def save_to_json(data, file_path) -> bool:
    """Save data (pydantic models included) to a JSON file; True on success."""
    try:
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with file_path.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=4, default=_default)

        logger.debug(f"Saved {file_path}")
        return True
    except (TypeError, OSError) as e:
        logger.error(f"Error saving to JSON: {e}")
        return False
