"""Durable storage of messaging session credentials."""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class JsonCredentialStore:
    """
    Session credentials as a JSON object in one file.
    
    Writes go to a temp file that replaces the target, so a crash never
    leaves a half-written credential file behind.
    """
    
    def __init__(self, path: str) -> None:
        self.path = Path(path)
    
    def load(self) -> Optional[Dict[str, Any]]:
        """Stored credentials, or None when absent or unreadable."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable messaging credentials at {self.path}: {e}")
            return None
        if not isinstance(data, dict) or not data:
            logger.warning(f"Ignoring malformed messaging credentials at {self.path}")
            return None
        return data
    
    def save(self, credentials: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(credentials), encoding="utf-8")
        os.replace(tmp, self.path)
        logger.info(f"Saved messaging credentials to {self.path}")
    
    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to remove messaging credentials at {self.path}: {e}")
            return
        logger.info("Cleared messaging credentials")
